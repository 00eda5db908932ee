from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from raw2dng.dng.dnglab_converter import ENV_OVERRIDE, DngLabConverter, is_dnglab_available

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="uses a shell script stand-in")


def _fake_dnglab(tmp_path: Path, body: str) -> Path:
    script = tmp_path / "dnglab"
    script.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return script


# Writes its last argument, like `dnglab convert <in> <out>`
_WRITE_OUTPUT = 'for last; do :; done\nprintf DNG > "$last"\n'


def test_build_command(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_OVERRIDE, raising=False)
    tool = tmp_path / "dnglab"
    tool.write_text("", encoding="utf-8")

    conv = DngLabConverter(dnglab_path=str(tool))
    assert conv.build_command(Path("/in/a.CR2"), Path("/out/a.dng")) == [
        str(tool), "convert", "/in/a.CR2", "/out/a.dng",
    ]

    conv = DngLabConverter(dnglab_path=str(tool), overwrite=True)
    assert "--override" in conv.build_command(Path("/in/a.CR2"), Path("/out/a.dng"))


def test_env_override_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_tool = tmp_path / "env-dnglab"
    env_tool.write_text("", encoding="utf-8")
    cfg_tool = tmp_path / "cfg-dnglab"
    cfg_tool.write_text("", encoding="utf-8")
    monkeypatch.setenv(ENV_OVERRIDE, str(env_tool))

    assert DngLabConverter(dnglab_path=str(cfg_tool)).dnglab_path == str(env_tool)
    assert is_dnglab_available()


@posix_only
def test_convert_success(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_OVERRIDE, raising=False)
    tool = _fake_dnglab(tmp_path, _WRITE_OUTPUT)
    src = tmp_path / "a.cr2"
    src.write_bytes(b"RAW")
    out = tmp_path / "a.dng"

    assert DngLabConverter(dnglab_path=str(tool)).convert(src, out) == ""
    assert out.read_bytes() == b"DNG"


@posix_only
def test_convert_failure_returns_stderr(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_OVERRIDE, raising=False)
    tool = _fake_dnglab(tmp_path, 'echo "unsupported camera model" >&2\nexit 2\n')

    err = DngLabConverter(dnglab_path=str(tool)).convert(tmp_path / "a.cr2", tmp_path / "a.dng")

    assert err == "unsupported camera model"


@posix_only
def test_convert_failure_without_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_OVERRIDE, raising=False)
    tool = _fake_dnglab(tmp_path, "exit 3\n")
    err = DngLabConverter(dnglab_path=str(tool)).convert(tmp_path / "a.cr2", tmp_path / "a.dng")
    assert err == "dnglab exited with code 3"

    tool = _fake_dnglab(tmp_path, "exit 0\n")
    err = DngLabConverter(dnglab_path=str(tool)).convert(tmp_path / "a.cr2", tmp_path / "a.dng")
    assert err == "dnglab reported success but wrote no output"


def test_missing_tool_is_reported_per_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_OVERRIDE, raising=False)
    conv = DngLabConverter()
    conv.dnglab_path = str(tmp_path / "no-such-dnglab")

    err = conv.convert(tmp_path / "a.cr2", tmp_path / "a.dng")

    assert err.startswith("dnglab not found")
    assert ENV_OVERRIDE in err
