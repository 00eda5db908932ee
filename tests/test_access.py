from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from raw2dng.core.access import LocalResource, local_output, scoped_access


@dataclass
class CountingRef:
    path: Path
    grant: bool = True
    calls: list[str] = field(default_factory=list)

    def begin_access(self) -> bool:
        self.calls.append("begin")
        return self.grant

    def end_access(self) -> None:
        self.calls.append("end")


def test_scoped_access_releases_all_granted(tmp_path: Path) -> None:
    a = CountingRef(tmp_path / "a")
    b = CountingRef(tmp_path / "b")
    with scoped_access(a, b) as granted:
        assert granted
    assert a.calls == ["begin", "end"]
    assert b.calls == ["begin", "end"]


def test_scoped_access_only_releases_what_was_acquired(tmp_path: Path) -> None:
    a = CountingRef(tmp_path / "a")
    b = CountingRef(tmp_path / "b", grant=False)
    c = CountingRef(tmp_path / "c")
    with scoped_access(a, b, c) as granted:
        assert not granted
    assert a.calls == ["begin", "end"]
    assert b.calls == ["begin"]
    assert c.calls == []


def test_scoped_access_releases_on_exception(tmp_path: Path) -> None:
    a = CountingRef(tmp_path / "a")
    with pytest.raises(RuntimeError):
        with scoped_access(a):
            raise RuntimeError("boom")
    assert a.calls == ["begin", "end"]


def test_local_resource_permissions(tmp_path: Path) -> None:
    f = tmp_path / "IMG.CR2"
    f.write_bytes(b"x")
    assert LocalResource(f).begin_access()
    assert LocalResource(f).extension == "cr2"
    assert not LocalResource(tmp_path / "missing.cr2").begin_access()
    assert local_output(tmp_path).begin_access()
    assert not local_output(f).begin_access()
