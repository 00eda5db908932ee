from __future__ import annotations

from pathlib import Path
import os
import shutil
import subprocess
import sys

from raw2dng.util.errors import DngLabError

ENV_OVERRIDE = "RAW2DNG_DNGLAB_PATH"

class DngLabConverter:
    """Convert one RAW file by running `dnglab convert <input> <output>`.

    dnglab refuses to replace an existing output unless `overwrite` is set.
    """

    def __init__(self, dnglab_path: str = "", overwrite: bool = False) -> None:
        self.overwrite = overwrite
        self.dnglab_path = _resolve_dnglab_path(dnglab_path)

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        cmd = [self.dnglab_path, "convert"]
        if self.overwrite:
            cmd.append("--override")
        cmd += [str(input_path), str(output_path)]
        return cmd

    def run(self, input_path: Path, output_path: Path) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                self.build_command(input_path, output_path),
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise DngLabError(_dnglab_missing_message()) from e

    def convert(self, input_path: Path, output_path: Path) -> str:
        try:
            proc = self.run(input_path, output_path)
        except DngLabError as e:
            return str(e)

        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout or "").strip()
            return detail or f"dnglab exited with code {proc.returncode}"
        if not output_path.exists():
            return "dnglab reported success but wrote no output"
        return ""


def _resolve_dnglab_path(configured: str = "") -> str:
    """Resolve a dnglab executable path.

    Resolution order:
    1) RAW2DNG_DNGLAB_PATH env var (explicit override)
    2) Path configured in settings
    3) Bundled binary next to the app executable (PyInstaller onedir/.app)
    4) PATH lookup
    5) Common install locations
    6) Fallback: "dnglab" (fails per file with a friendly error)
    """
    for candidate in (os.environ.get(ENV_OVERRIDE), configured):
        if candidate and Path(candidate).exists():
            return str(Path(candidate))

    if getattr(sys, "frozen", False):
        exe_dir = Path(sys.executable).resolve().parent
        bundled = exe_dir / "bin" / "dnglab"
        if bundled.exists():
            return str(bundled)

    which = shutil.which("dnglab")
    if which:
        return which

    for cand in ("/opt/homebrew/bin/dnglab", "/usr/local/bin/dnglab", "/usr/bin/dnglab"):
        if Path(cand).exists():
            return cand

    return "dnglab"


def _dnglab_missing_message() -> str:
    return (
        "dnglab not found. Install dnglab, set its path in Settings or "
        f"{ENV_OVERRIDE}, or use the dnglab bundled with the packaged app."
    )


def is_dnglab_available(configured: str = "") -> bool:
    path = _resolve_dnglab_path(configured)
    if path == "dnglab":
        return shutil.which("dnglab") is not None
    return Path(path).exists()
