from __future__ import annotations

import subprocess
import sys
from pathlib import Path

def open_in_finder(path: Path) -> None:
    """Open a folder in Finder on macOS; best-effort on other OSes."""
    if sys.platform == "darwin":
        cmd = ["open", str(path)]
    elif sys.platform.startswith("win"):
        cmd = ["explorer", str(path)]
    else:
        cmd = ["xdg-open", str(path)]
    try:
        subprocess.run(cmd, check=False)
    except OSError:
        pass
