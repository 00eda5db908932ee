from __future__ import annotations

from pathlib import Path

from raw2dng.util.paths import is_hidden, is_raw

def scan_raw_files(root: Path) -> list[Path]:
    """Recursively scan a folder and return its RAW files.

    - Hidden files and anything under a hidden folder are skipped.
    - Only regular files with a RAW extension (any case) are kept.
    - Results are sorted by file name so progress order is stable.
    """
    root = root.expanduser()
    if not root.is_dir():
        return []

    found: list[Path] = []
    for child in root.rglob("*"):
        if is_hidden(child.relative_to(root)):
            continue
        if not child.is_file():
            continue
        if is_raw(child):
            found.append(child)

    return sorted(found, key=lambda p: (p.name, str(p)))
