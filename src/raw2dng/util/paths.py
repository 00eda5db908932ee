from __future__ import annotations

from pathlib import Path

DNG_SUFFIX = ".dng"

RAW_EXTENSIONS = frozenset({
    "3fr", "ari", "arw", "bay", "cap", "cr2", "cr3", "crw", "data", "dcr",
    "dcs", "dng", "drf", "eip", "erf", "fff", "gpr", "iiq", "k25", "kdc",
    "mdc", "mef", "mos", "mrw", "nef", "nrw", "obm", "orf", "pef", "ptx",
    "pxn", "r3d", "raf", "raw", "rw2", "rwl", "rwz", "sr2", "srf", "srw",
    "x3f",
})

def is_raw(p: Path) -> bool:
    return p.suffix.lower().lstrip(".") in RAW_EXTENSIONS

def is_hidden(p: Path) -> bool:
    """True if the path or any of its parent folders is a dot-entry."""
    return any(part.startswith(".") for part in p.parts)

def dng_output_path(src: Path, output_dir: Path) -> Path:
    """Place `src` in `output_dir` with its extension replaced by .dng."""
    return output_dir / f"{src.stem}{DNG_SUFFIX}"
