from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

@dataclass
class JobOptions:
    output_dir: Path
    dnglab_path: str = ""
    overwrite_existing: bool = False
    verify_readable: bool = False

@dataclass
class Job:
    """One conversion run.

    Either `inputs` (explicit selection, used as given) or `source_folder`
    (scanned for RAW files) supplies the files.
    """
    id: str
    inputs: list[Path]
    options: JobOptions
    source_folder: Path | None = None
    run_folder: Path | None = None
