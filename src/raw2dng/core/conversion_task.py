from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from raw2dng.core.access import ResourceRef
from raw2dng.util.paths import dng_output_path

SUCCESS = "SUCCESS"
FAILED = "FAILED"
CANCELLED = "CANCELLED"

PERMISSION_DENIED = "permission denied"

@dataclass(frozen=True)
class ConversionTask:
    """One input file paired with the DNG path it converts to.

    - source: input file handle (access bracketed per task)
    - output_path: output folder / <source stem>.dng
    """
    source: ResourceRef
    output_path: Path

    @property
    def name(self) -> str:
        return self.source.path.name

    @classmethod
    def for_output(cls, source: ResourceRef, output_dir: Path) -> "ConversionTask":
        return cls(source=source, output_path=dng_output_path(source.path, output_dir))


@dataclass(frozen=True)
class ConversionOutcome:
    source_path: Path
    output_path: Path
    status: str  # SUCCESS|FAILED|CANCELLED
    reason: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def success(cls, task: ConversionTask) -> "ConversionOutcome":
        return cls(task.source.path, task.output_path, SUCCESS)

    @classmethod
    def failure(cls, task: ConversionTask, reason: str) -> "ConversionOutcome":
        return cls(task.source.path, task.output_path, FAILED, reason or "unknown error")

    @classmethod
    def cancelled(cls, task: ConversionTask) -> "ConversionOutcome":
        return cls(task.source.path, task.output_path, CANCELLED, "cancelled")
