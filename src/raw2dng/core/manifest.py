from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from pathlib import Path
import csv

from raw2dng.core.conversion_task import ConversionOutcome

@dataclass
class ManifestRow:
    source_path: str
    output_path: str
    status: str  # SUCCESS|FAILED|CANCELLED
    reason: str

    @classmethod
    def from_outcome(cls, outcome: ConversionOutcome) -> "ManifestRow":
        return cls(
            source_path=str(outcome.source_path),
            output_path=str(outcome.output_path),
            status=outcome.status,
            reason=outcome.reason,
        )

class ManifestWriter:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._rows: list[ManifestRow] = []

    def add(self, row: ManifestRow) -> None:
        self._rows.append(row)

    def write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=[fld.name for fld in fields(ManifestRow)])
            w.writeheader()
            for r in self._rows:
                w.writerow(asdict(r))
