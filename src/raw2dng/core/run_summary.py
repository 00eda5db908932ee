from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
import json
from typing import Any


@dataclass
class ConversionSummary:
    total: int
    success: int
    failed: int
    cancelled: bool = False


@dataclass
class RunSummary:
    run_id: str
    inputs: list[str]
    output_dir: str
    settings: dict[str, Any]
    conversion: ConversionSummary
    failures: list[dict[str, str]] = field(default_factory=list)


def write_run_summary(path: Path, summary: RunSummary) -> None:
    payload = _jsonify(asdict(summary))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _jsonify(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _jsonify(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_jsonify(v) for v in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj
