from __future__ import annotations

from dataclasses import dataclass, replace

from raw2dng.core.conversion_task import ConversionOutcome

@dataclass
class BatchState:
    """Observer-visible progress of one conversion run.

    Mutated only by the orchestrator; observers receive copies from
    `snapshot()`.
    """
    running: bool = False
    current_item_name: str = ""
    completed_count: int = 0
    total_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    status_message: str = ""
    has_error: bool = False
    last_error: str = ""

    @property
    def progress(self) -> int:
        if self.total_count <= 0:
            return 0
        return int(100 * self.completed_count / self.total_count)

    def snapshot(self) -> "BatchState":
        return replace(self)

    def start(self, total: int) -> None:
        self.running = True
        self.current_item_name = ""
        self.completed_count = 0
        self.total_count = total
        self.success_count = 0
        self.failure_count = 0
        self.has_error = False
        self.last_error = ""
        self.status_message = f"Found {total} RAW files"

    def begin_item(self, name: str) -> None:
        self.current_item_name = name

    def record(self, name: str, outcome: ConversionOutcome) -> None:
        self.current_item_name = name
        self.completed_count += 1
        if outcome.succeeded:
            self.success_count += 1
        else:
            self.failure_count += 1
            self.last_error = outcome.reason
        self.status_message = f"Converted: {self.success_count}, Failed: {self.failure_count}"

    def finish(self, message: str, has_error: bool) -> None:
        self.running = False
        self.current_item_name = ""
        self.status_message = message
        self.has_error = has_error
