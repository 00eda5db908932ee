from __future__ import annotations

from PySide6.QtCore import QThread, Signal

from raw2dng.core.job import Job
from raw2dng.core.pipeline import run_job

class ConversionWorker(QThread):
    state_changed = Signal(object)  # BatchState snapshot
    completed = Signal(object)  # BatchResult
    failed = Signal(str)

    def __init__(self, job: Job) -> None:
        super().__init__()
        self.job = job
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def run(self) -> None:
        try:
            result = run_job(
                job=self.job,
                progress_cb=self.state_changed.emit,
                cancel_cb=lambda: self._cancelled,
            )
            self.completed.emit(result)
        except Exception as e:
            self.failed.emit(str(e))
