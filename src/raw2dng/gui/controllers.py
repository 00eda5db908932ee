from __future__ import annotations

import uuid
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from raw2dng.core.batch_state import BatchState
from raw2dng.core.job import Job, JobOptions
from raw2dng.core.pipeline import BatchResult
from raw2dng.core.settings import AppSettings
from raw2dng.gui.workers import ConversionWorker
from raw2dng.util.paths import is_raw
from raw2dng.util.platform import open_in_finder

class ConversionController(QObject):
    """GUI-thread owner of the current selection and published BatchState.

    Worker snapshots arrive through queued signals and are re-published in
    the order they were emitted. `completed` fires once per started run.
    """
    selection_changed = Signal()
    state_changed = Signal(object)  # BatchState
    completed = Signal(bool, str)  # overall success, summary message

    def __init__(self, settings: AppSettings) -> None:
        super().__init__()
        self.settings = settings
        self.inputs: list[Path] = []
        self.source_folder: Path | None = None
        self.output_dir: Path | None = None
        self.state = BatchState()
        self.last_result: BatchResult | None = None
        self.last_job: Job | None = None
        self._worker: ConversionWorker | None = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None

    @property
    def can_convert(self) -> bool:
        has_inputs = bool(self.inputs) or self.source_folder is not None
        return has_inputs and self.output_dir is not None and not self.is_running

    def set_files(self, paths: list[Path]) -> None:
        self.inputs = list(paths)
        self.source_folder = None
        if self.inputs:
            self.settings.last_input_dir = str(self.inputs[0].parent)
        self.selection_changed.emit()

    def set_folder(self, folder: Path) -> None:
        self.inputs = []
        self.source_folder = folder
        self.settings.last_input_dir = str(folder)
        self.selection_changed.emit()

    def add_dropped(self, paths: list[Path]) -> None:
        """Folders replace the selection; RAW files are appended to it."""
        folders = [p for p in paths if p.is_dir()]
        if folders:
            self.set_folder(folders[0])
            return
        files = [p for p in paths if p.is_file() and is_raw(p)]
        if not files:
            return
        merged = list(self.inputs) if self.source_folder is None else []
        for p in files:
            if p not in merged:
                merged.append(p)
        self.set_files(merged)

    def set_output_dir(self, folder: Path) -> None:
        self.output_dir = folder
        self.settings.last_output_dir = str(folder)
        self.selection_changed.emit()

    def clear_inputs(self) -> None:
        self.inputs = []
        self.source_folder = None
        self.selection_changed.emit()

    def selection_label(self) -> str:
        if self.source_folder is not None:
            return f"Folder: {self.source_folder.name}"
        if not self.inputs:
            return "No files selected"
        names = [p.name for p in self.inputs[:3]]
        if len(self.inputs) > 3:
            names.append(f"and {len(self.inputs) - 3} more...")
        return f"{len(self.inputs)} RAW files\n" + "\n".join(f"• {n}" for n in names)

    def build_job(self) -> Job | None:
        if self.output_dir is None:
            return None
        if not self.inputs and self.source_folder is None:
            return None
        opts = JobOptions(
            output_dir=self.output_dir,
            dnglab_path=self.settings.dnglab_path,
            overwrite_existing=self.settings.overwrite_existing,
            verify_readable=self.settings.verify_readable,
        )
        job = Job(
            id=str(uuid.uuid4()),
            inputs=list(self.inputs),
            options=opts,
            source_folder=self.source_folder,
        )
        if self.settings.write_run_reports:
            job.run_folder = AppSettings.new_run_folder(AppSettings.runs_root())
        return job

    def start(self) -> Job | None:
        if self.is_running:
            return None
        job = self.build_job()
        if job is None:
            return None
        self.last_job = job
        self.last_result = None
        worker = ConversionWorker(job=job)
        self._worker = worker
        worker.state_changed.connect(self._on_state)
        worker.completed.connect(self._on_completed)
        worker.failed.connect(self._on_failed)
        worker.start()
        self.selection_changed.emit()
        return job

    def cancel(self) -> None:
        if self._worker is not None:
            self._worker.cancel()

    def shutdown(self) -> None:
        """Cancel an active run and block until its worker has stopped."""
        worker = self._worker
        if worker is None:
            return
        worker.cancel()
        worker.wait()

    def open_output_folder(self) -> None:
        if self.output_dir is not None:
            open_in_finder(self.output_dir)

    def _on_state(self, state: BatchState) -> None:
        self.state = state
        self.state_changed.emit(state)

    def _on_completed(self, result: BatchResult) -> None:
        self.last_result = result
        self._on_state(result.state)
        self._finish(result.overall_success, result.summary_message)

    def _on_failed(self, err: str) -> None:
        msg = err.strip() or "Conversion failed."
        state = self.state.snapshot()
        state.finish(msg, has_error=True)
        self._on_state(state)
        self._finish(False, msg)

    def _finish(self, success: bool, message: str) -> None:
        worker = self._worker
        self._worker = None
        if worker is not None:
            worker.wait()
            worker.deleteLater()
        self.selection_changed.emit()
        self.completed.emit(success, message)
