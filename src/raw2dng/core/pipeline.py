from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from raw2dng.core.access import LocalResource, ResourceRef, local_inputs, local_output, scoped_access
from raw2dng.core.batch_state import BatchState
from raw2dng.core.conversion_task import (
    FAILED,
    PERMISSION_DENIED,
    ConversionOutcome,
    ConversionTask,
)
from raw2dng.core.job import Job
from raw2dng.core.manifest import ManifestRow, ManifestWriter
from raw2dng.core.run_logger import RunLogger
from raw2dng.core.run_summary import ConversionSummary, RunSummary, write_run_summary
from raw2dng.core.scanner import scan_raw_files
from raw2dng.dng.converter import Converter, ConverterFactory
from raw2dng.dng.dnglab_converter import DngLabConverter
from raw2dng.util.errors import (
    AccessDeniedError,
    BatchEmptyError,
    ConversionFailedError,
    OutputCollisionError,
    Raw2DngError,
    ReadError,
    UserCancelledError,
)

ProgressCb = Callable[[BatchState], None]  # receives a snapshot
CancelCb = Callable[[], bool]  # returns True if cancelled

NO_RAW_FILES = "No RAW files found"
FOLDER_DENIED = "Unable to access folder"

_PROBE_BYTES = 16


@dataclass(frozen=True)
class BatchResult:
    overall_success: bool
    summary_message: str
    state: BatchState
    outcomes: list[ConversionOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failures(self) -> list[ConversionOutcome]:
        return [o for o in self.outcomes if o.status == FAILED]


def run_job(job: Job, progress_cb: ProgressCb, cancel_cb: CancelCb) -> BatchResult:
    """Run a job with dnglab as the converter (worker-thread safe)."""
    opts = job.options

    def converter_factory() -> Converter:
        return DngLabConverter(dnglab_path=opts.dnglab_path, overwrite=opts.overwrite_existing)

    output = local_output(opts.output_dir)
    kwargs = dict(
        progress_cb=progress_cb,
        cancel_cb=cancel_cb,
        run_folder=job.run_folder,
        verify_readable=opts.verify_readable,
        run_id=job.id,
    )
    if job.source_folder is not None:
        return run_folder_batch(LocalResource(job.source_folder), output, converter_factory, **kwargs)
    return run_batch(local_inputs(job.inputs), output, converter_factory, **kwargs)


def run_batch(
    inputs: Sequence[ResourceRef],
    output: ResourceRef,
    converter_factory: ConverterFactory,
    progress_cb: ProgressCb | None = None,
    cancel_cb: CancelCb | None = None,
    run_folder: Path | None = None,
    verify_readable: bool = False,
    run_id: str = "",
) -> BatchResult:
    """Convert every input into `output`, one file at a time (worker-thread safe).

    The caller's list is used as given: no extension filtering here.
    Per-file failures are counted and never stop the batch. The returned
    result is the single completion value of the run.

    When `run_folder` is set these are written there, even on cancel:
      - run_log.txt
      - manifest.csv
      - run_summary.json
    """
    publish = progress_cb or (lambda _state: None)
    is_cancelled = cancel_cb or (lambda: False)

    logger = RunLogger(run_folder / "run_log.txt" if run_folder else None)
    logger.log("Batch started.")
    logger.log(f"Inputs: {[str(ref.path) for ref in inputs]}")
    logger.log(f"Output folder: {output.path}")

    state = BatchState()
    tasks = [ConversionTask.for_output(ref, output.path) for ref in inputs]
    outcomes: list[ConversionOutcome] = []
    claimed: dict[Path, Path] = {}
    cancelled = False

    try:
        if not tasks:
            raise BatchEmptyError(NO_RAW_FILES)

        state.start(len(tasks))
        publish(state.snapshot())
        logger.log(state.status_message)

        for i, task in enumerate(tasks):
            if is_cancelled():
                outcomes.extend(ConversionOutcome.cancelled(t) for t in tasks[i:])
                raise UserCancelledError()

            state.begin_item(task.name)
            publish(state.snapshot())

            try:
                _claim_output(claimed, task)
                _convert_task(task, output, converter_factory, verify_readable)
                outcome = ConversionOutcome.success(task)
            except Raw2DngError as e:
                outcome = ConversionOutcome.failure(task, str(e))
            except Exception as e:
                # Converter crashed: counted against this file only
                outcome = ConversionOutcome.failure(task, f"{type(e).__name__}: {e}")

            if not outcome.succeeded:
                logger.log(f"Failed to convert: {task.source.path} - {outcome.reason}")
            outcomes.append(outcome)
            state.record(task.name, outcome)
            publish(state.snapshot())

        message = _summary_message("Conversion complete!", state)
        state.finish("Conversion complete!", has_error=state.failure_count > 0)
    except BatchEmptyError as e:
        message = str(e)
        logger.log(message)
        state.finish(message, has_error=True)
    except UserCancelledError:
        cancelled = True
        message = _summary_message("Conversion cancelled.", state)
        state.finish("Conversion cancelled.", has_error=True)
    finally:
        logger.log(f"Converted: {state.success_count}, Failed: {state.failure_count}")
        if run_folder is not None:
            _write_run_artifacts(run_folder, run_id, inputs, output, outcomes, state, cancelled, verify_readable)

    publish(state.snapshot())
    logger.log("Batch cancelled." if cancelled else "Batch finished.")
    return BatchResult(
        overall_success=(not cancelled and state.total_count > 0 and state.failure_count == 0),
        summary_message=message,
        state=state.snapshot(),
        outcomes=outcomes,
        cancelled=cancelled,
    )


def run_folder_batch(
    folder: ResourceRef,
    output: ResourceRef,
    converter_factory: ConverterFactory,
    progress_cb: ProgressCb | None = None,
    cancel_cb: CancelCb | None = None,
    run_folder: Path | None = None,
    verify_readable: bool = False,
    run_id: str = "",
) -> BatchResult:
    """Scan `folder` for RAW files and convert them.

    Access to the folder is held for the whole run.
    """
    with scoped_access(folder) as granted:
        if not granted:
            state = BatchState()
            state.finish(FOLDER_DENIED, has_error=True)
            if run_folder is not None:
                RunLogger(run_folder / "run_log.txt").log(f"{FOLDER_DENIED}: {folder.path}")
                _write_run_artifacts(run_folder, run_id, [], output, [], state, False, verify_readable)
            if progress_cb:
                progress_cb(state.snapshot())
            return BatchResult(overall_success=False, summary_message=FOLDER_DENIED, state=state)

        inputs = [LocalResource(p) for p in scan_raw_files(folder.path)]
        return run_batch(
            inputs,
            output,
            converter_factory,
            progress_cb=progress_cb,
            cancel_cb=cancel_cb,
            run_folder=run_folder,
            verify_readable=verify_readable,
            run_id=run_id,
        )


def _convert_task(
    task: ConversionTask,
    output: ResourceRef,
    converter_factory: ConverterFactory,
    verify_readable: bool,
) -> None:
    with scoped_access(task.source, output) as granted:
        if not granted:
            raise AccessDeniedError(PERMISSION_DENIED)
        if verify_readable:
            _read_probe(task.source.path)
        error = converter_factory().convert(task.source.path, task.output_path)
        if error:
            raise ConversionFailedError(error)


def _claim_output(claimed: dict[Path, Path], task: ConversionTask) -> None:
    first = claimed.setdefault(task.output_path, task.source.path)
    if first != task.source.path:
        raise OutputCollisionError(
            f"same output name as {first}: {task.output_path.name}"
        )


def _read_probe(path: Path) -> None:
    try:
        with path.open("rb") as f:
            f.read(_PROBE_BYTES)
    except OSError as e:
        raise ReadError(f"read error: {e.strerror or e}") from e


def _summary_message(headline: str, state: BatchState) -> str:
    return (
        f"{headline}\n"
        f"Successfully converted: {state.success_count}\n"
        f"Failed: {state.failure_count}"
    )


def _write_run_artifacts(
    run_folder: Path,
    run_id: str,
    inputs: Sequence[ResourceRef],
    output: ResourceRef,
    outcomes: list[ConversionOutcome],
    state: BatchState,
    cancelled: bool,
    verify_readable: bool,
) -> None:
    manifest = ManifestWriter(run_folder / "manifest.csv")
    for outcome in outcomes:
        manifest.add(ManifestRow.from_outcome(outcome))
    manifest.write()

    summary = RunSummary(
        run_id=run_id or run_folder.name,
        inputs=[str(ref.path) for ref in inputs],
        output_dir=str(output.path),
        settings={"verify_readable": verify_readable},
        conversion=ConversionSummary(
            total=state.total_count,
            success=state.success_count,
            failed=state.failure_count,
            cancelled=cancelled,
        ),
        failures=[
            {"source_path": str(o.source_path), "reason": o.reason}
            for o in outcomes
            if o.status == FAILED
        ],
    )
    write_run_summary(run_folder / "run_summary.json", summary)
