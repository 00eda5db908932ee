from __future__ import annotations

import os
from pathlib import Path
import subprocess
import sys

import pytest

pytest.importorskip("PySide6")


def _run_script(script: str, extra_env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    repo_root = Path(__file__).resolve().parents[1]
    env = os.environ.copy()
    env.update(extra_env or {})
    env["PYTHONPATH"] = str(repo_root / "src")
    env["QT_QPA_PLATFORM"] = "offscreen"
    return subprocess.run(
        [sys.executable, "-c", script],
        cwd=repo_root,
        env=env,
        capture_output=True,
        text=True,
        timeout=30,
    )


def test_main_window_boots() -> None:
    script = """
from PySide6.QtWidgets import QApplication
from raw2dng.core.settings import AppSettings
from raw2dng.gui.main_window import MainWindow
app = QApplication([])
win = MainWindow(AppSettings())
print("main_window_boot_ok", win.convert_btn.isEnabled(), win.cancel_btn.isEnabled())
win.close()
"""
    completed = _run_script(script)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "main_window_boot_ok False False" in completed.stdout


@pytest.mark.skipif(sys.platform.startswith("win"), reason="uses a shell script stand-in")
def test_worker_runs_batch_and_reports_once(tmp_path: Path) -> None:
    src = tmp_path / "in"
    src.mkdir()
    (src / "a.cr2").write_bytes(b"RAW")
    (src / "b.jpg").write_bytes(b"JPG")
    out = tmp_path / "out"
    out.mkdir()
    tool = tmp_path / "dnglab"
    tool.write_text("#!/bin/sh\nfor last; do :; done\nprintf DNG > \"$last\"\n", encoding="utf-8")
    tool.chmod(0o755)

    script = f"""
from pathlib import Path
from PySide6.QtCore import QCoreApplication, QTimer
from raw2dng.core.job import Job, JobOptions
from raw2dng.gui.workers import ConversionWorker

app = QCoreApplication([])
job = Job(
    id="t",
    inputs=[],
    options=JobOptions(output_dir=Path({str(out)!r}), dnglab_path={str(tool)!r}),
    source_folder=Path({str(src)!r}),
)
worker = ConversionWorker(job)
states = []
results = []
worker.state_changed.connect(states.append)
worker.completed.connect(results.append)
worker.completed.connect(lambda _r: app.quit())
worker.failed.connect(lambda err: (print("failed", err), app.quit()))
QTimer.singleShot(20000, app.quit)
worker.start()
app.exec()
worker.wait()
r = results[0]
print("worker_ok", len(results), r.overall_success, r.state.total_count, states[0].running, states[-1].running)
"""
    completed = _run_script(script)
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "worker_ok 1 True 1 True False" in completed.stdout
    assert (out / "a.dng").exists()


@pytest.mark.skipif(sys.platform.startswith("win"), reason="uses a shell script stand-in")
def test_closing_window_mid_run_stops_worker_cleanly(tmp_path: Path) -> None:
    src = tmp_path / "in"
    src.mkdir()
    for name in ("a.cr2", "b.cr2", "c.cr2"):
        (src / name).write_bytes(b"RAW")
    out = tmp_path / "out"
    out.mkdir()
    tool = tmp_path / "dnglab"
    tool.write_text("#!/bin/sh\nsleep 1\nfor last; do :; done\nprintf DNG > \"$last\"\n", encoding="utf-8")
    tool.chmod(0o755)

    script = f"""
from pathlib import Path
from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication
from raw2dng.core.settings import AppSettings
from raw2dng.gui.main_window import MainWindow

app = QApplication([])
win = MainWindow(AppSettings(dnglab_path={str(tool)!r}))
win.show()
win.controller.set_folder(Path({str(src)!r}))
win.controller.set_output_dir(Path({str(out)!r}))
win.controller.start()
QTimer.singleShot(300, win.close)
QTimer.singleShot(15000, app.quit)
app.exec()
print("run_folder", win.controller.last_job.run_folder)
"""
    completed = _run_script(
        script,
        {"XDG_CACHE_HOME": str(tmp_path / "cache"), "XDG_CONFIG_HOME": str(tmp_path / "config")},
    )
    assert completed.returncode == 0, completed.stderr or completed.stdout
    assert "Destroyed while thread" not in completed.stderr
    run_folder = Path(completed.stdout.split("run_folder", 1)[1].strip())
    manifest = (run_folder / "manifest.csv").read_text(encoding="utf-8")
    assert "CANCELLED" in manifest
