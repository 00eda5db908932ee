from __future__ import annotations

from pathlib import Path
from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QFileDialog, QCheckBox, QLineEdit, QProgressBar, QMessageBox, QGroupBox,
    QStyle,
)

from raw2dng.core.batch_state import BatchState
from raw2dng.core.settings import AppSettings
from raw2dng.dng.dnglab_converter import is_dnglab_available
from raw2dng.gui.controllers import ConversionController
from raw2dng.gui.widgets.drop_zone import DropZone
from raw2dng.util.paths import RAW_EXTENSIONS

RAW_FILE_FILTER = "RAW files ({});;All files (*)".format(
    " ".join(f"*.{ext} *.{ext.upper()}" for ext in sorted(RAW_EXTENSIONS))
)

class MainWindow(QMainWindow):
    def __init__(self, settings: AppSettings) -> None:
        super().__init__()
        self.settings = settings
        self.setWindowTitle("RAW to DNG Converter")
        self.resize(560, 620)
        self.setMinimumSize(460, 520)

        self.controller = ConversionController(settings=settings)
        self.controller.selection_changed.connect(self._update_controls)
        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.completed.connect(self._on_completed)

        self._closing = False
        self._build_ui()
        self._update_controls()

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)

        title = QLabel("RAW to DNG Converter")
        font = title.font()
        font.setPointSize(font.pointSize() + 8)
        font.setBold(True)
        title.setFont(font)
        title.setAlignment(Qt.AlignCenter)
        layout.addWidget(title)

        self.drop_zone = DropZone()
        self.drop_zone.paths_dropped.connect(self.controller.add_dropped)
        layout.addWidget(self.drop_zone)

        self.selection_label = QLabel()
        self.selection_label.setWordWrap(True)
        layout.addWidget(self.selection_label)

        pick_row = QHBoxLayout()
        self.files_btn = QPushButton("Select RAW Files")
        self.files_btn.setIcon(self.style().standardIcon(QStyle.SP_FileIcon))
        self.files_btn.clicked.connect(self._choose_files)
        self.folder_btn = QPushButton("Select RAW Folder")
        self.folder_btn.setIcon(self.style().standardIcon(QStyle.SP_DirIcon))
        self.folder_btn.clicked.connect(self._choose_folder)
        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self.controller.clear_inputs)
        pick_row.addWidget(self.files_btn)
        pick_row.addWidget(self.folder_btn)
        pick_row.addWidget(self.clear_btn)
        layout.addLayout(pick_row)

        out_row = QHBoxLayout()
        self.output_btn = QPushButton("Select Output Folder")
        self.output_btn.setIcon(self.style().standardIcon(QStyle.SP_DirOpenIcon))
        self.output_btn.clicked.connect(self._choose_output)
        self.output_label = QLabel("No output folder selected")
        out_row.addWidget(self.output_btn)
        out_row.addWidget(self.output_label, 1)
        layout.addLayout(out_row)

        options = QGroupBox("Options")
        opt_layout = QVBoxLayout(options)
        self.overwrite_chk = QCheckBox("Overwrite existing DNG files")
        self.overwrite_chk.setChecked(self.settings.overwrite_existing)
        self.verify_chk = QCheckBox("Check each file is readable before converting")
        self.verify_chk.setChecked(self.settings.verify_readable)
        self.reports_chk = QCheckBox("Write run log and manifest")
        self.reports_chk.setChecked(self.settings.write_run_reports)
        opt_layout.addWidget(self.overwrite_chk)
        opt_layout.addWidget(self.verify_chk)
        opt_layout.addWidget(self.reports_chk)

        tool_row = QHBoxLayout()
        tool_row.addWidget(QLabel("dnglab:"))
        self.dnglab_edit = QLineEdit(self.settings.dnglab_path)
        self.dnglab_edit.setPlaceholderText("Auto-detect")
        tool_btn = QPushButton("Browse...")
        tool_btn.clicked.connect(self._choose_dnglab)
        tool_row.addWidget(self.dnglab_edit, 1)
        tool_row.addWidget(tool_btn)
        opt_layout.addLayout(tool_row)
        layout.addWidget(options)

        act_row = QHBoxLayout()
        self.convert_btn = QPushButton("Convert Files")
        self.convert_btn.setIcon(self.style().standardIcon(QStyle.SP_MediaPlay))
        self.convert_btn.clicked.connect(self._start)
        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.setIcon(self.style().standardIcon(QStyle.SP_DialogCancelButton))
        self.cancel_btn.clicked.connect(self.controller.cancel)
        self.open_out_btn = QPushButton("Open output folder")
        self.open_out_btn.clicked.connect(self.controller.open_output_folder)
        act_row.addWidget(self.convert_btn)
        act_row.addWidget(self.cancel_btn)
        act_row.addWidget(self.open_out_btn)
        layout.addLayout(act_row)

        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setVisible(False)
        layout.addWidget(self.progress)

        self.current_label = QLabel()
        self.current_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        layout.addWidget(self.current_label)

        self.status_label = QLabel()
        self.status_label.setWordWrap(True)
        self.status_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.status_label)

        layout.addStretch(1)
        hint = QLabel("Supported formats: CR2, NEF, ARW, DNG, ORF, RAF, and more")
        hint.setAlignment(Qt.AlignCenter)
        layout.addWidget(hint)

    def _start_dir(self, value: str) -> str:
        return value if value and Path(value).exists() else str(Path.home())

    @Slot()
    def _choose_files(self) -> None:
        files, _ = QFileDialog.getOpenFileNames(
            self, "Select RAW files", self._start_dir(self.settings.last_input_dir), RAW_FILE_FILTER
        )
        if files:
            self.controller.set_files([Path(f) for f in files])

    @Slot()
    def _choose_folder(self) -> None:
        folder = QFileDialog.getExistingDirectory(
            self, "Select folder with RAW files", self._start_dir(self.settings.last_input_dir)
        )
        if folder:
            self.controller.set_folder(Path(folder))

    @Slot()
    def _choose_output(self) -> None:
        folder = QFileDialog.getExistingDirectory(
            self, "Select output folder", self._start_dir(self.settings.last_output_dir)
        )
        if folder:
            self.controller.set_output_dir(Path(folder))

    @Slot()
    def _choose_dnglab(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Locate dnglab", str(Path.home()))
        if path:
            self.dnglab_edit.setText(path)

    def _store_options(self) -> None:
        self.settings.overwrite_existing = self.overwrite_chk.isChecked()
        self.settings.verify_readable = self.verify_chk.isChecked()
        self.settings.write_run_reports = self.reports_chk.isChecked()
        self.settings.dnglab_path = self.dnglab_edit.text().strip()

    @Slot()
    def _start(self) -> None:
        self._store_options()
        if not is_dnglab_available(self.settings.dnglab_path):
            reply = QMessageBox.warning(
                self,
                "dnglab not found",
                "dnglab was not found, so every file will fail to convert.\n\nContinue anyway?",
                QMessageBox.Yes | QMessageBox.No,
                QMessageBox.No,
            )
            if reply != QMessageBox.Yes:
                return
        self.controller.start()

    @Slot()
    def _update_controls(self) -> None:
        running = self.controller.is_running
        self.selection_label.setText(self.controller.selection_label())
        out = self.controller.output_dir
        self.output_label.setText(out.name if out else "No output folder selected")
        for w in (self.files_btn, self.folder_btn, self.clear_btn, self.output_btn, self.drop_zone):
            w.setEnabled(not running)
        self.convert_btn.setEnabled(self.controller.can_convert)
        self.cancel_btn.setEnabled(running)
        self.open_out_btn.setEnabled(out is not None)

    @Slot(object)
    def _on_state_changed(self, state: BatchState) -> None:
        self.progress.setVisible(state.running)
        self.progress.setValue(state.progress)
        self.progress.setFormat(f"{state.completed_count} of {state.total_count} files")
        self.current_label.setText(
            f"Converting: {state.current_item_name}" if state.running and state.current_item_name else ""
        )
        color = "#c62828" if state.has_error else "#2e7d32"
        self.status_label.setStyleSheet(f"color: {color};")
        self.status_label.setText(state.status_message)

    @Slot(bool, str)
    def _on_completed(self, success: bool, message: str) -> None:
        if self._closing:
            return
        self.settings.save()
        if success:
            QMessageBox.information(self, "Conversion Complete", message)
        else:
            QMessageBox.warning(self, "Conversion Complete", message)

    def closeEvent(self, event) -> None:
        self._closing = True
        self._store_options()
        self.controller.shutdown()
        super().closeEvent(event)
