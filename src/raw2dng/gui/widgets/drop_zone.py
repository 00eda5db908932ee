from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout

class DropZone(QFrame):
    """A drag & drop area that emits dropped filesystem paths.

    Accepts:
    - a folder (scanned for RAW files)
    - RAW files
    """
    paths_dropped = Signal(list)

    def __init__(self) -> None:
        super().__init__()
        self.setFrameShape(QFrame.StyledPanel)
        self.setAcceptDrops(True)
        self.setMinimumHeight(90)

        layout = QVBoxLayout(self)
        lbl = QLabel("Drop a folder or RAW files here")
        lbl.setAlignment(Qt.AlignCenter)
        layout.addWidget(lbl)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):
        urls = event.mimeData().urls()
        paths = [Path(u.toLocalFile()) for u in urls if u.isLocalFile()]
        if paths:
            self.paths_dropped.emit(paths)
        event.acceptProposedAction()
