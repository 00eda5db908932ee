"""Application entrypoint.

Run in development:
    python -m raw2dng.app

In packaged form (PyInstaller), this becomes the main script.
"""

from __future__ import annotations

import sys
from PySide6.QtWidgets import QApplication

from raw2dng.core.settings import AppSettings
from raw2dng.gui.main_window import MainWindow


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName("Raw2DNG")

    settings = AppSettings.load()
    win = MainWindow(settings=settings)
    win.show()

    code = app.exec()
    settings.save()
    return code


if __name__ == "__main__":
    raise SystemExit(main())
