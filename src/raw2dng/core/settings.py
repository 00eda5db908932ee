from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
import json
from datetime import datetime
from appdirs import user_config_dir, user_log_dir

APP_NAME = "Raw2DNG"

def _config_path() -> Path:
    cfg_dir = Path(user_config_dir(appname=APP_NAME, appauthor=False))
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir / "settings.json"

@dataclass
class AppSettings:
    """User-persistent settings.

    Stored in: ~/Library/Application Support/Raw2DNG/settings.json (macOS)
    """
    last_input_dir: str = ""
    last_output_dir: str = ""
    dnglab_path: str = ""
    overwrite_existing: bool = False
    verify_readable: bool = False
    write_run_reports: bool = True

    @classmethod
    def load(cls) -> "AppSettings":
        p = _config_path()
        if not p.exists():
            return cls()
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
            return cls(**data)
        except (OSError, ValueError, TypeError):
            # Unreadable or stale settings file: start from defaults
            return cls()

    def save(self) -> None:
        p = _config_path()
        p.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")

    @staticmethod
    def runs_root() -> Path:
        return Path(user_log_dir(appname=APP_NAME, appauthor=False))

    @staticmethod
    def new_run_folder(root: Path) -> Path:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return root / f"Raw2DNG_{stamp}"
