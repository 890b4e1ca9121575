"""
Application configuration — paths, timing and sound defaults.

Values come from config/focusforge.json when it exists (or the file named by
FOCUSFORGE_CONFIG), merged over DEFAULT_CONFIG. User-facing timer settings
are not here: they are part of the persisted app state.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parent.parent
CONFIG_PATH = ROOT_DIR / "config" / "focusforge.json"

# Default app config (used if JSON doesn't exist yet)
DEFAULT_CONFIG = {
    "db_path": str(ROOT_DIR / "focusforge.db"),
    "snapshot_key": "focusforge-data",
    "tick_interval_ms": 1000,
    "log_file": "focusforge.log",
    "log_level": "INFO",
    "sound_enabled": True,
    "chime_volume": 0.5,
    "toast_duration_ms": 3000,
    "music_dir": str(ROOT_DIR / "focusforge" / "assets" / "music"),
}


def config_path() -> Path:
    override = os.environ.get("FOCUSFORGE_CONFIG")
    return Path(override) if override else CONFIG_PATH


def load_config(path: Optional[Path] = None) -> dict:
    """Defaults merged with whatever the config file provides."""
    path = path or config_path()
    merged = DEFAULT_CONFIG.copy()
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                cfg = json.load(f)
            if not isinstance(cfg, dict):
                raise ValueError("top-level JSON value must be an object")
            merged.update({k: v for k, v in cfg.items() if k in DEFAULT_CONFIG})
        except (json.JSONDecodeError, ValueError, OSError) as e:
            logger.warning("Bad config at %s (%s), using defaults.", path, e)
            return DEFAULT_CONFIG.copy()
    return merged


def save_config(config: dict, path: Optional[Path] = None) -> None:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
