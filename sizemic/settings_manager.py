from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")


def default_settings_path() -> str:
    env_path = (os.getenv("SIZEMIC_SETTINGS") or "").strip()
    if env_path:
        return env_path
    return str(Path.home() / ".config" / "sizemic" / "settings.json")


class SettingsManager:
    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path or default_settings_path()
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "manifest_name": "sizemic-manifest",
        "output_dir": "sizemic",
        "output_suffix": "_sizemic",
        "quality": 1.0,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    @property
    def manifest_name(self) -> str:
        val = self.get("manifest_name")
        return val if isinstance(val, str) and val.strip() else self.DEFAULTS["manifest_name"]

    @property
    def output_dir(self) -> str:
        val = self.get("output_dir")
        return val if isinstance(val, str) and val.strip() else self.DEFAULTS["output_dir"]

    @property
    def output_suffix(self) -> str:
        val = self.get("output_suffix")
        return val if isinstance(val, str) else self.DEFAULTS["output_suffix"]

    @property
    def quality(self) -> float:
        try:
            val = float(self.get("quality"))
        except (TypeError, ValueError):
            _logger.warning("saved quality invalid: %r", self.get("quality"))
            return float(self.DEFAULTS["quality"])
        if not 0.0 < val <= 1.0:
            _logger.warning("saved quality out of range: %s", val)
            return float(self.DEFAULTS["quality"])
        return val
