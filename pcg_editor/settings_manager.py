"""
Settings manager for the PCG editor
Keeps conversion defaults and recent files in a JSON file
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Optional

SETTINGS_HOME_ENV_VAR = "PCG_EDITOR_HOME"
SETTINGS_FILENAME = "settings.json"

DEFAULT_SETTINGS: dict[str, Any] = {
    "reduce_mode": "none",
    "bin_interleaved": False,
    "bas_load_mode": "original",
    "bas_binary": True,
    "load_start": 0,
    "export_range": {"start": 0, "end": 255},
    "last_output_dir": "",
    "recent_files": {"bin": [], "bas": [], "image": []},
    "preferences": {
        "max_recent_files": 10,
    },
}

# Keys read by pcg-convert to fill its option defaults
CONVERSION_KEYS = ("reduce_mode", "bin_interleaved", "bas_load_mode", "load_start")


def default_settings_dir(app_name: str) -> Path:
    """Per-user settings directory, PCG_EDITOR_HOME wins when set"""
    override = os.environ.get(SETTINGS_HOME_ENV_VAR)
    if override:
        return Path(override)
    if os.name == "nt":
        return Path(os.environ.get("APPDATA", os.path.expanduser("~"))) / app_name
    return Path.home() / f".{app_name}"


def _merge_defaults(defaults: dict[str, Any], loaded: dict[str, Any]) -> dict[str, Any]:
    """Overlay loaded values on defaults, one level of nesting deep"""
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


class SettingsManager:
    """Persistent user settings"""

    def __init__(self, app_name="pcg_editor", settings_dir: Optional[Path] = None):
        self.app_name = app_name
        directory = Path(settings_dir) if settings_dir else default_settings_dir(app_name)
        directory.mkdir(parents=True, exist_ok=True)
        self.settings_file = directory / SETTINGS_FILENAME
        self.settings = self._load_settings()

    def _load_settings(self) -> dict[str, Any]:
        try:
            with open(self.settings_file) as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError):
            # Missing or corrupted file, start from defaults
            loaded = {}
        if not isinstance(loaded, dict):
            loaded = {}
        return _merge_defaults(DEFAULT_SETTINGS, loaded)

    def save_settings(self):
        """Write settings to disk"""
        try:
            with open(self.settings_file, "w") as f:
                json.dump(self.settings, f, indent=2)
        except OSError:
            # Fail silently if we can't save settings
            pass

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as 'export_range.start'"""
        node: Any = self.settings
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any):
        """Store a dotted key and save"""
        *parents, leaf = key.split(".")
        node = self.settings
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
        self.save_settings()

    def get_conversion_defaults(self) -> dict[str, Any]:
        """Option defaults for a conversion run"""
        return {key: self.get(key, DEFAULT_SETTINGS[key]) for key in CONVERSION_KEYS}

    def add_recent_file(self, file_type: str, file_path: str):
        """Move a path to the front of a recent-files list"""
        file_path = str(file_path)
        limit = self.get("preferences.max_recent_files", 10)

        recent = self.settings.setdefault("recent_files", {})
        entries = [p for p in recent.get(file_type, []) if p != file_path]
        recent[file_type] = [file_path, *entries][:limit]
        self.save_settings()

    def get_recent_files(self, file_type: str) -> list:
        return self.settings.get("recent_files", {}).get(file_type, [])

    def get_export_range(self) -> tuple[int, int]:
        """Last (start, end) character range written"""
        return self.get("export_range.start", 0), self.get("export_range.end", 255)

    def update_export_range(self, start: int, end: int):
        self.set("export_range", {"start": start, "end": end})

    def remember_conversion(self, file_type: str, input_path: str,
                            output_path: str, start: int, end: int):
        """Record the input file, output directory and range of a finished run"""
        self.add_recent_file(file_type, input_path)
        self.settings["last_output_dir"] = str(Path(output_path).resolve().parent)
        self.update_export_range(start, end)

    def reset_settings(self):
        """Restore the defaults"""
        self.settings = copy.deepcopy(DEFAULT_SETTINGS)
        self.save_settings()


# Singleton instance
_settings_instance = None


def get_settings() -> SettingsManager:
    """Get the singleton settings instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = SettingsManager()
    return _settings_instance
