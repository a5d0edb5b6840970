#!/usr/bin/env python3
"""
Tests for settings manager
Tests settings persistence with minimal mocking
"""

import json

import pytest

from pcg_editor.settings_manager import SettingsManager


@pytest.fixture
def settings_manager(temp_dir):
    """Create settings manager with temporary directory"""
    return SettingsManager("test_app", settings_dir=temp_dir)


@pytest.mark.unit
class TestSettingsManager:
    """Test settings defaults and persistence"""

    def test_defaults(self, settings_manager):
        assert settings_manager.get("reduce_mode") == "none"
        assert settings_manager.get("bas_load_mode") == "original"
        assert settings_manager.get("bin_interleaved") is False
        assert settings_manager.get_export_range() == (0, 255)

    def test_dotted_keys(self, settings_manager):
        settings_manager.set("preferences.max_recent_files", 3)

        assert settings_manager.get("preferences.max_recent_files") == 3
        assert settings_manager.get("preferences.missing", "x") == "x"
        assert settings_manager.get("reduce_mode.nested") is None

    def test_persistence(self, settings_manager, temp_dir):
        settings_manager.set("reduce_mode", "edfs")
        settings_manager.update_export_range(16, 31)

        reloaded = SettingsManager("test_app", settings_dir=temp_dir)
        assert reloaded.get("reduce_mode") == "edfs"
        assert reloaded.get_export_range() == (16, 31)

        with open(temp_dir / "settings.json") as f:
            assert json.load(f)["reduce_mode"] == "edfs"

    def test_recent_files(self, settings_manager):
        settings_manager.set("preferences.max_recent_files", 2)
        for name in ("a.bin", "b.bin", "a.bin", "c.bin"):
            settings_manager.add_recent_file("bin", name)

        assert settings_manager.get_recent_files("bin") == ["c.bin", "a.bin"]
        assert settings_manager.get_recent_files("image") == []

    def test_corrupt_file_uses_defaults(self, temp_dir):
        (temp_dir / "settings.json").write_text("[broken")

        manager = SettingsManager("test_app", settings_dir=temp_dir)
        assert manager.get("reduce_mode") == "none"

    def test_old_file_gets_new_defaults(self, temp_dir):
        (temp_dir / "settings.json").write_text(json.dumps({"reduce_mode": "retro"}))

        manager = SettingsManager("test_app", settings_dir=temp_dir)
        assert manager.get("reduce_mode") == "retro"
        assert manager.get("load_start") == 0

    def test_reset(self, settings_manager):
        settings_manager.set("reduce_mode", "dither")
        settings_manager.reset_settings()
        assert settings_manager.get("reduce_mode") == "none"

    def test_home_override(self, temp_dir, monkeypatch):
        monkeypatch.setenv("PCG_EDITOR_HOME", str(temp_dir / "home"))

        manager = SettingsManager()
        assert manager.settings_file == temp_dir / "home" / "settings.json"

    def test_conversion_defaults(self, settings_manager):
        settings_manager.set("reduce_mode", "retro")

        defaults = settings_manager.get_conversion_defaults()
        assert defaults == {
            "reduce_mode": "retro",
            "bin_interleaved": False,
            "bas_load_mode": "original",
            "load_start": 0,
        }

    def test_remember_conversion(self, settings_manager, temp_dir):
        output = temp_dir / "out" / "pcg.png"
        settings_manager.remember_conversion("bin", "in.bin", str(output), 32, 63)

        assert settings_manager.get_recent_files("bin") == ["in.bin"]
        assert settings_manager.get("last_output_dir") == str(output.resolve().parent)
        assert settings_manager.get_export_range() == (32, 63)

    def test_nested_defaults_survive_partial_file(self, temp_dir):
        (temp_dir / "settings.json").write_text(json.dumps({"recent_files": {"bin": ["a.bin"]}}))

        manager = SettingsManager("test_app", settings_dir=temp_dir)
        assert manager.get_recent_files("bin") == ["a.bin"]
        assert manager.get_recent_files("image") == []
