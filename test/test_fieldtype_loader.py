"""
Fieldtype loader tests: enable-flag config I/O and startup registration.
"""

from __future__ import annotations

import logging
from unittest.mock import patch

from fieldkit.config import settings
from fieldkit.fieldtypes import loader as loader_module
from fieldkit.fieldtypes.registry import FieldtypeRegistry

BUILTIN_HANDLES = {"text", "toggle", "toggle_password", "select", "entries"}


class TestFieldtypesConfig:
    def test_returns_defaults_without_file(self, tmp_path):
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", tmp_path / "fieldtypes.json"):
            cfg = loader_module.load_fieldtypes_config()
        assert set(cfg) == BUILTIN_HANDLES
        assert all(entry["enabled"] is True for entry in cfg.values())

    def test_save_and_load_roundtrip(self, tmp_path):
        data = {"text": {"enabled": False}, "entries": {"enabled": True}}
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", tmp_path / "fieldtypes.json"):
            loader_module.save_fieldtypes_config(data)
            assert loader_module.load_fieldtypes_config() == data

    def test_save_creates_parent_dirs(self, tmp_path):
        nested = tmp_path / "subdir" / "fieldtypes.json"
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", nested):
            loader_module.save_fieldtypes_config({"text": {"enabled": True}})
        assert nested.exists()

    def test_recovers_from_corrupt_json(self, tmp_path, caplog):
        bad_file = tmp_path / "bad.json"
        bad_file.write_text("{not valid json", encoding="utf-8")
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", bad_file):
            with caplog.at_level(logging.WARNING, logger="fieldkit.fieldtypes.loader"):
                cfg = loader_module.load_fieldtypes_config()
        assert set(cfg) == BUILTIN_HANDLES
        assert "Failed to read fieldtypes config" in caplog.text

    def test_defaults_not_shared_between_calls(self, tmp_path):
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", tmp_path / "cfg.json"):
            first = loader_module.load_fieldtypes_config()
            first["text"]["enabled"] = False
            second = loader_module.load_fieldtypes_config()
        assert second["text"]["enabled"] is True

    def test_path_comes_from_settings(self):
        assert str(loader_module._FIELDTYPES_CONFIG_FILE) == settings.fieldtypes_config_file


class TestInitializeFieldtypes:
    def test_registers_every_builtin(self, tmp_path):
        reg = FieldtypeRegistry()
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", tmp_path / "cfg.json"):
            handles = loader_module.initialize_fieldtypes(reg)
        assert set(handles) == BUILTIN_HANDLES
        assert {e.handle for e in reg.all_entries()} == BUILTIN_HANDLES

    def test_disabled_fieldtype_skipped(self, tmp_path):
        reg = FieldtypeRegistry()
        path = tmp_path / "cfg.json"
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", path):
            loader_module.save_fieldtypes_config({"toggle_password": {"enabled": False}})
            handles = loader_module.initialize_fieldtypes(reg)
        assert "toggle_password" not in handles
        assert not reg.is_registered("toggle_password")
        # Handles missing from the file stay enabled
        assert reg.is_registered("text")

    def test_is_repeatable(self, tmp_path):
        reg = FieldtypeRegistry()
        with patch.object(loader_module, "_FIELDTYPES_CONFIG_FILE", tmp_path / "cfg.json"):
            loader_module.initialize_fieldtypes(reg)
            loader_module.initialize_fieldtypes(reg)
        assert len(reg.all_entries()) == len(BUILTIN_HANDLES)
