"""Tests for catalog and settings persistence."""

from __future__ import annotations

import json

import pytest

from spiregen.generators.errors import CatalogConfigurationError
from spiregen.generators.rooms.builtin import builtin_catalog
from spiregen.generators.rooms.catalog_storage import load_catalog, save_catalog
from spiregen.generators.rooms.socket_system import SocketType
from spiregen.pipeline.settings import GeneratorSettings, load_settings, save_settings


class TestCatalogStorage:
    def test_save_and_load(self, tmp_path) -> None:
        catalog = builtin_catalog()
        path = save_catalog(catalog, tmp_path / "catalog.json")

        loaded = load_catalog(path)

        assert loaded.list_ids() == catalog.list_ids()
        for template in catalog:
            assert loaded.get(template.template_id) == template

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(CatalogConfigurationError, match="not found"):
            load_catalog(tmp_path / "missing.json")

    def test_malformed_file(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogConfigurationError):
            load_catalog(path)

    def test_duplicate_ids_in_file(self, tmp_path) -> None:
        path = tmp_path / "dupes.json"
        path.write_text(json.dumps({"templates": [{"id": "a"}, {"id": "a"}]}), encoding="utf-8")
        with pytest.raises(CatalogConfigurationError):
            load_catalog(path)


class TestSettingsStorage:
    def test_save_and_load(self, tmp_path) -> None:
        settings = GeneratorSettings(main_path_rooms=7, socket_type=SocketType.DOOR_LARGE,
                                     terminus_template_id="boss_arena")
        path = save_settings(settings, tmp_path / "settings.json")

        assert json.loads(path.read_text(encoding="utf-8"))["socket_type"] == "DoorLarge"
        assert load_settings(path) == settings

    def test_unknown_keys_are_ignored(self, tmp_path) -> None:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"branches": 1, "fog_density": 0.3}), encoding="utf-8")
        assert load_settings(path) == GeneratorSettings(branches=1)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(CatalogConfigurationError):
            load_settings(tmp_path / "missing.json")

    def test_bad_socket_type(self, tmp_path) -> None:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"socket_type": "Trapdoor"}), encoding="utf-8")
        with pytest.raises(CatalogConfigurationError):
            load_settings(path)
