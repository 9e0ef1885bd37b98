# tests/core/test_config_management.py
import json

import pytest

from mdlinkcheck.managers.config_manager import ConfigManager
from mdlinkcheck.utils.path_utils import PathUtils

# A small, predictable configuration for the tests
MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING"
    },
    "scan": {
        "show_progress": False
    },
    "link_checker": {
        "check_external": False,
        "timeout_ms": 10000
    }
}


@pytest.fixture
def config_manager(tmp_path, monkeypatch):
    """
    Points the ConfigManager at a temporary settings.json and reloads it.
    """
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps(MOCK_SETTINGS_CONTENT))

    monkeypatch.setattr(PathUtils, 'get_settings_file', lambda: settings_file)

    manager = ConfigManager()
    manager.reset()
    yield manager
    monkeypatch.undo()
    manager.reset()


def test_config_manager_is_a_singleton(config_manager):
    assert ConfigManager() is config_manager


def test_config_manager_load(config_manager):
    config = config_manager.get_all()
    assert config["debug"]["level"] == "WARNING"
    assert config["link_checker"]["timeout_ms"] == 10000


def test_config_manager_get_nested(config_manager):
    assert config_manager.get_nested("link_checker.timeout_ms") == 10000
    assert config_manager.get_nested("non.existent.key", "default") == "default"
    assert config_manager.get_nested("debug.level.deeper", "fallback") == "fallback"


def test_config_manager_set_nested_casts_to_existing_type(config_manager):
    config_manager.set_nested("link_checker.timeout_ms", "2500")
    assert config_manager.get_nested("link_checker.timeout_ms") == 2500

    config_manager.set_nested("link_checker.check_external", "true")
    assert config_manager.get_nested("link_checker.check_external") is True

    config_manager.set_nested("new_feature.enabled", "yes")
    assert config_manager.get_nested("new_feature.enabled") == "yes"


def test_config_manager_reset(config_manager):
    config_manager.set_nested("debug.level", "DEBUG")
    assert config_manager.get_nested("debug.level") == "DEBUG"

    config_manager.reset()
    assert config_manager.get_nested("debug.level") == "WARNING"


def test_missing_settings_file_gives_empty_config(config_manager, tmp_path, monkeypatch):
    monkeypatch.setattr(PathUtils, 'get_settings_file', lambda: tmp_path / "absent.json")
    config_manager.reset()
    assert config_manager.get_all() == {}


def test_packaged_settings_file_exists():
    settings = json.loads(PathUtils.get_settings_file().read_text(encoding="utf-8"))
    assert settings["scan"]["pattern"] == "**/*.md"
    assert settings["link_checker"]["timeout_ms"] == 10000


def test_apply_overrides_sets_typed_values(config_manager):
    config_manager.apply_overrides(["link_checker.timeout_ms=2500", "scan.show_progress = true"])

    assert config_manager.get_nested("link_checker.timeout_ms") == 2500
    assert config_manager.get_nested("scan.show_progress") is True


def test_apply_overrides_splits_list_values(config_manager):
    config_manager.set_nested("scan.ignore", ["vendor/**"])
    config_manager.apply_overrides(["scan.ignore=drafts/**, tmp/**"])

    assert config_manager.get_nested("scan.ignore") == ["drafts/**", "tmp/**"]


@pytest.mark.parametrize("pair", ["timeout_ms", "=5", "debug.level.deeper=x"])
def test_apply_overrides_rejects_bad_pairs(config_manager, pair):
    with pytest.raises(ValueError):
        config_manager.apply_overrides([pair])
