import os
from types import SimpleNamespace

import pytest
import toml
from watchdog.events import FileModifiedEvent

from centerpane.shared.config_handler import ConfigHandler, ConfigReloadHandler
from centerpane.shared.config_template import CENTERING_SECTION


@pytest.fixture
def owner(logger):
    return SimpleNamespace(logger=logger)


@pytest.fixture
def handler(owner, tmp_path):
    return ConfigHandler(owner, plugin_id=CENTERING_SECTION, config_dir=tmp_path)


def test_defaults_are_written_without_hints(handler):
    on_disk = toml.load(handler.config_file)
    section = on_disk[CENTERING_SECTION]
    assert section["visible_width"] == 128
    assert section["ignore_name_patterns"] == ["^minibuf", "^\\s*\\*"]
    assert not any(key.endswith("_hint") for key in section)
    assert "_section_hint" not in on_disk


def test_user_values_survive_merge(owner, tmp_path):
    (tmp_path / "config.toml").write_text(
        f'["{CENTERING_SECTION}"]\nvisible_width = 90\n', encoding="utf-8"
    )
    handler = ConfigHandler(owner, plugin_id=CENTERING_SECTION, config_dir=tmp_path)
    assert handler.get_plugin_setting("visible_width") == 90
    assert handler.get_plugin_setting("gutter_width") == 3


def test_corrupt_file_is_not_overwritten(owner, tmp_path, monkeypatch):
    monkeypatch.setattr("centerpane.shared.config_handler.time.sleep", lambda _: None)
    path = tmp_path / "config.toml"
    path.write_text("visible_width = = 3", encoding="utf-8")
    handler = ConfigHandler(owner, plugin_id=CENTERING_SECTION, config_dir=tmp_path)
    assert handler.get_plugin_setting("visible_width") == 128
    assert handler.set_plugin_setting("visible_width", 100) is False
    assert path.read_text(encoding="utf-8") == "visible_width = = 3"


def test_set_and_get_settings(handler):
    assert handler.set_plugin_setting("visible_width", 100)
    assert handler.get_plugin_setting("visible_width") == 100
    assert toml.load(handler.config_file)[CENTERING_SECTION]["visible_width"] == 100
    assert handler.set_root_setting(["logging", "level"], "DEBUG")
    assert handler.get_root_setting(["logging", "level"]) == "DEBUG"
    assert handler.get_root_setting(["nope", "missing"], "fallback") == "fallback"


def test_missing_plugin_setting_writes_default(handler):
    assert handler.get_plugin_setting("new_key", 5) == 5
    assert toml.load(handler.config_file)[CENTERING_SECTION]["new_key"] == 5
    assert handler.get_plugin_setting("other_key") is None


def test_remove_root_setting(handler):
    assert handler.remove_root_setting(["logging", "level"])
    assert handler.get_root_setting(["logging", "level"]) is None
    assert handler.remove_root_setting(["logging", "level"]) is False
    assert handler.remove_root_setting([]) is False


def test_plugin_setting_needs_a_section(owner, tmp_path):
    handler = ConfigHandler(owner, config_dir=tmp_path)
    assert handler.get_plugin_setting("visible_width", 7) == 7
    assert handler.set_plugin_setting("visible_width", 7) is False


def test_external_edit_is_reloaded(handler):
    data = toml.load(handler.config_file)
    data[CENTERING_SECTION]["visible_width"] = 80
    with open(handler.config_file, "w", encoding="utf-8") as f:
        toml.dump(data, f)
    newer = handler._known_mtime + 10
    os.utime(handler.config_file, (newer, newer))
    handler._on_config_file_changed()
    assert handler.get_plugin_setting("visible_width") == 80


def test_own_write_is_not_reloaded(handler):
    handler.set_plugin_setting("visible_width", 99)
    handler.config_data[CENTERING_SECTION]["visible_width"] = 42
    handler._on_config_file_changed()
    assert handler.get_plugin_setting("visible_width") == 42


def test_reload_handler_debounces(tmp_path):
    watched = tmp_path / "config.toml"
    watched.touch()
    calls = []
    reload_handler = ConfigReloadHandler(lambda: calls.append(1), watched, debounce=60)
    reload_handler.on_modified(FileModifiedEvent(str(watched)))
    reload_handler.on_modified(FileModifiedEvent(str(watched)))
    reload_handler.on_modified(FileModifiedEvent(str(tmp_path / "other.toml")))
    assert calls == [1]


def test_watcher_starts_and_stops(handler):
    handler.start_watcher()
    assert handler.observer is not None
    handler.stop_watcher()
    assert handler.observer is None
