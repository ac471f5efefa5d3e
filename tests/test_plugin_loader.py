import pytest


@pytest.fixture
def loader(make_session):
    return make_session(load=False).plugin_loader


def test_discovers_plugin_modules_only(loader):
    loader.discover_plugins()
    assert sorted(loader.plugins_import) == ["centering", "event_manager"]


def test_load_order_follows_dependencies(loader):
    loader.load_plugins()
    assert list(loader.plugins) == ["event_manager", "centering"]


def test_sort_by_priority_then_name(loader):
    loader.plugin_metadata_map = {
        "a": {"id": "x.a", "priority": 0, "deps": []},
        "b": {"id": "x.b", "priority": 10, "deps": []},
        "c": {"id": "x.c", "priority": 50, "deps": ["a"]},
        "d": {"id": "x.d", "priority": 0, "deps": []},
    }
    assert loader.sort_plugins(["a", "b", "c", "d"]) == ["b", "a", "c", "d"]


def test_cycles_are_dropped(loader):
    loader.plugin_metadata_map = {
        "a": {"id": "x.a", "deps": ["b"]},
        "b": {"id": "x.b", "deps": ["a"]},
        "c": {"id": "x.c", "deps": ["missing"]},
    }
    assert loader.sort_plugins(["a", "b", "c"]) == ["c"]


def test_disabled_dependency_blocks_dependent(make_session, config_dir):
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text(
        '[plugins]\ndisabled = ["event_manager"]\n', encoding="utf-8"
    )
    session = make_session()
    assert session.plugins == {}


def test_enable_and_disable(loader):
    loader.load_plugins()
    first = loader.plugins["centering"]
    assert loader.enable_plugin("centering") is first
    assert loader.disable_plugin("centering")
    assert not loader.is_enabled("centering")
    assert loader.disable_plugin("centering") is False
    second = loader.enable_plugin("centering")
    assert second is not first
    assert loader.enable_plugin("nope") is None


def test_failing_start_is_contained(loader, monkeypatch):
    loader.discover_plugins()
    plugin_class = loader.plugins_import["event_manager"].get_plugin_class()

    class Exploding(plugin_class):
        def on_start(self):
            raise RuntimeError("boom")

    monkeypatch.setattr(
        loader.plugins_import["event_manager"], "get_plugin_class", lambda: Exploding
    )
    assert loader.enable_plugin("event_manager") is None
    assert not loader.is_enabled("event_manager")


def test_unload_all(loader):
    loader.load_plugins()
    loader.unload_all()
    assert loader.plugins == {}
