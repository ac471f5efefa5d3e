from centerpane.plugins.core.event_manager import WINDOW_CONFIGURATION_CHANGED


def test_events_before_loading_are_dropped(host, make_session):
    window = host.add_window("main.py")
    session = make_session(load=False)
    session.handle_event({"event": WINDOW_CONFIGURATION_CHANGED})
    assert window.margins == (0, 0)
    assert session.centering is None


def test_config_file_is_created(session, config_dir):
    assert (config_dir / "config.toml").exists()


def test_shutdown_leaves_windows_neutral(host, make_session):
    window = host.add_window("main.py")
    session = make_session()
    assert window.margins == (36, 36)
    session.shutdown()
    assert window.margins == (0, 0)
    assert session.plugins == {}
