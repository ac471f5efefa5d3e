import pytest

from centerpane.plugins.core.event_handler_decorator import (
    collect_event_handlers,
    subscribe_to_event,
)


@pytest.fixture
def event_manager(session):
    return session.plugins["event_manager"]


def test_dispatch_to_subscribers(event_manager):
    seen = []
    event_manager.subscribe_to_event("ping", seen.append, "tests")
    event_manager.handle_event({"event": "ping", "n": 1})
    event_manager.handle_event({"event": "pong"})
    assert seen == [{"event": "ping", "n": 1}]


def test_invalid_messages_are_dropped(event_manager):
    seen = []
    event_manager.subscribe_to_event("ping", seen.append)
    event_manager.handle_event("ping")
    event_manager.handle_event({"type": "ping"})
    assert seen == []
    assert not event_manager.event_queue


def test_events_raised_by_handlers_are_queued(event_manager):
    order = []

    def first(msg):
        order.append("first:start")
        event_manager.handle_event({"event": "second"})
        order.append("first:end")

    event_manager.subscribe_to_event("first", first)
    event_manager.subscribe_to_event("second", lambda msg: order.append("second"))
    event_manager.handle_event({"event": "first"})
    assert order == ["first:start", "first:end", "second"]


def test_failing_subscriber_does_not_stop_others(event_manager):
    seen = []

    def broken(msg):
        raise RuntimeError("boom")

    event_manager.subscribe_to_event("ping", broken)
    event_manager.subscribe_to_event("ping", seen.append)
    event_manager.handle_event({"event": "ping"})
    assert seen == [{"event": "ping"}]
    assert event_manager.is_processing_events is False


def test_unsubscribe(event_manager):
    seen = []
    event_manager.subscribe_to_event("ping", seen.append)
    assert event_manager.subscriber_count("ping") == 1
    assert event_manager.unsubscribe_from_event("ping", seen.append)
    assert event_manager.unsubscribe_from_event("ping", seen.append) is False
    event_manager.handle_event({"event": "ping"})
    assert seen == []


def test_handler_may_unsubscribe_itself(event_manager):
    seen = []

    def once(msg):
        seen.append(msg)
        event_manager.unsubscribe_from_event("ping", once)

    event_manager.subscribe_to_event("ping", once)
    event_manager.handle_event({"event": "ping"})
    event_manager.handle_event({"event": "ping"})
    assert len(seen) == 1


class Listener:
    @subscribe_to_event("ping")
    def on_ping(self, msg):
        return msg

    def plain(self, msg):
        return msg


class BrokenListener:
    @subscribe_to_event("ping")
    def on_ping(self):
        pass


def test_collect_event_handlers():
    listener = Listener()
    assert collect_event_handlers(listener) == [("ping", listener.on_ping)]


def test_collect_rejects_handlers_without_message():
    with pytest.raises(TypeError):
        collect_event_handlers(BrokenListener())
