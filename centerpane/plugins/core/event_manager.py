FRAME_SIZE_CHANGED = "frame-size-changed"
WINDOW_CONFIGURATION_CHANGED = "window-configuration-changed"


def get_plugin_metadata(_):
    return {
        "id": "org.centerpane.plugin.event_manager",
        "name": "Event Manager",
        "version": "1.0.0",
        "enabled": True,
        "priority": 100,
        "deps": [],
        "description": "Dispatches host layout events to subscribed plugins.",
    }


def get_plugin_class():
    from centerpane.plugins.core._base import BasePlugin
    import collections

    class EventManagerPlugin(BasePlugin):
        def __init__(self, session_instance):
            """Initialize the event queue and the subscriber table.

            Args:
                session_instance: The owning session providing the logger and
                                  the plugin registry.
            """
            super().__init__(session_instance)
            self.event_subscribers = {}
            self.event_queue = collections.deque()
            self.is_processing_events = False

        def handle_event(self, msg) -> None:
            """
            Queue an incoming host event and drain the queue.

            Events emitted by subscribers while the queue is being drained
            are appended and handled after the current one, never recursively.

            Args:
                msg (dict): The event message, e.g.
                    {"event": "frame-size-changed", "size-changed": True}.
            """
            if not self._validate_event(msg, required_keys=["event"]):
                return
            self.event_queue.append(msg)
            self.logger.debug(
                f"Queued {msg['event']} ({len(self.event_queue)} pending)"
            )
            self._process_queued_events()

        def _process_queued_events(self) -> None:
            if self.is_processing_events:
                return
            self.is_processing_events = True
            try:
                while self.event_queue:
                    msg = self.event_queue.popleft()
                    self._dispatch(msg)
            finally:
                self.is_processing_events = False

        def _dispatch(self, msg) -> None:
            event_type = msg["event"]
            # copy: handlers may unsubscribe while we iterate
            for callback, plugin_name in list(self.event_subscribers.get(event_type, [])):
                try:
                    callback(msg)
                    if plugin_name:
                        self.logger.debug(
                            f"Delivered {event_type} to {plugin_name}"
                        )
                except Exception as e:
                    self.logger.error(
                        f"Error executing callback for event '{event_type}': {e}",
                        exc_info=True,
                    )

        def _validate_event(self, msg, required_keys=None) -> bool:
            """True when ``msg`` is a dict carrying every key in ``required_keys``."""
            if not isinstance(msg, dict):
                self.logger.warning(f"Dropping host event of type {type(msg).__name__}; expected a dict.")
                return False
            for key in required_keys or []:
                if key not in msg:
                    self.logger.warning(f"Missing required key in event message: {key}")
                    return False
            return True

        def subscribe_to_event(self, event_type, callback, plugin_name=None) -> None:
            """
            Register ``callback(msg)`` for ``event_type``. Callbacks run in
            subscription order; ``plugin_name`` only labels the log lines.
            """
            self.event_subscribers.setdefault(event_type, []).append(
                (callback, plugin_name)
            )
            if plugin_name:
                self.logger.info(
                    f"{plugin_name} listens to {event_type}"
                )
            else:
                self.logger.info(f"Unnamed subscriber listens to {event_type}")

        def unsubscribe_from_event(self, event_type, callback) -> bool:
            """Remove ``callback`` from ``event_type``; returns False if it was not subscribed."""
            subscribers = self.event_subscribers.get(event_type, [])
            for entry in subscribers:
                if entry[0] == callback:
                    subscribers.remove(entry)
                    self.logger.info(f"Removed a {event_type} subscriber")
                    return True
            self.logger.warning(f"Callback was not subscribed to event: {event_type}")
            return False

        def subscriber_count(self, event_type) -> int:
            return len(self.event_subscribers.get(event_type, []))

        def on_stop(self) -> None:
            self.event_queue.clear()

        def about(self):
            """
            Core background plugin acting as the central event bus: the host
            feeds layout events into handle_event and they are dispatched to
            the plugins subscribed to them.
            """
            return self.about.__doc__

    return EventManagerPlugin
