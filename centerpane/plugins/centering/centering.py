from centerpane.plugins.core.event_handler_decorator import subscribe_to_event
from centerpane.plugins.core.event_manager import (
    FRAME_SIZE_CHANGED,
    WINDOW_CONFIGURATION_CHANGED,
)
from centerpane.shared.config_template import CENTERING_SECTION

DISABLED = "disabled"
ENABLED = "enabled"


def get_plugin_metadata(_):
    return {
        "id": CENTERING_SECTION,
        "name": "Centering",
        "version": "1.0.0",
        "enabled": True,
        "priority": 0,
        "deps": ["event_manager"],
        "description": (
            "Centers a fixed-width content column in every window by writing "
            "left/right margins on layout changes."
        ),
    }


def get_plugin_class():
    from typing import Any, Callable, Dict, List, Optional, Tuple
    from centerpane.plugins.core._base import BasePlugin
    from centerpane.plugins.core.event_handler_decorator import collect_event_handlers
    from centerpane.plugins.centering._config import (
        CenteringConfig,
        ConfigurationError,
        build_config,
    )
    from centerpane.plugins.centering._interception import InterceptionLayer
    from centerpane.plugins.centering._reconciler import Reconciler

    class CenteringPlugin(BasePlugin):
        """
        Disabled/Enabled state machine for margin centering.

        Enabling installs the interception advices, subscribes the two
        layout handlers and runs one pass. Disabling releases everything
        the instance holds and leaves every live window at (0, 0).
        """

        def __init__(self, session_instance: Any):
            super().__init__(session_instance)
            self.state = DISABLED
            self.reconciler = Reconciler(self.ipc, self.logger)
            self.interception = InterceptionLayer(self.ipc, self.logger)
            self._subscriptions: List[Tuple[str, Callable]] = []
            self._extra_filters: List[Callable[[Any], bool]] = []

        def build_config(self) -> CenteringConfig:
            """Snapshot of the current settings plus runtime filters."""
            return build_config(
                self.get_plugin_setting() or {}, self.ipc, self._extra_filters
            )

        def on_start(self) -> None:
            if self.state == ENABLED:
                self.logger.info("Centering is already enabled.")
                return
            config = self.build_config()
            self.interception.activate(config)
            try:
                event_manager = self.plugins["event_manager"]
                for event_type, handler in collect_event_handlers(self):
                    event_manager.subscribe_to_event(event_type, handler, "centering")
                    self._subscriptions.append((event_type, handler))
                self.state = ENABLED
                self.logger.info(f"Centering enabled (visible width {config.visible_width}).")
                self.reconcile(config)
            except Exception:
                self._release()
                raise

        def on_stop(self) -> None:
            if self.state == DISABLED:
                self.logger.info("Centering is already disabled.")
                return
            self._release()
            count = self.reconciler.reset_all()
            self.logger.info(f"Centering disabled; reset margins of {count} windows.")

        def _release(self) -> None:
            """Drop advices and subscriptions; afterwards nothing of this instance is reachable."""
            self.interception.deactivate()
            event_manager = self.plugins.get("event_manager")
            for event_type, handler in self._subscriptions:
                if event_manager is not None:
                    event_manager.unsubscribe_from_event(event_type, handler)
            self._subscriptions = []
            self.state = DISABLED

        def reconcile(self, config: Optional[CenteringConfig] = None) -> Dict[Any, Any]:
            """Run one pass; a broken configuration skips the pass."""
            if config is None:
                try:
                    config = self.build_config()
                except ConfigurationError as e:
                    self.logger.error(f"Invalid centering configuration, skipping pass: {e}")
                    return {}
            return self.reconciler.reconcile_all(config)

        @subscribe_to_event(FRAME_SIZE_CHANGED)
        def on_frame_size_changed(self, msg: Dict[str, Any]) -> None:
            if not msg.get("size-changed", False):
                return
            self.reconcile()

        @subscribe_to_event(WINDOW_CONFIGURATION_CHANGED)
        def on_window_configuration_changed(self, msg: Dict[str, Any]) -> None:
            self.reconcile()

        def add_ignore_filter(self, predicate: Callable[[Any], bool]) -> None:
            """Register a ``window -> bool`` predicate excluding windows from centering."""
            if not callable(predicate):
                raise TypeError("Ignore filters must be callable.")
            if predicate not in self._extra_filters:
                self._extra_filters.append(predicate)

        def remove_ignore_filter(self, predicate: Callable[[Any], bool]) -> None:
            if predicate in self._extra_filters:
                self._extra_filters.remove(predicate)

        @property
        def lighter(self) -> str:
            """Mode-line indicator text; empty while disabled."""
            if self.state != ENABLED:
                return ""
            try:
                return self.build_config().lighter
            except ConfigurationError:
                return CenteringConfig.lighter

        def status(self) -> Dict[str, Any]:
            windows: List[Dict[str, Any]] = []
            try:
                windows = self.reconciler.describe(self.build_config())
            except ConfigurationError as e:
                self.logger.error(f"Invalid centering configuration: {e}")
            return {"state": self.state, "windows": windows}

        def about(self):
            """
            Keeps a column of visible_width cells centered in the frame by
            giving each window the part of the frame margin that falls
            inside it. Windows the column does not fit in fall back to an
            empty margin, or a small gutter when line numbers are shown.
            """
            return self.about.__doc__

    return CenteringPlugin
