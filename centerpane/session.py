import logging
import lazy_loader as lazy
from typing import Any, Dict, Optional
from centerpane.shared.config_handler import ConfigHandler

IPC_MODULE = lazy.load("centerpane.core.host.ipc")
PLUGIN_LOADER_MODULE = lazy.load("centerpane.core.plugin_loader")
LOG_SETUP_MODULE = lazy.load("centerpane.core.log_setup")

CENTERING_PLUGIN = "centering"


class Session:
    """
    Process-wide entry point the host editor talks to.

    Owns the logger, the configuration, the host adapter and the plugin
    loader. The host feeds its layout events into ``handle_event`` and maps
    its toggle command onto ``toggle_centering``.
    """

    def __init__(
        self,
        host: Any,
        logger: Optional[Any] = None,
        config_dir: Optional[str] = None,
        watch_config: bool = True,
    ):
        """
        Args:
            host: The host editor handle wrapped by HostIPC.
            logger: A structlog logger; one is configured when omitted.
            config_dir: Directory of config.toml, XDG location when omitted.
            watch_config: Reload config.toml when it changes on disk.
        """
        owns_logging = logger is None
        self.logger = logger or LOG_SETUP_MODULE.setup_logging(level=logging.INFO)  # pyright: ignore
        self.config_handler = ConfigHandler(self, config_dir=config_dir)
        if owns_logging:
            self._apply_log_level()
        self.ipc = IPC_MODULE.HostIPC(host)  # pyright: ignore
        self.plugin_loader = PLUGIN_LOADER_MODULE.PluginLoader(self)  # pyright: ignore
        self.plugins = self.plugin_loader.plugins
        if watch_config:
            self.config_handler.start_watcher()

    def _apply_log_level(self) -> None:
        level_name = str(self.config_handler.get_root_setting(["logging", "level"], "INFO"))
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            self.logger.warning(f"Unknown log level '{level_name}', keeping INFO.")
            return
        LOG_SETUP_MODULE.set_log_level(level)  # pyright: ignore

    def load_plugins(self) -> None:
        self.plugin_loader.load_plugins()

    def handle_event(self, msg: Dict[str, Any]) -> None:
        """Forward a host layout event to the event manager."""
        event_manager = self.plugins.get("event_manager")
        if event_manager is None:
            self.logger.warning("Event Manager not loaded; dropping host event.")
            return
        event_manager.handle_event(msg)

    @property
    def centering(self) -> Optional[Any]:
        """The running centering plugin, or None while disabled."""
        return self.plugins.get(CENTERING_PLUGIN)

    def toggle_centering(self) -> bool:
        """Enable centering if disabled and vice versa; returns True when now enabled."""
        if self.plugin_loader.is_enabled(CENTERING_PLUGIN):
            self.plugin_loader.disable_plugin(CENTERING_PLUGIN)
            return False
        return self.plugin_loader.enable_plugin(CENTERING_PLUGIN) is not None

    def shutdown(self) -> None:
        """Stop all plugins and the config watcher."""
        self.plugin_loader.unload_all()
        self.config_handler.stop_watcher()
