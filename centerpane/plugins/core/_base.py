import os
import sys
import functools
from typing import Any, Dict, List, Optional
from centerpane.core.host.ipc import HostIPC
from centerpane.shared.config_handler import ConfigHandler

_THIS_FILE = os.path.basename(__file__)


class PluginLogAdapter:
    """
    Logger handed to plugins. Every call is tagged with the plugin name and
    the file, function and line of the plugin code that logged it, as
    structlog key/values.
    """

    def __init__(self, logger: Any, plugin_name: Optional[str] = None):
        self._logger = logger
        self._plugin_name = plugin_name

    def _caller(self) -> Dict[str, Any]:
        frame = sys._getframe(2)
        while frame is not None and os.path.basename(frame.f_code.co_filename) == _THIS_FILE:
            frame = frame.f_back
        if frame is None:
            return {}
        return {
            "caller": f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}",
            "func": frame.f_code.co_name,
        }

    def _log(self, level: str, message: str, **kwargs) -> None:
        fields = self._caller()
        if self._plugin_name:
            fields["plugin"] = self._plugin_name
        fields.update(kwargs)
        getattr(self._logger, level)(message, **fields)

    def debug(self, message: str, **kwargs):
        self._log("debug", message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log("info", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log("error", message, **kwargs)

    def exception(self, message: str, **kwargs):
        self._log("exception", message, **kwargs)

    def __getattr__(self, name):
        return getattr(self._logger, name)


class BasePlugin:
    """
    Base class for all centerpane plugins. Injects the shared session
    resources (logger, host IPC, configuration, plugin registry) and defines
    the plugin lifecycle.
    """

    def __init__(self, session_instance: Any):
        self._session_instance = session_instance
        self._plugin_loader = session_instance.plugin_loader
        self._ipc: HostIPC = session_instance.ipc
        self._config_handler: ConfigHandler = session_instance.config_handler
        metadata = self.get_plugin_metadata() or {}
        self.plugin_id: Optional[str] = metadata.get("id")
        self.dependencies: List[str] = list(metadata.get("deps", []))
        name = self.plugin_id.split(".")[-1] if self.plugin_id else type(self).__name__
        self._logger_adapter = PluginLogAdapter(session_instance.logger, name)

    def get_plugin_metadata(self) -> Optional[Dict[str, Any]]:
        """Metadata of the module defining this plugin, None for ad-hoc subclasses."""
        module = sys.modules.get(type(self).__module__)
        provider = getattr(module, "get_plugin_metadata", None)
        if provider is None:
            return None
        return provider(self._session_instance)

    @property
    def obj(self) -> Any:
        """The owning Session."""
        return self._session_instance

    @property
    def logger(self) -> PluginLogAdapter:
        return self._logger_adapter

    @property
    def ipc(self) -> HostIPC:
        return self._ipc

    @property
    def plugins(self) -> Dict[str, Any]:
        """Running plugins by name."""
        return self._plugin_loader.plugins

    @property
    def plugin_loader(self) -> Any:
        return self._plugin_loader

    @property
    def config_handler(self) -> ConfigHandler:
        return self._config_handler

    @property
    def get_root_setting(self):
        """Read-only access to ConfigHandler.get_root_setting (keys, default) -> Any."""
        return self._config_handler.get_root_setting

    @property
    def get_plugin_setting(self):
        """ConfigHandler.get_plugin_setting bound to this plugin's section."""
        return functools.partial(
            self._config_handler.get_plugin_setting, plugin_id=self.plugin_id
        )

    @property
    def set_plugin_setting(self):
        """ConfigHandler.set_plugin_setting bound to this plugin's section."""
        return functools.partial(
            self._config_handler.set_plugin_setting, plugin_id=self.plugin_id
        )

    def check_dependencies(self) -> bool:
        """True when every plugin named in ``deps`` is running."""
        return all(dep in self.plugins for dep in self.dependencies)

    def on_start(self) -> None:
        """Called by the plugin loader once all dependencies are running."""

    def on_stop(self) -> None:
        """Called by the plugin loader before the plugin is disabled."""

    def disable(self) -> None:
        """Final step of the loader's disable; runs ``on_disable``."""
        self.on_disable()

    def on_disable(self) -> None:
        """Cleanup hook for state ``on_stop`` does not cover."""

    def about(self):
        """
        Foundation of every centerpane plugin: resource injection (logger,
        host IPC, configuration) through read-only properties and a
        start/stop lifecycle driven by the plugin loader.
        """
        return self.about.__doc__
