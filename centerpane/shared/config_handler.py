import os
import copy
import toml
import time
from pathlib import Path
from typing import Any, Callable, List, Optional, Dict, Tuple, Union
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from centerpane.shared import config_template

_NOT_FOUND = object()

LOAD_ATTEMPTS = 3
LOAD_RETRY_DELAY = 0.1


class ConfigReloadHandler(FileSystemEventHandler):
    """Debounced watchdog handler calling ``callback`` when the watched file changes."""

    def __init__(self, callback: Callable[[], Any], watched_path, debounce: float = 1.0):
        super().__init__()
        self.callback = callback
        self.debounce = debounce
        self.last: Optional[float] = None
        self._watched = Path(watched_path).resolve()

    def on_modified(self, event):
        try:
            p = Path(event.src_path).resolve()
        except (TypeError, OSError):
            return
        if p != self._watched:
            return
        now = time.monotonic()
        if self.last is None or now - self.last > self.debounce:
            self.last = now
            self.callback()

    on_created = on_modified


def strip_hints(data: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy of ``data`` without the ``*_hint`` documentation keys."""
    return {
        key: strip_hints(value) if isinstance(value, dict) else copy.deepcopy(value)
        for key, value in data.items()
        if not key.endswith("_hint")
    }


def fill_missing(target: Dict[str, Any], defaults: Dict[str, Any]) -> bool:
    """Copy keys missing from ``target`` out of ``defaults``, recursing into tables.

    Values already present are never replaced. Returns True if anything was added.
    """
    added = False
    for key, default in defaults.items():
        current = target.get(key, _NOT_FOUND)
        if current is _NOT_FOUND:
            target[key] = copy.deepcopy(default)
            added = True
        elif isinstance(current, dict) and isinstance(default, dict):
            added = fill_missing(current, default) or added
    return added


class ConfigHandler:
    """
    Owns ``config.toml``: loading with defaults filled in, saving, live
    reloads through watchdog, and key-path access for plugins.

    A file that fails to parse is never overwritten; the handler then runs
    on defaults and refuses writes until the file is fixed by hand.
    """

    def __init__(
        self,
        session_instance: Any,
        plugin_id: Optional[str] = None,
        config_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            session_instance: The owning session, used for the logger.
            plugin_id: Default section used by get/set_plugin_setting.
            config_dir: Directory holding config.toml; XDG location when None.
        """
        self.logger = session_instance.logger
        self.plugin_id = plugin_id
        self.default_config = copy.deepcopy(config_template.default_config)
        self.config_path = str(config_dir) if config_dir else self.setup_config_paths()
        Path(self.config_path).mkdir(parents=True, exist_ok=True)
        self.config_file = Path(self.config_path) / "config.toml"
        self.observer: Optional[Any] = None
        self.writable = False
        self._known_mtime = 0.0
        self.config_data: Dict[str, Any] = self.load_config()

    @property
    def default_config_stripped(self) -> Dict[str, Any]:
        return strip_hints(self.default_config)

    def setup_config_paths(self) -> str:
        """Returns the XDG compliant configuration directory."""
        config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
            os.path.expanduser("~"), ".config"
        )
        return os.path.join(config_home, "centerpane")

    def _read_file(self) -> Tuple[Dict[str, Any], bool]:
        """Parse config.toml, retrying briefly for editors that write in two steps."""
        last_error: Optional[Exception] = None
        for attempt in range(1, LOAD_ATTEMPTS + 1):
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = toml.load(f)
                self._known_mtime = os.path.getmtime(self.config_file)
                return data, True
            except (OSError, toml.TomlDecodeError) as e:
                last_error = e
                self.logger.warning(f"Reading {self.config_file} failed (attempt {attempt}): {e}")
                time.sleep(LOAD_RETRY_DELAY)
        self.logger.error(
            f"Giving up on {self.config_file}: {last_error}. Running on defaults; "
            "the file is left untouched and settings are not saved until it is fixed."
        )
        return {}, False

    def load_config(self) -> Dict[str, Any]:
        """Read the file (creating it from defaults when absent) and fill in defaults."""
        if not self.config_file.exists():
            self.logger.info(f"No config at {self.config_file}; writing defaults.")
            self.writable = True
            self.config_data = self.default_config_stripped
            self.save_config()
            return self.config_data
        data, self.writable = self._read_file()
        fill_missing(data, self.default_config_stripped)
        self.logger.debug("Configuration loaded.")
        return data

    def reload_config(self) -> None:
        """Replace the live configuration with the file's current content."""
        self.config_data = self.load_config()
        self.logger.info("Configuration reloaded from file.")

    def save_config(self) -> bool:
        """Write ``config_data`` to config.toml; refused after a failed load."""
        if not self.writable:
            self.logger.warning(
                f"Not saving: {self.config_file} could not be parsed. Fix it manually first."
            )
            return False
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                toml.dump(self.config_data, f)
        except OSError as e:
            self.logger.error(f"Could not write {self.config_file}: {e}")
            return False
        self._known_mtime = os.path.getmtime(self.config_file)
        self.logger.debug(f"Saved {self.config_file}.")
        return True

    def start_watcher(self) -> None:
        """Starts a watchdog observer reloading the config when the file changes."""
        if self.observer is not None:
            return
        handler = ConfigReloadHandler(self._on_config_file_changed, self.config_file)
        self.observer = Observer()
        self.observer.schedule(handler, self.config_path, recursive=False)
        self.observer.daemon = True
        self.observer.start()
        self.logger.debug(f"Watching {self.config_file} for changes.")

    def stop_watcher(self) -> None:
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join(timeout=2)
        self.observer = None

    def _on_config_file_changed(self) -> None:
        """Reloads unless the change is our own write."""
        try:
            mtime = os.path.getmtime(self.config_file)
        except FileNotFoundError:
            self.logger.warning(f"{self.config_file} disappeared; keeping current settings.")
            return
        if mtime <= self._known_mtime:
            self.logger.debug("Change event received for our own write; ignored.")
            return
        self.logger.info("Configuration file modified. Reloading...")
        self.reload_config()

    def get_root_setting(self, key_path: List[str], default_value: Any = None) -> Any:
        """
        Value at ``key_path`` (e.g. ``["logging", "level"]``), or
        ``default_value`` when any step of the path is missing.
        """
        node: Any = self.config_data
        for key in key_path:
            if not isinstance(node, dict) or key not in node:
                return default_value
            node = node[key]
        return node

    def set_root_setting(self, key_path: List[str], new_value: Any) -> bool:
        """Set the value at ``key_path``, creating tables on the way, and save."""
        if not key_path:
            self.logger.error("Cannot set a setting without a key path.")
            return False
        if not self.writable:
            self.logger.warning(
                f"Not setting {'.'.join(key_path)}: {self.config_file} could not be parsed."
            )
            return False
        node = self.config_data
        for key in key_path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = node[key] = {}
            node = child
        node[key_path[-1]] = new_value
        self.logger.info(f"Set {'.'.join(key_path)} = {new_value!r}.")
        return self.save_config()

    def remove_root_setting(self, key_path: List[str]) -> bool:
        """Delete the value at ``key_path`` and save."""
        if not key_path:
            self.logger.error("Cannot remove a setting without a key path.")
            return False
        parent = self.get_root_setting(key_path[:-1])
        if not isinstance(parent, dict) or key_path[-1] not in parent:
            self.logger.warning(f"Setting {'.'.join(key_path)} not found.")
            return False
        del parent[key_path[-1]]
        return self.save_config()

    def _plugin_key_path(
        self, key: Optional[Union[str, List[str]]], plugin_id: Optional[str]
    ) -> Optional[List[str]]:
        section = plugin_id or self.plugin_id
        if not section:
            return None
        if key is None:
            return [section]
        return [section] + ([key] if isinstance(key, str) else list(key))

    def get_plugin_setting(
        self,
        key: Optional[Union[str, List[str]]] = None,
        default_value: Any = None,
        plugin_id: Optional[str] = None,
    ) -> Any:
        """
        Value from a plugin's section; the whole section without ``key``.
        A missing setting with a non-None default is written to the file so
        it shows up for the user to edit.
        """
        key_path = self._plugin_key_path(key, plugin_id)
        if key_path is None:
            return default_value
        value = self.get_root_setting(key_path, _NOT_FOUND)
        if value is not _NOT_FOUND:
            return value
        if default_value is not None:
            self.set_root_setting(key_path, default_value)
        return default_value

    def set_plugin_setting(
        self,
        key: Union[str, List[str]],
        value: Any,
        plugin_id: Optional[str] = None,
    ) -> bool:
        key_path = self._plugin_key_path(key, plugin_id)
        if key_path is None:
            self.logger.error(f"No plugin section for setting {key!r}.")
            return False
        return self.set_root_setting(key_path, value)
