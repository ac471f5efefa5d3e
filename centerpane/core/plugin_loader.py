import os
import importlib
import importlib.util
from typing import Any, Dict, List, Optional, Tuple


class PluginLoader:
    """
    Manages the lifecycle of centerpane plugins.
    The loading sequence is structured into three phases:
    1.  Discovery and Validation of the modules under ``centerpane/plugins``.
    2.  Dependency Sorting: a **Topological Sort** satisfies ``deps`` first,
        ``priority`` (highest first) breaks ties.
    3.  Initialization: every plugin is instantiated with the session and
        its ``on_start`` hook runs.
    Plugin names are the last segment of the metadata ``id``.
    """

    REQUIRED_FIELDS = ("id", "name", "version")

    def __init__(self, session_instance: Any, plugins_dir: Optional[str] = None):
        self.session_instance = session_instance
        self.logger = session_instance.logger
        self.plugins: Dict[str, Any] = {}
        self.plugins_import: Dict[str, Any] = {}
        self.plugin_metadata_map: Dict[str, Dict[str, Any]] = {}
        self.plugins_dir = plugins_dir or self.plugins_base_path()
        self.disabled_plugins = (
            session_instance.config_handler.get_root_setting(["plugins", "disabled"], [])
            or []
        )

    def plugins_base_path(self) -> str:
        """Directory of the ``centerpane.plugins`` package."""
        spec = importlib.util.find_spec("centerpane.plugins")
        if spec and spec.submodule_search_locations:
            return list(spec.submodule_search_locations)[0]
        raise FileNotFoundError("Plugins directory not found.")

    def _find_plugins_in_dir(self, directory_path: str) -> List[Tuple[str, str]]:
        """
        Recursively searches a directory for plugin modules and returns
        ``(module_name, dotted_module_path)`` pairs. Modules starting with an
        underscore are private helpers and are skipped.
        """
        found = []
        for root, dirs, files in os.walk(directory_path):
            dirs[:] = sorted(d for d in dirs if d != "__pycache__")
            for file_name in sorted(files):
                if not file_name.endswith(".py") or file_name.startswith("_"):
                    continue
                relative = os.path.relpath(os.path.join(root, file_name), directory_path)
                module_path = "centerpane.plugins." + relative[:-3].replace(os.sep, ".")
                found.append((file_name[:-3], module_path))
        return found

    def _import_and_validate(self, module_name: str, module_path: str) -> Optional[Any]:
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            self.logger.error(f"Failed to import plugin module {module_path}: {e}")
            return None
        if not hasattr(module, "get_plugin_metadata") or not hasattr(
            module, "get_plugin_class"
        ):
            self.logger.debug(f"Module {module_name} is not a plugin. Skipping.")
            return None
        metadata = module.get_plugin_metadata(self.session_instance)
        if not isinstance(metadata, dict):
            self.logger.error(
                f"Plugin {module_name} get_plugin_metadata did not return a dictionary. Skipping."
            )
            return None
        missing_fields = [f for f in self.REQUIRED_FIELDS if f not in metadata]
        if missing_fields:
            self.logger.error(
                f"Plugin {module_name} is missing required metadata fields: {', '.join(missing_fields)}. Skipping."
            )
            return None
        deps = metadata.get("deps", [])
        if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
            self.logger.error(f"Plugin '{module_name}' has an invalid 'deps' list. Skipping.")
            return None
        return module

    def discover_plugins(self) -> None:
        """Imports and validates every plugin module, filling plugins_import."""
        self.logger.info("Starting plugin scan.")
        for module_name, module_path in self._find_plugins_in_dir(self.plugins_dir):
            module = self._import_and_validate(module_name, module_path)
            if module is None:
                continue
            metadata = module.get_plugin_metadata(self.session_instance)
            plugin_name = metadata["id"].split(".")[-1]
            self.plugins_import[plugin_name] = module
            self.plugin_metadata_map[plugin_name] = metadata
        self.logger.info(
            f"Plugin discovery complete. Found {len(self.plugins_import)} plugins."
        )

    def sort_plugins(self, names: List[str]) -> List[str]:
        """
        Kahn's algorithm over ``deps`` with ``priority`` (high-to-low) then
        name as tie breakers. Plugins in a dependency cycle are dropped.
        """
        in_degree = {name: 0 for name in names}
        adj_list: Dict[str, List[str]] = {name: [] for name in names}
        for name in names:
            for dep in self.plugin_metadata_map[name].get("deps", []):
                if dep in in_degree:
                    adj_list[dep].append(name)
                    in_degree[name] += 1
                else:
                    self.logger.warning(
                        f"Plugin '{name}' declares dependency '{dep}' which was not found among loaded plugins."
                    )

        def sort_key(name):
            return (-self.plugin_metadata_map[name].get("priority", 0), name)

        ready_to_load = sorted((n for n, d in in_degree.items() if d == 0), key=sort_key)
        sorted_plugin_names = []
        while ready_to_load:
            current = ready_to_load.pop(0)
            sorted_plugin_names.append(current)
            for dependent in adj_list[current]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    ready_to_load.append(dependent)
                    ready_to_load.sort(key=sort_key)
        if len(sorted_plugin_names) != len(names):
            cyclical_plugins = [name for name, degree in in_degree.items() if degree > 0]
            self.logger.error(
                f"Circular dependency detected among plugins: {', '.join(sorted(cyclical_plugins))}. "
                "These plugins will NOT be initialized."
            )
        return sorted_plugin_names

    def load_plugins(self) -> None:
        """Discovers, sorts and starts every enabled plugin."""
        self.discover_plugins()
        candidates = [
            name
            for name, metadata in self.plugin_metadata_map.items()
            if metadata.get("enabled", True) and name not in self.disabled_plugins
        ]
        for plugin_name in self.sort_plugins(candidates):
            self._initialize_single_plugin(plugin_name)

    def _initialize_single_plugin(self, plugin_name: str) -> Optional[Any]:
        module = self.plugins_import[plugin_name]
        plugin_class = module.get_plugin_class()
        plugin_instance = plugin_class(self.session_instance)
        if not plugin_instance.check_dependencies():
            self.logger.error(
                f"Plugin '{plugin_name}' has unmet dependencies: {plugin_instance.dependencies}. Skipping."
            )
            return None
        # registered first so on_start can look itself up
        self.plugins[plugin_name] = plugin_instance
        try:
            plugin_instance.on_start()
        except Exception:
            del self.plugins[plugin_name]
            self.logger.exception(f"Failed to initialize plugin '{plugin_name}'")
            return None
        self.logger.info(f"Initialized plugin: {plugin_name}")
        return plugin_instance

    def enable_plugin(self, plugin_name: str) -> Optional[Any]:
        """Start a fresh instance of a discovered plugin."""
        if plugin_name in self.plugins:
            self.logger.warning(f"Plugin '{plugin_name}' is already enabled.")
            return self.plugins[plugin_name]
        if plugin_name not in self.plugins_import:
            self.logger.error(f"Plugin '{plugin_name}' not found. Skipping enable.")
            return None
        return self._initialize_single_plugin(plugin_name)

    def disable_plugin(self, plugin_name: str) -> bool:
        """Stop and drop a running plugin."""
        if plugin_name not in self.plugins:
            self.logger.warning(f"Plugin '{plugin_name}' not found.")
            return False
        plugin_instance = self.plugins.pop(plugin_name)
        plugin_instance.on_stop()
        plugin_instance.disable()
        self.logger.info(f"Disabled plugin: {plugin_name}")
        return True

    def unload_all(self) -> None:
        """Disable every running plugin in reverse start order."""
        for plugin_name in reversed(list(self.plugins)):
            self.disable_plugin(plugin_name)

    def is_enabled(self, plugin_name: str) -> bool:
        return plugin_name in self.plugins
