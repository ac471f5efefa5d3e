import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Pattern, Tuple

from centerpane.core.host.ipc import HostIPC

WindowPredicate = Callable[[Any], bool]

DEFAULT_VISIBLE_WIDTH = 128
DEFAULT_GUTTER_WIDTH = 3

# Named filters usable from config.toml; each factory binds the host adapter.
NAMED_FILTERS: Dict[str, Callable[[HostIPC], WindowPredicate]] = {
    "minibuffer": lambda ipc: ipc.window_minibuffer_p,
    "dedicated": lambda ipc: ipc.window_dedicated_p,
}


class ConfigurationError(ValueError):
    """Raised when the centering settings cannot be turned into a snapshot."""


@dataclass(frozen=True)
class CenteringConfig:
    """Read-only settings for one reconcile pass."""

    visible_width: int = DEFAULT_VISIBLE_WIDTH
    ignore_name_patterns: Tuple[Pattern, ...] = ()
    ignore_filters: Tuple[WindowPredicate, ...] = ()
    ignore_modes: Tuple[str, ...] = ()
    gutter_width: int = DEFAULT_GUTTER_WIDTH
    only_set_left_margin: bool = False
    minimap_support: bool = True
    line_number_support: bool = True
    window_label_support: bool = True
    lighter: str = field(default=" Ⓜ")


def _compile_patterns(patterns: Iterable[Any]) -> Tuple[Pattern, ...]:
    compiled = []
    for pattern in patterns:
        if not isinstance(pattern, str):
            raise ConfigurationError(f"ignore_name_patterns entries must be strings, got {pattern!r}")
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ConfigurationError(f"Invalid ignore_name_patterns entry {pattern!r}: {e}") from e
    return tuple(compiled)


def _non_negative_int(settings: Dict[str, Any], key: str, default: int, positive=False) -> int:
    value = settings.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    if value < 0 or (positive and value == 0):
        raise ConfigurationError(f"{key} must be {'positive' if positive else 'non-negative'}, got {value}")
    return value


def build_config(
    settings: Dict[str, Any],
    ipc: HostIPC,
    extra_filters: Iterable[WindowPredicate] = (),
) -> CenteringConfig:
    """
    Build the snapshot for a pass from the plugin's config section.

    Named filters from the file come first, runtime predicates registered
    with ``add_ignore_filter`` follow in registration order.
    """
    settings = settings or {}
    filters = []
    for name in settings.get("ignore_filters", []):
        if name not in NAMED_FILTERS:
            raise ConfigurationError(
                f"Unknown ignore filter {name!r}; available: {', '.join(sorted(NAMED_FILTERS))}"
            )
        filters.append(NAMED_FILTERS[name](ipc))
    filters.extend(extra_filters)
    modes = settings.get("ignore_modes", [])
    if not all(isinstance(m, str) for m in modes):
        raise ConfigurationError(f"ignore_modes entries must be strings, got {modes!r}")
    return CenteringConfig(
        visible_width=_non_negative_int(
            settings, "visible_width", DEFAULT_VISIBLE_WIDTH, positive=True
        ),
        ignore_name_patterns=_compile_patterns(settings.get("ignore_name_patterns", [])),
        ignore_filters=tuple(filters),
        ignore_modes=tuple(modes),
        gutter_width=_non_negative_int(settings, "gutter_width", DEFAULT_GUTTER_WIDTH),
        only_set_left_margin=bool(settings.get("only_set_left_margin", False)),
        minimap_support=bool(settings.get("minimap_support", True)),
        line_number_support=bool(settings.get("line_number_support", True)),
        window_label_support=bool(settings.get("window_label_support", True)),
        lighter=str(settings.get("lighter", " Ⓜ")),
    )
