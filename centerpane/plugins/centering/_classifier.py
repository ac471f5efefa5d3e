import re
from enum import Enum
from typing import Any, Optional

from centerpane.core.host.ipc import HostIPC
from centerpane.plugins.centering._config import CenteringConfig

WINDOW_LABEL_MARKER = "centerpane-window-label"


class WindowCategory(Enum):
    SWITCH_LABEL = "switch-label"
    MINIMAP = "minimap"
    CENTERABLE = "centerable"
    IGNORED = "ignored"


def is_switch_label_buffer(ipc: HostIPC, buffer: Any) -> bool:
    """True when the buffer carries the window-label marker at its start."""
    return WINDOW_LABEL_MARKER in (ipc.buffer_markers_at_start(buffer) or [])


def is_minimap_buffer(ipc: HostIPC, buffer_name: Optional[str], config: CenteringConfig) -> bool:
    # The minimap first shows the target buffer and swaps in its own later;
    # until the swap its window is classified like any other window.
    if not config.minimap_support or buffer_name is None:
        return False
    minimap = ipc.collaborator("minimap")
    if minimap is None or not getattr(minimap, "active", False):
        return False
    prefix = getattr(minimap, "buffer_name_prefix", None)
    if not prefix:
        return False
    return re.match(f"^{re.escape(prefix)}.*$", buffer_name) is not None


def is_ignored(
    ipc: HostIPC, window: Any, buffer: Any, buffer_name: Optional[str], config: CenteringConfig
) -> bool:
    """Ignored by major mode, by buffer name, or by any filter predicate."""
    if ipc.derived_mode_p(ipc.buffer_major_mode(buffer), config.ignore_modes):
        return True
    if buffer_name is not None and any(
        pattern.search(buffer_name) for pattern in config.ignore_name_patterns
    ):
        return True
    return any(predicate(window) for predicate in config.ignore_filters)


def classify(ipc: HostIPC, window: Any, config: CenteringConfig) -> WindowCategory:
    """
    Categorize a window. First match wins:
    switch label, minimap, ignored, centerable.
    """
    buffer = ipc.window_buffer(window)
    if buffer is None:
        return WindowCategory.IGNORED
    if is_switch_label_buffer(ipc, buffer):
        return WindowCategory.SWITCH_LABEL
    buffer_name = ipc.buffer_name(buffer)
    if is_minimap_buffer(ipc, buffer_name, config):
        return WindowCategory.MINIMAP
    if is_ignored(ipc, window, buffer, buffer_name, config):
        return WindowCategory.IGNORED
    return WindowCategory.CENTERABLE
