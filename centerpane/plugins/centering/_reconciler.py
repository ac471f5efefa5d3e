from typing import Any, Dict, List, Optional, Tuple

from centerpane.core.host.ipc import HostIPC
from centerpane.plugins.centering._classifier import WindowCategory, classify
from centerpane.plugins.centering._config import CenteringConfig
from centerpane.plugins.centering._margins import (
    INFEASIBLE,
    NEUTRAL,
    MarginPair,
    window_centering_margins,
)
from centerpane.plugins.centering._metrics import occupied_width

UNTOUCHED_CATEGORIES = (WindowCategory.SWITCH_LABEL, WindowCategory.MINIMAP)


class Reconciler:
    """
    Applies the margin policy to every live window of the host.

    Each window's margins depend only on its own edges and the frame width,
    so a pass can run in any order and running it twice changes nothing.
    """

    def __init__(self, ipc: HostIPC, logger: Any):
        self.ipc = ipc
        self.logger = logger

    def fallback_margins(self, window: Any, config: CenteringConfig) -> MarginPair:
        """Margins for windows that are ignored or cannot be centered."""
        line_numbers = self.ipc.collaborator("line_numbers")
        if config.line_number_support and line_numbers is not None:
            buffer = self.ipc.window_buffer(window)
            if buffer is not None and line_numbers.active_in(buffer):
                return MarginPair(config.gutter_width, 0)
        return NEUTRAL

    def target_margins(
        self, window: Any, config: CenteringConfig
    ) -> Tuple[WindowCategory, Optional[MarginPair]]:
        """Category of ``window`` and the pair to write, None meaning leave it alone."""
        category = classify(self.ipc, window, config)
        if category in UNTOUCHED_CATEGORIES:
            return category, None
        if category is WindowCategory.CENTERABLE:
            margins = window_centering_margins(self.ipc, window, config.visible_width)
            if margins is not None and margins is not INFEASIBLE:
                if config.only_set_left_margin:
                    return category, MarginPair(margins.left, 0)
                return category, margins
        return category, self.fallback_margins(window, config)

    def apply(self, window: Any, margins: MarginPair) -> bool:
        """Write ``margins`` unless the window died or already has them."""
        if not self.ipc.window_live_p(window):
            return False
        margins = MarginPair.checked(*margins)
        if self.ipc.window_margins(window) == tuple(margins):
            return False
        self.ipc.set_window_margins(window, margins.left, margins.right)
        return True

    def reconcile_all(self, config: CenteringConfig) -> Dict[Any, Optional[MarginPair]]:
        """One pass over all windows; returns what each window was assigned."""
        assigned: Dict[Any, Optional[MarginPair]] = {}
        written = 0
        for window in self.ipc.window_list() or []:
            if not self.ipc.window_live_p(window):
                continue
            category, margins = self.target_margins(window, config)
            assigned[window] = margins
            if margins is not None and self.apply(window, margins):
                written += 1
            self.logger.debug(
                f"Window {window!r}: {category.value} -> {margins}",
            )
        self.logger.debug(
            f"Reconciled {len(assigned)} windows, {written} margin writes."
        )
        return assigned

    def reset_all(self) -> int:
        """Set every live window back to (0, 0); returns the number of windows."""
        count = 0
        for window in self.ipc.window_list() or []:
            if self.ipc.window_live_p(window):
                self.ipc.set_window_margins(window, 0, 0)
                count += 1
        return count

    def describe(self, config: CenteringConfig) -> List[Dict[str, Any]]:
        """Diagnostic records for every live window; writes nothing."""
        records = []
        for window in self.ipc.window_list() or []:
            if not self.ipc.window_live_p(window):
                continue
            category, margins = self.target_margins(window, config)
            records.append(
                {
                    "window": window,
                    "category": category.value,
                    "edges": self.ipc.window_edges(window),
                    "margins": self.ipc.window_margins(window),
                    "target": margins,
                    "occupied_width": occupied_width(self.ipc, window),
                }
            )
        return records
