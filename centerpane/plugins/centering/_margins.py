from typing import Any, NamedTuple, Optional, Union

from centerpane.core.host.ipc import HostIPC


class MarginPair(NamedTuple):
    """Left/right margin columns, always written together."""

    left: int
    right: int

    @classmethod
    def checked(cls, left: int, right: int) -> "MarginPair":
        if left < 0 or right < 0:
            raise ValueError(f"Margins must be non-negative, got ({left}, {right})")
        return cls(left, right)


class _Infeasible:
    """Centering cannot be expressed with non-negative margins."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "INFEASIBLE"

    def __bool__(self):
        return False


INFEASIBLE = _Infeasible()

NEUTRAL = MarginPair(0, 0)


def default_margin(frame_width: int, visible_width: int) -> int:
    """Margin on each side of a ``visible_width`` column centered in the frame."""
    return max(0, frame_width - visible_width) // 2


def compute_centering_margins(
    left_edge: int, right_edge: int, frame_width: int, visible_width: int
) -> Union[MarginPair, _Infeasible]:
    """
    Margins that put this window's share of the frame-wide centered column
    in place.

    The column is laid out over the whole frame; each window gets the part
    of the frame margin that falls inside its own edges. A window reaching
    past the column's margin on either side yields INFEASIBLE.
    """
    margin = default_margin(frame_width, visible_width)
    left = margin - left_edge
    right = margin - (frame_width - right_edge)
    if left < 0 or right < 0:
        return INFEASIBLE
    return MarginPair(left, right)


def window_centering_margins(
    ipc: HostIPC, window: Any, visible_width: int
) -> Optional[Union[MarginPair, _Infeasible]]:
    """Read the window's edges and frame width from the host and compute margins.

    Returns None when the window disappeared while being read.
    """
    edges = ipc.window_edges(window)
    frame_width = ipc.frame_width(window)
    if edges is None or frame_width is None:
        return None
    left_edge, _, right_edge, _ = edges
    return compute_centering_margins(left_edge, right_edge, frame_width, visible_width)
