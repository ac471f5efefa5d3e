from typing import Any, Optional

from centerpane.core.host.ipc import HostIPC


def occupied_width(ipc: HostIPC, window: Any) -> Optional[int]:
    """
    Columns a window takes in its frame: body, both margins and the
    fringe-equivalent decoration on each side. None for a dead window.

    Only used for diagnostics; centering works from raw edges so the
    result never depends on margins written by a previous pass.
    """
    body = ipc.window_body_width(window)
    margins = ipc.window_margins(window)
    fringes = ipc.window_fringes(window)
    if body is None or margins is None or fringes is None:
        return None
    return body + sum(margins) + sum(fringes)
