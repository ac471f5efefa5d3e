from typing import Any, List, Optional

from centerpane.core.host.ipc import HostIPC
from centerpane.plugins.centering._advice import Advice
from centerpane.plugins.centering._classifier import WINDOW_LABEL_MARKER
from centerpane.plugins.centering._config import CenteringConfig

MIN_LINE_NUMBER_DIGITS = 3


def padded_line_number_format(line: int, total_lines: int) -> str:
    """Right-align line numbers to at least three columns."""
    width = max(MIN_LINE_NUMBER_DIGITS, len(str(total_lines)))
    return f"{line:>{width}d}"


def line_number_advice(ipc: HostIPC, line_numbers: Any) -> Advice:
    """
    Keep the left margin across a line-number redraw. The redraw resets
    the left margin as a side effect; the right margin is whatever it is
    after the redraw.
    """

    def capture_left_margin(window, *args, **kwargs) -> Optional[int]:
        margins = ipc.window_margins(window)
        return None if margins is None else margins[0]

    def restore_left_margin(left, _result, window, *args, **kwargs) -> None:
        if left is None or not ipc.window_live_p(window):
            return
        current = ipc.window_margins(window)
        if current is None:
            return
        ipc.set_window_margins(window, left, current[1])

    return Advice(
        line_numbers,
        "update_window",
        before=capture_left_margin,
        after=restore_left_margin,
    )


def split_window_advice(ipc: HostIPC) -> Advice:
    """Zero all margins before a split so it sees unpadded window widths."""

    def zero_margins(*args, **kwargs) -> None:
        for window in ipc.window_list() or []:
            if ipc.window_live_p(window):
                ipc.set_window_margins(window, 0, 0)

    return Advice(ipc.sock, "split_window", before=zero_margins)


def window_label_advice(ipc: HostIPC, window_labels: Any) -> Advice:
    """Tag label buffers so the classifier leaves their windows alone."""

    def mark_label_buffer(_state, result, window, *args, **kwargs) -> None:
        buffer = result if result is not None else ipc.window_buffer(window)
        if buffer is not None:
            ipc.put_buffer_marker(buffer, WINDOW_LABEL_MARKER)

    return Advice(window_labels, "create_label", after=mark_label_buffer)


class InterceptionLayer:
    """Owns the advices and the line-number formatter swap of one enabled period."""

    def __init__(self, ipc: HostIPC, logger: Any):
        self.ipc = ipc
        self.logger = logger
        self.advices: List[Advice] = []
        self._line_numbers: Optional[Any] = None
        self._replaced_format: Optional[Any] = None

    def activate(self, config: CenteringConfig) -> None:
        line_numbers = self.ipc.collaborator("line_numbers")
        window_labels = self.ipc.collaborator("window_labels")
        if config.line_number_support and line_numbers is not None:
            self.advices.append(line_number_advice(self.ipc, line_numbers))
            self._swap_line_number_format(line_numbers)
        if callable(getattr(self.ipc.sock, "split_window", None)):
            self.advices.append(split_window_advice(self.ipc))
        if config.window_label_support and window_labels is not None:
            self.advices.append(window_label_advice(self.ipc, window_labels))
        try:
            for advice in self.advices:
                advice.install()
        except Exception:
            self.deactivate()
            raise
        self.logger.debug(
            f"Interception active on: {', '.join(a.name for a in self.advices) or 'nothing'}"
        )

    def deactivate(self) -> None:
        for advice in reversed(self.advices):
            advice.uninstall()
        self.advices = []
        self._restore_line_number_format()

    def _swap_line_number_format(self, line_numbers: Any) -> None:
        default_format = getattr(line_numbers, "default_format", None)
        if default_format is None or getattr(line_numbers, "format", None) != default_format:
            return
        self._line_numbers = line_numbers
        self._replaced_format = line_numbers.format
        line_numbers.format = padded_line_number_format

    def _restore_line_number_format(self) -> None:
        line_numbers = self._line_numbers
        if line_numbers is not None and line_numbers.format is padded_line_number_format:
            line_numbers.format = self._replaced_format
        self._line_numbers = None
        self._replaced_format = None
