"""Shared fixtures: an in-memory host editor and a loaded session."""

import pytest
import structlog

from centerpane.core.host.ipc import DeadWindowError, HostIPC
from centerpane.session import Session


class FakeBuffer:
    def __init__(self, name, mode="fundamental-mode", lines=10):
        self.name = name
        self.mode = mode
        self.lines = lines
        self.markers = []

    def __repr__(self):
        return f"<buffer {self.name}>"


class FakeWindow:
    def __init__(self, buffer, left=0, right=200, margins=(0, 0), fringes=(0, 0)):
        self.buffer = buffer
        self.left = left
        self.right = right
        self.margins = margins
        self.fringes = fringes
        self.live = True
        self.minibuffer = False
        self.dedicated = False

    def __repr__(self):
        return f"<window {self.buffer.name} {self.left}-{self.right}>"


class FakeLineNumbers:
    """Redrawing numbers resets the left margin, like a real gutter renderer."""

    def __init__(self, host):
        self.host = host
        self.default_format = "dynamic"
        self.format = "dynamic"
        self.buffers = set()
        self.redraws = 0

    def active_in(self, buffer):
        return buffer in self.buffers

    def update_window(self, window):
        self.redraws += 1
        _, right = window.margins
        window.margins = (0, right)


class FakeMinimap:
    def __init__(self, active=True, prefix="*MINIMAP*"):
        self.active = active
        self.buffer_name_prefix = prefix


class FakeWindowLabels:
    def __init__(self):
        self.created = []

    def create_label(self, window, label="a"):
        buffer = FakeBuffer(f" *label-{label}*")
        window.buffer = buffer
        self.created.append(buffer)
        return buffer


class FakeHost:
    """Single-frame host; windows are laid out by their left/right edges."""

    def __init__(self, width=200):
        self.width = width
        self.windows = []
        self.writes = []
        self.mode_parents = {"python-mode": "prog-mode", "pdf-view-mode": "special-mode"}
        self.line_numbers = None
        self.minimap = None
        self.window_labels = None
        self.margins_seen_by_split = None

    def add_window(self, name, left=0, right=None, mode="fundamental-mode", **kwargs):
        window = FakeWindow(
            FakeBuffer(name, mode), left, self.width if right is None else right, **kwargs
        )
        self.windows.append(window)
        return window

    def _check(self, window):
        if not window.live:
            raise DeadWindowError(window)

    def window_list(self):
        return list(self.windows)

    def window_live_p(self, window):
        return window.live

    def window_edges(self, window):
        self._check(window)
        return window.left, 0, window.right, 40

    def window_margins(self, window):
        self._check(window)
        return window.margins

    def set_window_margins(self, window, left, right):
        self._check(window)
        window.margins = (left, right)
        self.writes.append((window, left, right))

    def window_buffer(self, window):
        self._check(window)
        return window.buffer

    def window_body_width(self, window):
        self._check(window)
        left, right = window.margins
        return (window.right - window.left) - (left or 0) - (right or 0) - sum(window.fringes)

    def window_fringes(self, window):
        self._check(window)
        return window.fringes

    def window_minibuffer_p(self, window):
        return window.minibuffer

    def window_dedicated_p(self, window):
        return window.dedicated

    def frame_width(self, window=None):
        return self.width

    def buffer_name(self, buffer):
        return buffer.name

    def buffer_major_mode(self, buffer):
        return buffer.mode

    def derived_mode_p(self, mode, *modes):
        while mode is not None:
            if mode in modes:
                return True
            mode = self.mode_parents.get(mode)
        return False

    def buffer_markers_at_start(self, buffer):
        return list(buffer.markers)

    def put_buffer_marker(self, buffer, tag):
        buffer.markers.append(tag)

    def split_window(self, window):
        self.margins_seen_by_split = [w.margins for w in self.windows]
        middle = (window.left + window.right) // 2
        new_window = FakeWindow(FakeBuffer(window.buffer.name, window.buffer.mode), middle, window.right)
        new_window.buffer = window.buffer
        window.right = middle
        self.windows.append(new_window)
        return new_window


@pytest.fixture
def logger():
    return structlog.get_logger("centerpane.tests")


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def ipc(host):
    return HostIPC(host)


@pytest.fixture
def config_dir(tmp_path):
    return tmp_path / "config"


@pytest.fixture
def make_session(host, logger, config_dir):
    """Build a session on the shared host; plugins load on demand."""
    sessions = []

    def _make(load=True):
        session = Session(host, logger=logger, config_dir=str(config_dir), watch_config=False)
        if load:
            session.load_plugins()
        sessions.append(session)
        return session

    yield _make
    for session in sessions:
        session.shutdown()


@pytest.fixture
def session(make_session):
    return make_session()
