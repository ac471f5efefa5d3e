import inspect
import logging

from typing import (
    Any,
    Callable,
    Iterable,
    Optional,
    Type,
    Union,
    List,
    Tuple,
    get_origin,
    get_args,
)

from functools import wraps

logger = logging.getLogger(__name__)


class DeadWindowError(LookupError):
    """Raised by a host when a window handle no longer refers to a live window."""


def validate_type(
    value: Any,
    expected_type: Union[Type, Tuple[Type, ...]],
    name: str = "value",
    allow_none: bool = False,
) -> bool:
    """
    Validate that the provided value matches the expected type.

    Supports plain types, ``Optional[...]`` and tuples of alternatives.
    ``Any`` and parametrized generics are accepted without checking.

    Returns:
        bool: True if valid, raises TypeError otherwise.
    """
    if expected_type is Any:
        return True
    origin = get_origin(expected_type)
    args = get_args(expected_type)

    if origin is Union:
        if type(None) in args:
            inner = [t for t in args if t is not type(None)]
            if value is None:
                return True
            if len(inner) == 1:
                return validate_type(value, inner[0], name=name)
            return validate_type(value, tuple(inner), name=name)
        return validate_type(value, args, name=name)

    if origin is not None:
        return True

    if allow_none and value is None:
        return True

    if isinstance(expected_type, tuple):
        if not any(_is_instance_quiet(value, t) for t in expected_type):
            raise TypeError(
                f"Invalid {name}: Expected one of "
                f"{', '.join(getattr(t, '__name__', str(t)) for t in expected_type)}, "
                f"got {type(value).__name__}"
            )
        return True

    # bool is an int subclass; margins and widths must be real integers
    if expected_type is int and isinstance(value, bool):
        raise TypeError(f"Invalid {name}: Expected type int, got bool")

    if not isinstance(value, expected_type):
        raise TypeError(
            f"Invalid {name}: Expected type {expected_type.__name__}, "
            f"got {type(value).__name__}"
        )

    return True


def _is_instance_quiet(value: Any, expected_type: Any) -> bool:
    try:
        return validate_type(value, expected_type)
    except TypeError:
        return False


def type_checked(func: Callable) -> Callable:
    """Validate annotated arguments of ``func`` on every call."""
    signature = inspect.signature(func)

    @wraps(func)
    def wrapper(*args, **kwargs):
        bound = signature.bind(*args, **kwargs)
        for arg_name, arg_value in bound.arguments.items():
            expected_type = func.__annotations__.get(arg_name)
            if expected_type is not None and arg_name != "self":
                validate_type(arg_value, expected_type, name=arg_name)
        return func(*args, **kwargs)

    return wrapper


def apply_type_checked(cls: type) -> type:
    """
    A class decorator that applies @type_checked to all public methods.
    """
    for name, method in list(vars(cls).items()):
        if name.startswith("_") or isinstance(method, property):
            continue
        if callable(method):
            setattr(cls, name, type_checked(method))
    return cls


def handle_host_error(func):
    """Decorator turning host-side lookup failures into a logged ``None``."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except DeadWindowError as e:
            logger.debug(f"Window went away during '{func.__name__}': {e}")
            return None
        except ConnectionError as e:
            logger.error(f"Host connection error in '{func.__name__}': {e}")
            return None

    return wrapper


@apply_type_checked
class HostIPC:
    """
    Thin adapter over the host editor handle.

    Every read or write centerpane performs on windows, buffers and frames
    goes through this class, so a host only has to provide the primitive
    methods listed in the README. Optional host features are probed with
    ``getattr`` and degrade to neutral answers when missing.
    """

    def __init__(self, sock: Any):
        self.sock = sock

    def collaborator(self, name: str) -> Optional[Any]:
        """Return an optional host collaborator (line numbers, minimap, ...) or None."""
        return getattr(self.sock, name, None)

    @handle_host_error
    def window_list(self) -> List[Any]:
        """List windows in the host's enumeration order."""
        return list(self.sock.window_list() or [])

    def window_live_p(self, window: Any) -> bool:
        try:
            return bool(self.sock.window_live_p(window))
        except DeadWindowError:
            return False

    @handle_host_error
    def window_edges(self, window: Any) -> Optional[Tuple[int, int, int, int]]:
        """Return ``(left, top, right, bottom)`` in frame-relative cells."""
        left, top, right, bottom = self.sock.window_edges(window)
        return int(left), int(top), int(right), int(bottom)

    @handle_host_error
    def window_margins(self, window: Any) -> Optional[Tuple[int, int]]:
        """Return the current margin pair; an unset side reads as 0."""
        left, right = self.sock.window_margins(window)
        return left or 0, right or 0

    @handle_host_error
    def set_window_margins(self, window: Any, left: int, right: int) -> None:
        if left < 0 or right < 0:
            raise ValueError(f"Margins must be non-negative, got ({left}, {right})")
        self.sock.set_window_margins(window, left, right)

    @handle_host_error
    def window_buffer(self, window: Any) -> Optional[Any]:
        return self.sock.window_buffer(window)

    @handle_host_error
    def window_body_width(self, window: Any) -> Optional[int]:
        return int(self.sock.window_body_width(window))

    @handle_host_error
    def window_fringes(self, window: Any) -> Tuple[int, int]:
        """Fringe-equivalent decoration columns; hosts without fringes report (0, 0)."""
        if not hasattr(self.sock, "window_fringes"):
            return 0, 0
        left, right = self.sock.window_fringes(window)
        return left or 0, right or 0

    @handle_host_error
    def window_minibuffer_p(self, window: Any) -> bool:
        if not hasattr(self.sock, "window_minibuffer_p"):
            return False
        return bool(self.sock.window_minibuffer_p(window))

    @handle_host_error
    def window_dedicated_p(self, window: Any) -> bool:
        if not hasattr(self.sock, "window_dedicated_p"):
            return False
        return bool(self.sock.window_dedicated_p(window))

    @handle_host_error
    def frame_width(self, window: Any = None) -> Optional[int]:
        """Total width, in character cells, of the frame holding ``window``."""
        return int(self.sock.frame_width(window))

    @handle_host_error
    def buffer_name(self, buffer: Any) -> Optional[str]:
        return self.sock.buffer_name(buffer)

    @handle_host_error
    def buffer_major_mode(self, buffer: Any) -> Optional[str]:
        """Major-mode tag as a string; hosts may use symbol objects for tags."""
        mode = self.sock.buffer_major_mode(buffer)
        return None if mode is None else str(mode)

    def derived_mode_p(self, mode: Any, modes: Iterable[str]) -> bool:
        """True when ``mode`` is, or derives from, one of ``modes``."""
        modes = tuple(modes)
        if mode is None or not modes:
            return False
        if hasattr(self.sock, "derived_mode_p"):
            return bool(self.sock.derived_mode_p(mode, *modes))
        return str(mode) in modes

    @handle_host_error
    def buffer_markers_at_start(self, buffer: Any) -> List[Any]:
        """Marker tags anchored at the first character position of ``buffer``."""
        return list(self.sock.buffer_markers_at_start(buffer) or [])

    @handle_host_error
    def put_buffer_marker(self, buffer: Any, tag: str) -> None:
        """Anchor ``tag`` at buffer start for the lifetime of the buffer."""
        self.sock.put_buffer_marker(buffer, tag)
