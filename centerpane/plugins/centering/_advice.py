import logging
from functools import wraps
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Advice:
    """
    Before/after wrapper around a callable attribute of a host object.

    ``before(*args, **kwargs)`` runs first and its return value is handed to
    ``after(state, result, *args, **kwargs)`` once the original returned. If
    the original raises, ``after`` is skipped and the exception propagates.
    """

    def __init__(
        self,
        target: Any,
        name: str,
        before: Optional[Callable[..., Any]] = None,
        after: Optional[Callable[..., Any]] = None,
    ):
        self.target = target
        self.name = name
        self.before = before
        self.after = after
        self._original: Optional[Callable[..., Any]] = None
        self._wrapper: Optional[Callable[..., Any]] = None
        self._own_attribute = False

    @property
    def installed(self) -> bool:
        return self._wrapper is not None

    def _build_wrapper(self, original: Callable[..., Any]) -> Callable[..., Any]:
        before, after = self.before, self.after

        @wraps(original)
        def wrapper(*args, **kwargs):
            state = before(*args, **kwargs) if before else None
            result = original(*args, **kwargs)
            if after:
                after(state, result, *args, **kwargs)
            return result

        return wrapper

    def install(self) -> None:
        if self.installed:
            return
        original = getattr(self.target, self.name)
        if not callable(original):
            raise TypeError(f"{self.name!r} on {self.target!r} is not callable")
        self._own_attribute = self.name in getattr(self.target, "__dict__", {})
        self._original = original
        self._wrapper = self._build_wrapper(original)
        setattr(self.target, self.name, self._wrapper)
        logger.debug(f"Installed advice on {type(self.target).__name__}.{self.name}")

    def uninstall(self) -> None:
        if not self.installed:
            return
        if getattr(self.target, self.name, None) is self._wrapper:
            if self._own_attribute:
                setattr(self.target, self.name, self._original)
            else:
                delattr(self.target, self.name)
        else:
            # someone wrapped us in turn; removing ours would drop theirs too
            logger.warning(
                f"{type(self.target).__name__}.{self.name} was rewrapped; leaving it in place."
            )
        self._original = None
        self._wrapper = None
