import inspect
from typing import Any, List, Tuple


def subscribe_to_event(event_type):
    """
    A decorator marking a plugin method as a handler for a host event.
    Usage:
        @subscribe_to_event("window-configuration-changed")
        def on_configuration_changed(self, event):
            ...
    """

    def decorator(func):
        func._is_event_handler = True
        func._event_type = event_type
        return func

    return decorator


def collect_event_handlers(plugin: Any) -> List[Tuple[str, Any]]:
    """
    Return ``(event_type, bound_method)`` pairs for every decorated handler
    of ``plugin``, in definition order of the method names.
    """
    handlers = []
    for attr_name, attr in inspect.getmembers(plugin, predicate=inspect.ismethod):
        if getattr(attr, "_is_event_handler", False):
            sig = inspect.signature(attr)
            if len(sig.parameters) < 1:
                raise TypeError(
                    f"Handler {type(plugin).__name__}.{attr_name} must accept the event message."
                )
            handlers.append((attr._event_type, attr))
    return handlers
