class NoSuchEventError(AttributeError):
    """Raised when an event is not present on any of a hub's event lists."""


class NoSuchListenerError(ValueError):
    """Raised when removing a handler that was never subscribed."""


class InvalidHandlerError(TypeError):
    """Raised when a handler cannot accept the arguments of the event it subscribes to."""
