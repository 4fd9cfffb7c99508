from collections import defaultdict
from inspect import signature
from typing import Type, Callable, Dict, List, Tuple, Union

from cycleserver.events.event_list import EventList, event_parameters
from cycleserver.events.exceptions import NoSuchEventError, NoSuchListenerError, InvalidHandlerError


class BoundEvent:
    """
    An event accessed through a hub. Allows the natural syntax:

    >>> hub.unit_updated += handler
    >>> hub.unit_updated(unit)
    >>> hub.unit_updated -= handler
    """

    def __init__(self, hub: "EventHub", event: Callable):
        self.hub = hub
        self.event = event

    def __iadd__(self, handler: Callable) -> "BoundEvent":
        self.hub.subscribe(self.event, handler)
        return self

    def __isub__(self, handler: Callable) -> "BoundEvent":
        self.hub.unsubscribe(self.event, handler)
        return self

    def __call__(self, *args, **kwargs):
        self.hub.emit(self.event, *args, **kwargs)


class EventHub:
    """
    Routes emitted events to their subscribers.

    Handlers are called synchronously, in subscription order, and any exception
    they raise propagates to the emitter.
    """

    def __init__(self, *event_lists: Type[EventList]):
        self._event_lists: Tuple[Type[EventList], ...] = ()
        self._listeners: Dict[Callable, List[Callable]] = defaultdict(list)
        self.add_events(*event_lists)

    def add_events(self, *event_lists: Type[EventList]):
        """Adds more event lists to the hub."""
        self._event_lists = self._event_lists + tuple(x for x in event_lists if x not in self._event_lists)

    def subscribe(self, event: Union[Callable, BoundEvent], handler: Callable):
        """
        Subscribes a handler to an event.

        :raises NoSuchEventError: If the event is not on this hub.
        :raises InvalidHandlerError: If the handler can't accept the event's arguments.
        """
        event = self._resolve(event)
        if event not in self:
            raise NoSuchEventError(f"{event.__name__} is not registered on this hub.")

        placeholders = [None for _ in event_parameters(event)]
        try:
            signature(handler).bind(*placeholders)
        except TypeError as error:
            raise InvalidHandlerError(
                f"Handler {handler} does not match the signature of {event.__name__}."
            ) from error

        self._listeners[event].append(handler)

    def unsubscribe(self, event: Union[Callable, BoundEvent], handler: Callable):
        """
        Removes a handler from an event.

        :raises NoSuchListenerError: If the handler isn't subscribed to the event.
        """
        event = self._resolve(event)
        try:
            self._listeners[event].remove(handler)
        except ValueError:
            raise NoSuchListenerError(f"{handler} is not subscribed to {event.__name__}.")

    def emit(self, event: Union[Callable, BoundEvent], *args, **kwargs):
        """Calls every handler subscribed to the event."""
        event = self._resolve(event)
        if event not in self:
            raise NoSuchEventError(f"{event.__name__} is not registered on this hub.")

        for handler in list(self._listeners[event]):
            handler(*args, **kwargs)

    def __contains__(self, item):
        if isinstance(item, type) and issubclass(item, EventList):
            return item in self._event_lists
        item = self._resolve(item)
        return any(item in event_list for event_list in self._event_lists)

    def __getattr__(self, name: str) -> BoundEvent:
        if name.startswith("_"):
            raise AttributeError(name)
        for event_list in self.__dict__.get("_event_lists", ()):
            try:
                return BoundEvent(self, event_list.get_event(name))
            except NoSuchEventError:
                continue
        raise NoSuchEventError(f"No event named {name} on this hub.")

    def __setattr__(self, name, value):
        # augmented assignment (hub.event += handler) re-assigns the bound event
        if isinstance(value, BoundEvent) and value.hub is self:
            return
        super().__setattr__(name, value)

    @staticmethod
    def _resolve(event: Union[Callable, BoundEvent]) -> Callable:
        return event.event if isinstance(event, BoundEvent) else event
