from inspect import signature, Parameter
from typing import Callable, List

from cycleserver.events.exceptions import NoSuchEventError


class EventListMeta(type):

    def __contains__(self, event: Callable):
        """Checks if the event (by name) exists on the events list."""
        event_name = getattr(event, "__name__", None)
        if event_name is None:
            return False
        try:
            return event is getattr(self, event_name)
        except AttributeError:
            return False


class EventList(metaclass=EventListMeta):
    """
    Contains a list of emittable events.
    Events are defined as functions on a subclass
    of the EventList type, and their signatures
    used to determine the "contract" of the event.
    """

    @classmethod
    def get_event(cls, name: str) -> Callable:
        """Gets an event by name, raising NoSuchEventError if it doesn't exist."""
        event = cls.__dict__.get(name)
        if event is None or name.startswith("_"):
            raise NoSuchEventError(f"{cls.__name__} has no event {name}")
        return getattr(cls, name)


def event_parameters(event: Callable) -> List[Parameter]:
    """The parameters a handler of the given event will be called with."""
    parameters = list(signature(event).parameters.values())
    if parameters and parameters[0].name == "self":
        parameters = parameters[1:]
    return parameters
