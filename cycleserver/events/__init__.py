"""
.. autoclasstree:: cycleserver.events

This module provides a simple event system. It is centered around the use of hubs.
A hub is created by passing a number of event lists in. These event lists provide
typed callback signatures which subscribers can use to implement their handlers.

>>> class UnitEvents(EventList):
>>>     @staticmethod
>>>     def unit_updated(unit):
>>>         "A unit has changed."
>>>
>>> def dashboard_handler(unit):
>>>     print(f"Unit changed: {unit}")
>>>
>>> hub = EventHub(UnitEvents)
>>> hub.subscribe(UnitEvents.unit_updated, dashboard_handler)
>>> hub.emit(UnitEvents.unit_updated, unit)
Unit changed: ...

Each hub is owned by the object that emits on it.
"""

from .event_hub import EventHub, BoundEvent
from .event_list import EventList
from .exceptions import NoSuchEventError, NoSuchListenerError, InvalidHandlerError
