"""
Update Notifier
---------------

The update notifier keeps track of every connected dashboard (observer)
and pushes a snapshot of a unit to all of them whenever it changes.

Responsibilities
================

- track the open observer sockets
- push unit snapshots to all of them
- drop observers that are closed, slow, or broken

Delivery is fire and forget. :func:`UpdateNotifier.broadcast` only
schedules the sends, so a slow observer can never hold up (or fail)
the park or take that triggered it.
"""
import asyncio
from itertools import count
from typing import Dict, Set, Any

from aiohttp import WSCloseCode
from aiohttp.web_ws import WebSocketResponse

from cycleserver import logger
from cycleserver.models import Unit
from cycleserver.service.manager.rental_coordinator import RentalCoordinator, UnitEvent

DEFAULT_SEND_TIMEOUT = 5.0
"""Seconds a single send may take before the observer is dropped."""


class UpdateNotifier:
    """
    Fans ``unit_updated`` events out to the connected observers.

    Observers are usually :class:`~aiohttp.web_ws.WebSocketResponse` but anything
    with a ``closed`` property, and ``send_json`` and ``close`` coroutines will do.
    """

    def __init__(self, rental_coordinator: RentalCoordinator = None, *, send_timeout: float = DEFAULT_SEND_TIMEOUT):
        self._observers: Dict[int, WebSocketResponse] = {}
        self._pending_sends: Set[asyncio.Task] = set()
        self._observer_counter = count(1)
        self.send_timeout = send_timeout

        if rental_coordinator is not None:
            rental_coordinator.hub.subscribe(UnitEvent.unit_updated, self.broadcast)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def add_observer(self, socket: WebSocketResponse) -> int:
        """
        Adds an observer, returning its id.

        :raises ConnectionError: If the socket is already closed.
        """
        if socket.closed:
            raise ConnectionError("New socket is closed.")

        observer_id = next(self._observer_counter)
        self._observers[observer_id] = socket
        logger.info("Observer %s connected (%s total)", observer_id, self.observer_count)
        return observer_id

    def remove_observer(self, observer_id: int):
        """Removes an observer, if it is still registered."""
        if self._observers.pop(observer_id, None) is not None:
            logger.info("Observer %s disconnected (%s total)", observer_id, self.observer_count)

    def broadcast(self, unit: Unit):
        """
        Pushes a snapshot of the unit to every observer.

        The unit's booth must have been fetched. Returns immediately,
        the sends happen in the background.
        """
        message = {"type": "unit_updated", "unit": unit.serialize()}
        logger.debug("Broadcasting unit %s - %s to %s observers", unit.unit_id, unit.status.value, self.observer_count)
        self.publish(message)

    def publish(self, message: Dict[str, Any]):
        """Schedules a send of the message to every open observer."""
        for observer_id, socket in list(self._observers.items()):
            if socket.closed:
                self.remove_observer(observer_id)
                continue

            task = asyncio.ensure_future(self._send(observer_id, socket, message))
            self._pending_sends.add(task)
            task.add_done_callback(self._pending_sends.discard)

    async def flush(self):
        """Waits for all the scheduled sends to finish."""
        if self._pending_sends:
            await asyncio.gather(*self._pending_sends, return_exceptions=True)

    async def close_connections(self):
        """Closes every observer socket, abandoning any unsent messages."""
        if self._observers:
            logger.info("Closing all open observer connections")

        for task in list(self._pending_sends):
            task.cancel()

        for socket in list(self._observers.values()):
            await socket.close(code=WSCloseCode.GOING_AWAY)

        self._observers = {}

    async def _send(self, observer_id: int, socket: WebSocketResponse, message: Dict[str, Any]):
        try:
            await asyncio.wait_for(socket.send_json(message), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("Observer %s took longer than %ss to receive an update, dropping it",
                           observer_id, self.send_timeout)
            self.remove_observer(observer_id)
            await socket.close(code=WSCloseCode.POLICY_VIOLATION)
        except (ConnectionError, RuntimeError) as error:
            logger.warning("Could not send update to observer %s (%s), dropping it", observer_id, error)
            self.remove_observer(observer_id)
