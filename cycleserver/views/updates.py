"""
Update Stream
-------------

Dashboards connect here to be told about every unit that changes.
"""
from json import JSONDecodeError

from aiohttp import web, WSMsgType, WSMessage
from aiohttp_apispec import docs
from marshmallow import ValidationError

from cycleserver import logger
from cycleserver.serializer.misc import ObserverMessageSchema, ObserverMessageType
from cycleserver.service.access.units import get_units
from cycleserver.views.base import BaseView


class UpdatesSocketView(BaseView):
    """
    Provides an endpoint for dashboards to observe the units.

    When the websocket is opened, the server sends a ``connected``
    message with the id of the observer. After that, every unit that
    is parked in, taken from, or edited is pushed to the socket.

    .. code-block:: json

        {"type": "unit_updated", "unit": {"unit_id": "A1", "status": "OCCUPIED", ...}}

    Observers may also send messages of their own:

    - ``{"type": "request_unit_status", "booth_id": 1}`` is answered with
      a ``unit_status`` message listing the units of the booth.
    - ``{"type": "update_location", "latitude": ..., "longitude": ...}`` is
      answered with a ``geofence`` message naming the booth the location is in.
    """

    url = "/updates"
    name = "updates"
    message_schema = ObserverMessageSchema()

    @docs(summary="Connect Update Socket")
    async def get(self):
        socket = web.WebSocketResponse(heartbeat=30)
        await socket.prepare(self.request)

        observer_id = self.update_notifier.add_observer(socket)
        await socket.send_json({"type": "connected", "observer_id": observer_id})

        try:
            async for msg in socket:
                msg: WSMessage = msg
                if msg.type != WSMsgType.TEXT:
                    continue

                try:
                    data = self.message_schema.load(msg.json())
                except (JSONDecodeError, ValidationError) as error:
                    logger.debug("Observer %s sent a bad message: %s", observer_id, error)
                    await socket.send_json({
                        "type": "error",
                        "message": "Could not understand that message.",
                        "errors": error.messages if isinstance(error, ValidationError) else error.args,
                    })
                    continue

                if data["type"] is ObserverMessageType.REQUEST_UNIT_STATUS:
                    units = await get_units(booth_id=data["booth_id"])
                    await socket.send_json({
                        "type": "unit_status",
                        "booth_id": data["booth_id"],
                        "units": [unit.serialize() for unit in units],
                    })
                elif data["type"] is ObserverMessageType.UPDATE_LOCATION:
                    booth = await self.rental_coordinator.check_geofence(data["latitude"], data["longitude"])
                    await socket.send_json({
                        "type": "geofence",
                        "active_booth_id": booth.id if booth is not None else None,
                        "booth_name": booth.name if booth is not None else None,
                    })
        finally:
            self.update_notifier.remove_observer(observer_id)

        return socket
