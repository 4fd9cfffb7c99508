"""
Middleware
----------
"""

from aiohttp import web
from aiohttp.abc import Request
from aiohttp.web_middlewares import middleware

from cycleserver import logger
from cycleserver.serializer import JSendStatus, JSendSchema
from cycleserver.service.exceptions import RentalError, GeofenceViolation, CycleAlreadyDocked

response_schema = JSendSchema()


@middleware
async def rental_error_middleware(request: Request, handler):
    """
    Turns any :class:`~cycleserver.service.exceptions.RentalError` raised by
    a view into a JSend failure, with the status code of its category.
    """
    try:
        return await handler(request)
    except RentalError as error:
        logger.info("Rejected %s %s (%s): %s", request.method, request.path, error.reason, error.message)

        data = {
            "message": error.message,
            "reason": error.reason,
        }
        if isinstance(error, GeofenceViolation):
            data["distance"] = round(error.distance, 1)
            data["radius"] = error.radius
        elif isinstance(error, CycleAlreadyDocked) and error.unit_id is not None:
            data["unit_id"] = error.unit_id

        return web.json_response(response_schema.dump({
            "status": JSendStatus.FAIL,
            "data": data
        }), status=error.status)
