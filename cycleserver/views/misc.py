from datetime import datetime, timezone

from aiohttp import web

from cycleserver.serializer import JSendSchema, JSendStatus
from cycleserver.version import __version__


async def health(request):
    """Lets load balancers know the server is up."""
    return web.json_response(JSendSchema().dump({
        "status": JSendStatus.SUCCESS,
        "data": {
            "message": "Server is running",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "observers": request.app["update_notifier"].observer_count,
        }
    }))
