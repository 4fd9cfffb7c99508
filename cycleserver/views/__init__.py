"""
.. autoclasstree:: cycleserver.views

This package contains the server API for managing booths,
units and cycles, and for parking and taking cycles.

API Conventions
---------------

The API conforms as best as possible to the REST standard. In short, the api must:

* Be ordered in terms of resources (nouns such as unit)
* Accept and return JSON with snake_case key naming
* Have idempotent GET, PATCH, and DELETE operations
* Support filtering (if necessary) using the query string

API Expected Responses
----------------------

The server responds with JSend formatted JSON to all GET, POST, and PATCH requests.
DELETE requests respond with a 204 no content. Rejected operations respond with
a ``fail`` whose data holds a ``message`` and a machine readable ``reason``.
"""

import aiohttp_cors
from aiohttp.abc import Application

from cycleserver import logger
from .booths import BoothsView, BoothView, BoothUnitsView, GeofenceCheckView
from .cycles import CyclesView, CycleView
from .misc import health
from .units import UnitsView, UnitView, ParkView, TakeView
from .updates import UpdatesSocketView

views = [
    BoothsView, GeofenceCheckView, BoothView, BoothUnitsView,
    UnitsView, ParkView, TakeView, UnitView,
    CyclesView, CycleView,
    UpdatesSocketView,
]


def register_views(app: Application, base: str):
    """
    Registers all the API views onto the given router at a specific root url.

    :param app: The app to register the views to.
    :param base: The base URL.
    """
    cors = aiohttp_cors.setup(app, defaults={
        "*": aiohttp_cors.ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        )
    })

    for view in views:
        logger.info("Registered %s at %s", view.__name__, base + view.url)
        view.register_route(app, base)
        view.enable_cors(cors)
