"""
Booth Related Views
-------------------

Handles all the booth CRUD, and lets users find out which booth they are in.
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs
from marshmallow import fields

from cycleserver.models import Booth
from cycleserver.serializer import JSendSchema, JSendStatus
from cycleserver.serializer.decorators import expects, returns
from cycleserver.serializer.fields import Many
from cycleserver.serializer.misc import CreateBoothSchema, UpdateBoothSchema, GeofenceCheckSchema
from cycleserver.serializer.models import BoothSchema, UnitSchema
from cycleserver.service.access.booths import get_booths, get_booth, create_booth, update_booth, delete_booth
from cycleserver.service.access.units import get_units, count_units
from cycleserver.views.base import BaseView
from cycleserver.views.decorators import match_getter

BOOTH_IDENTIFIER_REGEX = "[0-9]+"


class BoothsView(BaseView):
    """
    Gets the booths, or adds a new booth.
    """
    url = "/booths"
    name = "booths"

    @docs(summary="Get All Booths")
    @returns(JSendSchema.of(booths=Many(BoothSchema())))
    async def get(self):
        """Gets all the booths, along with the number of units in each."""
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"booths": [booth.serialize(booth.unit_count) for booth in await get_booths(with_unit_count=True)]}
        }

    @docs(summary="Create A Booth")
    @expects(CreateBoothSchema())
    @returns(JSendSchema.of(booth=BoothSchema()), HTTPStatus.CREATED)
    async def post(self):
        booth = await create_booth(**self.request["data"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"booth": booth.serialize(0)}
        }


class GeofenceCheckView(BaseView):
    """
    Finds the booth the user is standing in.
    """
    url = "/booths/check-geofence"
    name = "check_geofence"

    @docs(summary="Check Geofence")
    @expects(GeofenceCheckSchema())
    @returns(JSendSchema.of(
        active_booth_id=fields.Integer(allow_none=True, required=True),
        booth_name=fields.String(allow_none=True),
    ))
    async def post(self):
        """
        Booths are checked in the order they were created, and the first
        one whose geofence contains the user is returned. If the user is in
        none of them, ``active_booth_id`` is null.
        """
        booth = await self.rental_coordinator.check_geofence(
            self.request["data"]["latitude"],
            self.request["data"]["longitude"]
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "active_booth_id": booth.id if booth is not None else None,
                "booth_name": booth.name if booth is not None else None,
            }
        }


class BoothView(BaseView):
    """
    Gets, updates or deletes a single booth.
    """
    url = f"/booths/{{id:{BOOTH_IDENTIFIER_REGEX}}}"
    name = "booth"
    with_booth = match_getter(get_booth, "booth", booth_id="id")

    @with_booth
    @docs(summary="Get A Booth")
    @returns(JSendSchema.of(booth=BoothSchema()))
    async def get(self, booth: Booth):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"booth": booth.serialize(await count_units(booth.id))}
        }

    @with_booth
    @docs(summary="Update A Booth")
    @expects(UpdateBoothSchema())
    @returns(JSendSchema.of(booth=BoothSchema()))
    async def patch(self, booth: Booth):
        """
        Renames, moves or resizes a booth. Moving a booth that
        has units is allowed, but is logged for auditing.
        """
        booth = await update_booth(booth, **self.request["data"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"booth": booth.serialize(await count_units(booth.id))}
        }

    @with_booth
    @docs(summary="Delete A Booth")
    async def delete(self, booth: Booth):
        """Deletes a booth. All its units must be removed first."""
        await delete_booth(booth)
        raise web.HTTPNoContent


class BoothUnitsView(BaseView):
    """
    Gets the units of a single booth.
    """
    url = f"/booths/{{id:{BOOTH_IDENTIFIER_REGEX}}}/units"
    name = "booth_units"
    with_booth = match_getter(get_booth, "booth", booth_id="id")

    @with_booth
    @docs(summary="Get The Units In A Booth")
    @returns(JSendSchema.of(units=Many(UnitSchema())))
    async def get(self, booth: Booth):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"units": [unit.serialize() for unit in await get_units(booth_id=booth.id)]}
        }
