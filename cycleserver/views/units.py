"""
Unit Related Views
------------------

Handles the unit CRUD, as well as parking and taking cycles.
Every write goes through the rental coordinator so that the
observers are told about it.
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs

from cycleserver.models import Unit
from cycleserver.serializer import JSendSchema, JSendStatus
from cycleserver.serializer.decorators import expects, expects_query, returns
from cycleserver.serializer.fields import Many
from cycleserver.serializer.misc import CreateUnitSchema, UpdateUnitSchema, RentalRequestSchema, UnitFilterSchema
from cycleserver.serializer.models import UnitSchema, CycleSchema
from cycleserver.service.access.units import get_units, get_unit
from cycleserver.views.base import BaseView
from cycleserver.views.decorators import match_getter

UNIT_IDENTIFIER_REGEX = "(?!(?:park|take)$)[^{}/]+"


class UnitsView(BaseView):
    """
    Gets the units, or adds a new unit to a booth.
    """
    url = "/units"
    name = "units"

    @docs(summary="Get All Units")
    @expects_query(UnitFilterSchema())
    @returns(JSendSchema.of(units=Many(UnitSchema())))
    async def get(self):
        """Gets the units, optionally filtered by ``booth_id`` and ``status``."""
        units = await get_units(**self.request["query"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"units": [unit.serialize() for unit in units]}
        }

    @docs(summary="Create A Unit")
    @expects(CreateUnitSchema())
    @returns(JSendSchema.of(unit=UnitSchema()), HTTPStatus.CREATED)
    async def post(self):
        """Adds a new, free, unit to a booth."""
        unit = await self.rental_coordinator.create_unit(
            self.request["data"]["unit_id"],
            self.request["data"]["booth_id"]
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"unit": unit.serialize()}
        }


class ParkView(BaseView):
    """
    Parks a cycle in a unit.
    """
    url = "/units/park"
    name = "park"

    @docs(summary="Park A Cycle")
    @expects(RentalRequestSchema())
    @returns(JSendSchema.of(unit=UnitSchema(), cycle=CycleSchema()))
    async def post(self):
        """
        The unit must be free, the user must be within the geofence
        of the unit's booth, and the cycle may not be docked anywhere
        else. Cycles that the system hasn't seen before are registered
        as they are parked.
        """
        data = self.request["data"]
        unit, cycle = await self.rental_coordinator.park(
            data["unit_id"], data["rfid"], data["user_lat"], data["user_lon"]
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"unit": unit.serialize(), "cycle": cycle.serialize()}
        }


class TakeView(BaseView):
    """
    Takes a cycle out of a unit.
    """
    url = "/units/take"
    name = "take"

    @docs(summary="Take A Cycle")
    @expects(RentalRequestSchema())
    @returns(JSendSchema.of(unit=UnitSchema(), cycle=CycleSchema()))
    async def post(self):
        """
        The unit must hold the cycle with the given rfid, and the
        user must be within the geofence of the unit's booth.
        """
        data = self.request["data"]
        unit, cycle = await self.rental_coordinator.take(
            data["unit_id"], data["rfid"], data["user_lat"], data["user_lon"]
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"unit": unit.serialize(), "cycle": cycle.serialize()}
        }


class UnitView(BaseView):
    """
    Gets, updates or deletes a single unit.
    """
    url = f"/units/{{unit_id:{UNIT_IDENTIFIER_REGEX}}}"
    name = "unit"
    with_unit = match_getter(get_unit, "unit", unit_id=("unit_id", str))

    @with_unit
    @docs(summary="Get A Unit")
    @returns(JSendSchema.of(unit=UnitSchema()))
    async def get(self, unit: Unit):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"unit": unit.serialize()}
        }

    @docs(summary="Update A Unit")
    @expects(UpdateUnitSchema())
    @returns(JSendSchema.of(unit=UnitSchema()))
    async def patch(self):
        """Renames a unit, or moves it to a different booth. Its cycle stays put."""
        unit = await self.rental_coordinator.update_unit(
            self.request.match_info["unit_id"],
            new_unit_id=self.request["data"].get("unit_id"),
            booth_id=self.request["data"].get("booth_id")
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"unit": unit.serialize()}
        }

    @docs(summary="Delete A Unit")
    async def delete(self):
        """Deletes a unit. It must not hold a cycle."""
        await self.rental_coordinator.delete_unit(self.request.match_info["unit_id"])
        raise web.HTTPNoContent
