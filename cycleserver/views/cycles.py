"""
Cycle Related Views
-------------------
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs

from cycleserver.models import Cycle
from cycleserver.serializer import JSendSchema, JSendStatus
from cycleserver.serializer.decorators import expects, expects_query, returns
from cycleserver.serializer.fields import Many
from cycleserver.serializer.misc import CreateCycleSchema, UpdateCycleSchema, CycleFilterSchema
from cycleserver.serializer.models import CycleSchema
from cycleserver.service.access.cycles import get_cycles, get_cycle
from cycleserver.views.base import BaseView
from cycleserver.views.decorators import match_getter


class CyclesView(BaseView):
    """
    Gets the cycles, or registers a new one.
    """
    url = "/cycles"
    name = "cycles"

    @docs(summary="Get All Cycles")
    @expects_query(CycleFilterSchema())
    @returns(JSendSchema.of(cycles=Many(CycleSchema())))
    async def get(self):
        cycles = await get_cycles(**self.request["query"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"cycles": [cycle.serialize() for cycle in cycles]}
        }

    @docs(summary="Register A Cycle")
    @expects(CreateCycleSchema())
    @returns(JSendSchema.of(cycle=CycleSchema()), HTTPStatus.CREATED)
    async def post(self):
        cycle = await self.rental_coordinator.register_cycle(
            self.request["data"]["rfid"],
            self.request["data"]["status"]
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"cycle": cycle.serialize()}
        }


class CycleView(BaseView):
    """
    Gets, updates or deletes a single cycle.
    """
    url = "/cycles/{rfid}"
    name = "cycle"
    with_cycle = match_getter(get_cycle, "cycle", rfid=("rfid", str))

    @with_cycle
    @docs(summary="Get A Cycle")
    @returns(JSendSchema.of(cycle=CycleSchema()))
    async def get(self, cycle: Cycle):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"cycle": cycle.serialize()}
        }

    @docs(summary="Update A Cycle")
    @expects(UpdateCycleSchema())
    @returns(JSendSchema.of(cycle=CycleSchema()))
    async def patch(self):
        """Changes the status of a cycle. A docked cycle has to be taken out first."""
        cycle = await self.rental_coordinator.update_cycle(
            self.request.match_info["rfid"],
            self.request["data"]["status"]
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"cycle": cycle.serialize()}
        }

    @docs(summary="Delete A Cycle")
    async def delete(self):
        await self.rental_coordinator.delete_cycle(self.request.match_info["rfid"])
        raise web.HTTPNoContent
