"""
Model Serializers
-----------------

Defines serializers for the various models in the system.
"""

from marshmallow import Schema, validates_schema, ValidationError
from marshmallow.fields import Integer, String, Nested, Float

from cycleserver.models.util import UnitStatus, CycleStatus
from cycleserver.serializer.geojson import GeoJSON
from .fields import EnumField


class BoothSummarySchema(Schema):
    """The booth, as embedded in a unit."""

    id = Integer(required=True)
    name = String(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    radius = Float(required=True)


class BoothData(Schema):
    id = Integer()
    name = String(required=True)
    radius = Float(required=True)
    unit_count = Integer()


class BoothSchema(GeoJSON):
    """The schema corresponding to the :class:`~cycleserver.models.booth.Booth` model."""

    properties = Nested(BoothData())


class UnitSchema(Schema):
    """The schema corresponding to the :class:`~cycleserver.models.unit.Unit` model."""

    id = Integer()
    unit_id = String(required=True)
    status = EnumField(UnitStatus, required=True)
    cycle_rfid = String(allow_none=True)
    booth = Nested(BoothSummarySchema())

    @validates_schema
    def assert_cycle_with_occupied(self, data, **kwargs):
        """
        Asserts that an occupied unit has a cycle, and a free one doesn't.
        """
        occupied = data["status"] == UnitStatus.OCCUPIED
        has_cycle = data.get("cycle_rfid") is not None
        if occupied and not has_cycle:
            raise ValidationError("An occupied unit must include the cycle rfid.")
        if has_cycle and not occupied:
            raise ValidationError("A free unit must not include a cycle rfid.")


class CycleSchema(Schema):
    """The schema corresponding to the :class:`~cycleserver.models.cycle.Cycle` model."""

    id = Integer()
    rfid = String(required=True)
    status = EnumField(CycleStatus, required=True)
