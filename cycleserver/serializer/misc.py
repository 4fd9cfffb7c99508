"""
Request Schemas
---------------

The schemas that request bodies (and observer messages) are validated against.
"""
from enum import Enum

from marshmallow import Schema, validates_schema, ValidationError, pre_load
from marshmallow.fields import String, Float, Integer
from marshmallow.validate import Range, Length

from cycleserver.models.booth import DEFAULT_RADIUS, MINIMUM_RADIUS
from cycleserver.models.util import CycleStatus, UnitStatus
from cycleserver.serializer.fields import EnumField


def Latitude(**kwargs):
    return Float(validate=Range(-90, 90), **kwargs)


def Longitude(**kwargs):
    return Float(validate=Range(-180, 180), **kwargs)


class BoothNameMixin:
    """Strips the name before it is validated, so a blank name is rejected."""

    @pre_load
    def strip_name(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("name"), str):
            data = {**data, "name": data["name"].strip()}
        return data


class CreateBoothSchema(BoothNameMixin, Schema):
    name = String(required=True, validate=Length(min=1, max=255))
    latitude = Latitude(required=True)
    longitude = Longitude(required=True)
    radius = Float(
        load_default=DEFAULT_RADIUS, validate=Range(min=MINIMUM_RADIUS),
        metadata={"description": "The geofence radius in meters."}
    )


class UpdateBoothSchema(BoothNameMixin, Schema):
    name = String(validate=Length(min=1, max=255))
    latitude = Latitude()
    longitude = Longitude()
    radius = Float(validate=Range(min=MINIMUM_RADIUS))


class GeofenceCheckSchema(Schema):
    """The location of the user."""
    latitude = Latitude(required=True)
    longitude = Longitude(required=True)


class CreateUnitSchema(Schema):
    unit_id = String(required=True, validate=Length(min=1, max=64))
    booth_id = Integer(required=True)


class UpdateUnitSchema(Schema):
    unit_id = String(validate=Length(min=1, max=64))
    booth_id = Integer()

    @validates_schema
    def assert_something_changes(self, data, **kwargs):
        if not data:
            raise ValidationError("Supply a new unit_id and/or booth_id.")


class RentalRequestSchema(Schema):
    """The body of both park and take requests."""
    unit_id = String(required=True, validate=Length(min=1, max=64))
    rfid = String(required=True, validate=Length(min=1, max=128))
    user_lat = Latitude(required=True, metadata={"description": "The latitude of the user."})
    user_lon = Longitude(required=True, metadata={"description": "The longitude of the user."})


class CreateCycleSchema(Schema):
    rfid = String(required=True, validate=Length(min=1, max=128))
    status = EnumField(CycleStatus, load_default=CycleStatus.PARKED)


class UpdateCycleSchema(Schema):
    status = EnumField(CycleStatus, required=True)


class ObserverMessageType(str, Enum):
    REQUEST_UNIT_STATUS = "request_unit_status"
    UPDATE_LOCATION = "update_location"


class ObserverMessageSchema(Schema):
    """A message sent by a dashboard over the updates socket."""
    type = EnumField(ObserverMessageType, required=True)
    booth_id = Integer()
    latitude = Latitude()
    longitude = Longitude()

    @validates_schema
    def assert_params_for_type(self, data, **kwargs):
        if data["type"] == ObserverMessageType.REQUEST_UNIT_STATUS and "booth_id" not in data:
            raise ValidationError("Requesting unit status requires a booth_id.")
        if data["type"] == ObserverMessageType.UPDATE_LOCATION and not ("latitude" in data and "longitude" in data):
            raise ValidationError("Updating location requires a latitude and longitude.")


class UnitFilterSchema(Schema):
    """The query string of the unit list."""
    booth_id = Integer()
    status = EnumField(UnitStatus)


class CycleFilterSchema(Schema):
    """The query string of the cycle list."""
    status = EnumField(CycleStatus)
