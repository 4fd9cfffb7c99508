import pytest
from marshmallow import ValidationError

from cycleserver.models import UnitStatus, CycleStatus
from cycleserver.serializer.misc import (
    CreateBoothSchema, UpdateBoothSchema, RentalRequestSchema, ObserverMessageSchema, ObserverMessageType,
    UpdateUnitSchema,
)
from cycleserver.serializer.fields import EnumField
from cycleserver.serializer.models import BoothSchema, UnitSchema, CycleSchema
from tests.util import DELHI


async def test_booth_schema(random_booth):
    """Assert that a booth serializes into a GeoJSON point feature."""
    data = BoothSchema().dump(random_booth.serialize(3))

    assert data["type"] == "Feature"
    assert data["geometry"]["type"] == "Point"
    assert list(data["geometry"]["coordinates"]) == [DELHI[1], DELHI[0]]
    assert data["properties"] == {"id": random_booth.id, "name": random_booth.name, "radius": 100, "unit_count": 3}


async def test_unit_schema(occupied_unit):
    data = UnitSchema().dump(occupied_unit.serialize())

    assert data["status"] == "OCCUPIED"
    assert data["cycle_rfid"] == occupied_unit.cycle_rfid
    assert data["booth"]["radius"] == 100
    assert UnitSchema().load(data)["status"] is UnitStatus.OCCUPIED


async def test_cycle_schema(random_cycle):
    data = CycleSchema().dump(random_cycle.serialize())
    assert data == {"id": random_cycle.id, "rfid": random_cycle.rfid, "status": "IN_USE"}


@pytest.mark.parametrize("status,rfid", [("OCCUPIED", None), ("FREE", "RFID-1")])
def test_unit_schema_rejects_inconsistent_unit(status, rfid):
    with pytest.raises(ValidationError):
        UnitSchema().load({"unit_id": "A1", "status": status, "cycle_rfid": rfid})


def test_create_booth_default_radius():
    data = CreateBoothSchema().load({"name": "Library", "latitude": DELHI[0], "longitude": DELHI[1]})
    assert data["radius"] == 100


def test_rental_request_range():
    with pytest.raises(ValidationError) as error:
        RentalRequestSchema().load({"unit_id": "A1", "rfid": "R", "user_lat": -91, "user_lon": 181})
    assert {"user_lat", "user_lon"} <= error.value.messages.keys()


def test_update_unit_requires_a_change():
    with pytest.raises(ValidationError):
        UpdateUnitSchema().load({})


def test_observer_message():
    data = ObserverMessageSchema().load({"type": "request_unit_status", "booth_id": 4})
    assert data["type"] is ObserverMessageType.REQUEST_UNIT_STATUS


def test_observer_message_missing_location():
    with pytest.raises(ValidationError):
        ObserverMessageSchema().load({"type": "update_location", "latitude": 3})


def test_cycle_status_values():
    assert CycleSchema().load({"rfid": "R", "status": "PARKED"})["status"] is CycleStatus.PARKED


def test_enum_field_serializes_values():
    field = EnumField(CycleStatus)
    assert field.serialize("status", {"status": CycleStatus.IN_USE}) == "IN_USE"
    assert field.deserialize("PARKED") is CycleStatus.PARKED


def test_enum_field_rejects_names_it_does_not_know():
    with pytest.raises(ValidationError) as error:
        EnumField(CycleStatus).deserialize("parked")
    assert "PARKED" in error.value.messages[0]


@pytest.mark.parametrize("geometry", [
    {"type": "Polygon", "coordinates": [[0, 0], [1, 1], [1, 0]]},
    {"type": "Point", "coordinates": [77.2]},
])
def test_booth_schema_only_accepts_points(geometry):
    with pytest.raises(ValidationError) as error:
        BoothSchema().load({"type": "Feature", "geometry": geometry, "properties": {"name": "Library", "radius": 100}})
    assert "geometry" in error.value.messages


def test_booth_schema_requires_geometry():
    with pytest.raises(ValidationError) as error:
        BoothSchema().load({"type": "FeatureCollection", "properties": {"name": "Library", "radius": 100}})
    assert {"type", "geometry"} <= error.value.messages.keys()


def test_create_booth_strips_name():
    data = CreateBoothSchema().load({"name": "  Library ", "latitude": DELHI[0], "longitude": DELHI[1]})
    assert data["name"] == "Library"


@pytest.mark.parametrize("schema", [CreateBoothSchema, UpdateBoothSchema])
def test_booth_schemas_reject_blank_name(schema):
    with pytest.raises(ValidationError) as error:
        schema().load({"name": "  ", "latitude": DELHI[0], "longitude": DELHI[1]})
    assert "name" in error.value.messages
