import asyncio

from aiohttp.test_utils import TestClient

from tests.util import DELHI, FIVE_HUNDRED_METERS_NORTH


class TestUpdatesSocketView:

    async def test_connect(self, client: TestClient, update_notifier):
        """Assert that an observer is told its id, and removed again once it disconnects."""
        async with client.ws_connect('/api/v1/updates') as socket:
            message = await socket.receive_json(timeout=1)
            assert message["type"] == "connected"
            assert update_notifier.observer_count == 1

        for _ in range(100):
            if update_notifier.observer_count == 0:
                break
            await asyncio.sleep(0.01)
        assert update_notifier.observer_count == 0

    async def test_park_is_pushed(self, client: TestClient, random_unit):
        """Assert that a dashboard is told about a unit as soon as a cycle is parked in it."""
        async with client.ws_connect('/api/v1/updates') as socket:
            await socket.receive_json(timeout=1)

            response = await client.post('/api/v1/units/park', json={
                "unit_id": random_unit.unit_id, "rfid": "RFID-1", "user_lat": DELHI[0], "user_lon": DELHI[1]
            })
            assert response.status == 200

            message = await socket.receive_json(timeout=1)
            assert message["type"] == "unit_updated"
            assert message["unit"]["unit_id"] == random_unit.unit_id
            assert message["unit"]["status"] == "OCCUPIED"
            assert message["unit"]["cycle_rfid"] == "RFID-1"

    async def test_rejected_park_is_not_pushed(self, client: TestClient, random_unit, update_notifier):
        async with client.ws_connect('/api/v1/updates') as socket:
            await socket.receive_json(timeout=1)

            response = await client.post('/api/v1/units/park', json={
                "unit_id": random_unit.unit_id, "rfid": "RFID-1",
                "user_lat": FIVE_HUNDRED_METERS_NORTH[0], "user_lon": FIVE_HUNDRED_METERS_NORTH[1]
            })
            assert response.status == 403

            await socket.send_json({"type": "request_unit_status", "booth_id": random_unit.booth.id})
            message = await socket.receive_json(timeout=1)
            assert message["type"] == "unit_status"

    async def test_request_unit_status(self, client: TestClient, occupied_unit):
        async with client.ws_connect('/api/v1/updates') as socket:
            await socket.receive_json(timeout=1)

            await socket.send_json({"type": "request_unit_status", "booth_id": occupied_unit.booth.id})
            message = await socket.receive_json(timeout=1)

            assert message["booth_id"] == occupied_unit.booth.id
            [unit] = message["units"]
            assert unit["unit_id"] == occupied_unit.unit_id
            assert unit["cycle_rfid"] == occupied_unit.cycle_rfid

    async def test_update_location(self, client: TestClient, random_booth):
        async with client.ws_connect('/api/v1/updates') as socket:
            await socket.receive_json(timeout=1)

            await socket.send_json({"type": "update_location", "latitude": DELHI[0], "longitude": DELHI[1]})
            inside = await socket.receive_json(timeout=1)
            await socket.send_json({
                "type": "update_location",
                "latitude": FIVE_HUNDRED_METERS_NORTH[0], "longitude": FIVE_HUNDRED_METERS_NORTH[1]
            })
            outside = await socket.receive_json(timeout=1)

            assert inside == {"type": "geofence", "active_booth_id": random_booth.id, "booth_name": random_booth.name}
            assert outside["active_booth_id"] is None

    async def test_bad_message(self, client: TestClient, database):
        """Assert that a malformed message is answered with an error, and the socket stays open."""
        async with client.ws_connect('/api/v1/updates') as socket:
            await socket.receive_json(timeout=1)

            await socket.send_str("not json")
            assert (await socket.receive_json(timeout=1))["type"] == "error"

            await socket.send_json({"type": "request_unit_status"})
            assert (await socket.receive_json(timeout=1))["type"] == "error"

            await socket.send_json({"type": "update_location", "latitude": 0, "longitude": 0})
            assert (await socket.receive_json(timeout=1))["type"] == "geofence"
