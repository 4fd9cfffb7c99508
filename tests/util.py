import asyncio

DELHI = (28.6139, 77.2090)
"""A location in New Delhi, used as the center of the test booths."""

FIVE_HUNDRED_METERS_NORTH = (DELHI[0] + 0.0045, DELHI[1])
"""About 500m north of :data:`DELHI`."""


class FakeObserver:
    """Stands in for a dashboard's websocket."""

    def __init__(self, delay: float = 0, broken: bool = False):
        self.closed = False
        self.close_code = None
        self.messages = []
        self.delay = delay
        self.broken = broken

    async def send_json(self, data):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.broken:
            raise ConnectionResetError("Cannot write to closing transport")
        self.messages.append(data)

    async def close(self, code=None):
        self.closed = True
        self.close_code = code
