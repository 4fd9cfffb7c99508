"""
Booth
---------------------------

A booth is a physical docking location. It has a circular
geofence (center and radius in meters) that the user must be
inside of to park or take a cycle from any of its units.
"""
from typing import Dict, Any, Optional

from shapely.geometry import Point, mapping
from tortoise import Model, fields

from cycleserver.serializer.geojson import GeoJSONType

DEFAULT_RADIUS = 100
"""The default geofence radius in meters."""

MINIMUM_RADIUS = 10
"""The smallest geofence radius (in meters) a booth may have."""


class Booth(Model):
    id = fields.IntField(pk=True)
    name: str = fields.CharField(max_length=255, unique=True)
    latitude: float = fields.FloatField()
    longitude: float = fields.FloatField()
    radius: float = fields.FloatField(default=DEFAULT_RADIUS)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    @property
    def center(self) -> Point:
        """The center of the geofence as an (x=longitude, y=latitude) point."""
        return Point(self.longitude, self.latitude)

    def summary(self) -> Dict[str, Any]:
        """The short form of the booth that is embedded in unit snapshots."""
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius": self.radius,
        }

    def serialize(self, unit_count: Optional[int] = None) -> Dict[str, Any]:
        """
        Serializes a booth into a GeoJSON feature.

        :param unit_count: The optional number of units in the booth.
        """
        data = {
            "type": GeoJSONType.FEATURE,
            "geometry": mapping(self.center),
            "properties": {
                "id": self.id,
                "name": self.name,
                "radius": self.radius,
            }
        }

        if unit_count is not None:
            data["properties"]["unit_count"] = unit_count

        return data

    def __str__(self):
        return f"{self.name} ({self.latitude}, {self.longitude}) r={self.radius}m"
