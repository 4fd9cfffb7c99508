"""
.. autoclasstree:: cycleserver.serializer

The serializer package houses all the schemas for the input/output in the system.
The serializers are used to generate and validate any raw data (such as JSON)
going in and out of the system.
"""

from .fields import EnumField, Many
from .geojson import GeoJSONType, GeoJSON, GeometryType, Geometry
from .jsend import JSendSchema, JSendStatus
from .decorators import expects, expects_query, returns
