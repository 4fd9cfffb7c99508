"""
GeoJSON Schema
--------------

Implements serializers for GEOJson objects, which is the format
through which the api communicates spacial data. Booths are the
only spacial objects in the system, so only point features are
supported.
"""
from enum import Enum

from marshmallow import Schema
from marshmallow.fields import Dict, Float, List, Nested
from marshmallow.validate import Length

from cycleserver.serializer.fields import EnumField


class GeoJSONType(str, Enum):
    FEATURE = "Feature"


class GeometryType(str, Enum):
    POINT = "Point"


class Geometry(Schema):
    type = EnumField(GeometryType, required=True)
    coordinates = List(Float(), required=True, validate=Length(equal=2))
    """A (longitude, latitude) pair."""


class GeoJSON(Schema):
    type = EnumField(GeoJSONType, required=True)
    properties = Dict()
    geometry = Nested(Geometry, required=True)
