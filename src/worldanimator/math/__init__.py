"""Vector value types and geographic helpers."""

from .vector import Vector, Vector1, Vector2, Vector3, VectorKind
from .geodesy import (
    WGS84_EQUATORIAL_RADIUS,
    geodetic_to_cartesian,
    normalize_angle,
    shortest_angle_delta,
)

__all__ = [
    'Vector',
    'Vector1',
    'Vector2',
    'Vector3',
    'VectorKind',
    'WGS84_EQUATORIAL_RADIUS',
    'geodetic_to_cartesian',
    'normalize_angle',
    'shortest_angle_delta',
]
