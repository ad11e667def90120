"""Angle and globe helpers for geographic parameters (degrees, metres)."""

import math

from .vector import Vector3

WGS84_EQUATORIAL_RADIUS = 6378137.0


def normalize_angle(degrees: float) -> float:
    """Wrap an angle into [-180, 180)."""
    return (degrees + 180.0) % 360.0 - 180.0


def shortest_angle_delta(from_degrees: float, to_degrees: float) -> float:
    """Signed difference along the shorter arc, in [-180, 180)."""
    return normalize_angle(to_degrees - from_degrees)


def geodetic_to_cartesian(position: Vector3, radius: float = WGS84_EQUATORIAL_RADIUS) -> Vector3:
    """
    Convert a (latitude, longitude, elevation) position to Cartesian world coordinates.

    Uses a spherical globe with Y up and Z pointing at (0, 0), which is the
    layout the globe renderer expects.

    Args:
        position: Vector3 of latitude (deg), longitude (deg), elevation (m)
        radius: Globe radius in metres

    Returns:
        Vector3 world position
    """
    lat = math.radians(position.x)
    lon = math.radians(position.y)
    r = radius + position.z
    cos_lat = math.cos(lat)
    return Vector3(
        r * cos_lat * math.sin(lon),
        r * math.sin(lat),
        r * cos_lat * math.cos(lon),
    )
