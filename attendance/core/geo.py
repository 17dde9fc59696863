"""Geofence distance and containment calculations.

Distances use the Haversine great-circle formula on a spherical Earth. That
is accurate to well under a meter at the scale of a gathering (tens to a few
thousand meters) and needs no projection.
"""
import math
from typing import NamedTuple

from attendance.core.constants import EARTH_RADIUS_METERS


class GeoPoint(NamedTuple):
    latitude: float
    longitude: float


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two coordinates.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance between the two points in meters
    """
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    """Distance in meters between two points."""
    return distance_meters(a.latitude, a.longitude, b.latitude, b.longitude)


def is_within(center: GeoPoint, radius_meters: float, point: GeoPoint) -> bool:
    """Check whether a point lies inside a circular geofence (boundary included)."""
    return distance_between(center, point) <= radius_meters
