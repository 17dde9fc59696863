"""Geofence queries over stored sessions."""
from typing import List

from attendance.core.constants import DEFAULT_NEARBY_RADIUS_METERS
from attendance.core.geo import GeoPoint, distance_between
from attendance.repositories import SessionRepository
from attendance.schemas.checkin import NearbySession


def find_nearby_sessions(
    sessions: SessionRepository,
    latitude: float,
    longitude: float,
    max_distance_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
) -> List[NearbySession]:
    """
    Find open, geofenced sessions around a location.

    Args:
        sessions: Session repository
        latitude: Caller's latitude in degrees
        longitude: Caller's longitude in degrees
        max_distance_meters: Search radius around the caller (default 5000m)

    Returns:
        Sessions whose geofence center lies within the search radius,
        closest first. ``within_geofence`` tells whether the caller is
        already inside the session's own (usually much smaller) geofence.
    """
    here = GeoPoint(latitude, longitude)

    candidates = []
    for session in sessions.find_open_geofenced():
        distance = distance_between(session.geofence_center, here)
        if distance <= max_distance_meters:
            candidates.append((distance, session))

    candidates.sort(key=lambda pair: pair[0])

    return [
        NearbySession(
            session_id=session.id,
            session_name=session.session_name,
            session_date=session.session_date,
            session_time=session.session_time,
            service_type=session.service_type,
            fellowship_id=session.fellowship_id,
            distance_meters=round(distance, 2),
            geofence_radius_meters=session.geofence_radius_meters,
            within_geofence=distance <= session.geofence_radius_meters,
            is_completed=bool(session.is_completed),
        )
        for distance, session in candidates
    ]
