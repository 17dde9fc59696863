"""Check-in business logic.

A check-in attempt moves through a fixed sequence of checks and stops at the
first failure:

    received -> window checked -> method validated -> duplicate checked -> admitted

Every failure raises a CheckInRejected subclass; an admitted attempt writes
exactly one Attendance row, which is never modified afterwards.
"""
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from attendance.core.clock import Clock, SystemClock
from attendance.core.constants import DEFAULT_NEARBY_RADIUS_METERS
from attendance.core.enums import CheckInMethod
from attendance.core.exceptions import (
    CapacityExceeded,
    CheckInRejected,
    DuplicateCheckIn,
    GeofenceNotConfigured,
    LateCutoffExceeded,
    LateNotAllowed,
    OutOfRange,
    RejectionReason,
    SessionCompleted,
    SessionIsTemplate,
    SessionNotFound,
    TokenExpired,
    TokenInvalid,
    TokenSessionMismatch,
    WindowClosed,
    WindowNotOpenYet,
)
from attendance.core.geo import GeoPoint, distance_between, is_within
from attendance.core.logging_config import get_logger
from attendance.core.security import CheckInTokenCodec
from attendance.db.models import Attendance, AttendanceSession
from attendance.repositories import AttendanceRepository, SessionRepository, is_duplicate_attendance
from attendance.schemas.checkin import CheckInRequest, CheckInResponse, NearbySession
from attendance.services.geofence import find_nearby_sessions

logger = get_logger(__name__)

# Resolves (member_id, visitor_id) to a display name; identity lookup lives outside the engine
PersonNameResolver = Callable[[Optional[int], Optional[int]], Optional[str]]


def compute_lateness(session: AttendanceSession, check_in_time: datetime) -> Tuple[bool, int]:
    """
    Decide whether a check-in is late and by how many whole minutes.

    Raises:
        LateNotAllowed: if the session has started and late arrivals are disallowed
        LateCutoffExceeded: if the check-in is later than the session's cutoff
    """
    starts_at = session.starts_at
    if starts_at is None or check_in_time <= starts_at:
        return False, 0

    minutes_late = int((check_in_time - starts_at).total_seconds() // 60)

    if not session.allow_late_checkin:
        raise LateNotAllowed()
    if minutes_late > session.late_cutoff_minutes:
        raise LateCutoffExceeded(session.late_cutoff_minutes, minutes_late)
    return True, minutes_late


def build_message(method: CheckInMethod, is_late: bool, minutes_late: int) -> str:
    message = "Check-in successful"
    if is_late:
        message += f" (late by {minutes_late} minutes)"
    return f"{message} via {method.label}"


class CheckInOrchestrator:
    """
    Admits attendees to sessions.

    Holds no state between calls beyond its collaborators; create one per
    database session.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        attendances: AttendanceRepository,
        codec: CheckInTokenCodec,
        clock: Optional[Clock] = None,
        resolve_person_name: Optional[PersonNameResolver] = None,
        nearby_radius_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
    ):
        self.sessions = sessions
        self.attendances = attendances
        self.codec = codec
        self.clock = clock or SystemClock()
        self.resolve_person_name = resolve_person_name
        self.nearby_radius_meters = nearby_radius_meters

        self._method_validators: Dict[CheckInMethod, Callable[[CheckInRequest, AttendanceSession], None]] = {
            CheckInMethod.TOKEN: self._validate_token,
            CheckInMethod.GEOFENCE: self._validate_geofence,
            CheckInMethod.MANUAL: self._no_extra_validation,
            CheckInMethod.SELF: self._no_extra_validation,
            CheckInMethod.APP: self._no_extra_validation,
        }

    def check_in(self, request: CheckInRequest) -> CheckInResponse:
        """
        Process a check-in request for a member or visitor.

        Args:
            request: Validated check-in request

        Returns:
            CheckInResponse with the stored attendance and a summary message

        Raises:
            CheckInRejected: (a ValueError) for every refused attempt; the
                subclass and its ``reason`` say why
        """
        try:
            response = self._admit(request)
        except CheckInRejected as rejection:
            logger.info(
                "checkin_rejected",
                session_id=request.session_id,
                method=request.method.value,
                reason=rejection.reason.value,
                detail=rejection.message,
            )
            raise

        logger.info(
            "checkin_admitted",
            session_id=response.session_id,
            attendance_id=response.attendance_id,
            method=response.method.value,
            is_late=response.is_late,
            minutes_late=response.minutes_late,
        )
        return response

    def find_nearby(
        self,
        latitude: float,
        longitude: float,
        max_distance_meters: Optional[float] = None,
    ) -> List[NearbySession]:
        """Open geofenced sessions within ``max_distance_meters`` of a location, closest first."""
        if max_distance_meters is None:
            max_distance_meters = self.nearby_radius_meters
        return find_nearby_sessions(self.sessions, latitude, longitude, max_distance_meters)

    def _admit(self, request: CheckInRequest) -> CheckInResponse:
        session = self.sessions.find_by_id(request.session_id)
        if session is None:
            raise SessionNotFound(request.session_id)
        if session.is_template:
            raise SessionIsTemplate()

        now = self.clock.now()
        self._check_window(session, now)
        self._method_validators[request.method](request, session)

        if self.attendances.exists_for_session_and_person(
            session.id, member_id=request.member_id, visitor_id=request.visitor_id
        ):
            raise DuplicateCheckIn()

        is_late, minutes_late = compute_lateness(session, now)

        # Captured before the insert: commit expires the loaded session
        session_id, session_name, max_capacity = session.id, session.session_name, session.max_capacity

        record = Attendance(
            session_id=session_id,
            member_id=request.member_id,
            visitor_id=request.visitor_id,
            check_in_method=request.method,
            check_in_time=now,
            latitude=request.latitude,
            longitude=request.longitude,
            device_info=request.device_info,
            is_late=is_late,
            minutes_late=minutes_late,
        )

        try:
            saved = self.attendances.save(record, max_capacity=max_capacity)
        except IntegrityError as exc:
            if not is_duplicate_attendance(exc):
                raise
            # Lost the race against a concurrent check-in for the same person
            raise DuplicateCheckIn()

        if saved is None:
            raise CapacityExceeded(max_capacity)

        person_name = None
        if self.resolve_person_name is not None:
            person_name = self.resolve_person_name(request.member_id, request.visitor_id)

        return CheckInResponse(
            attendance_id=saved.id,
            session_id=session_id,
            session_name=session_name,
            person_id=request.person_id,
            person_name=person_name,
            member_id=request.member_id,
            visitor_id=request.visitor_id,
            method=request.method,
            check_in_time=saved.check_in_time,
            is_late=saved.is_late,
            minutes_late=saved.minutes_late,
            message=build_message(request.method, saved.is_late, saved.minutes_late),
        )

    def _check_window(self, session: AttendanceSession, now: datetime) -> None:
        if session.is_completed:
            raise SessionCompleted()
        if session.check_in_opens_at is not None and now < session.check_in_opens_at:
            raise WindowNotOpenYet()
        if session.check_in_closes_at is not None and now > session.check_in_closes_at:
            raise WindowClosed()

    def _validate_token(self, request: CheckInRequest, session: AttendanceSession) -> None:
        result = self.codec.validate(request.token)
        if not result.valid:
            if result.reason == RejectionReason.TOKEN_EXPIRED:
                raise TokenExpired()
            raise TokenInvalid(result.message)
        if result.session_id != session.id:
            raise TokenSessionMismatch()

    def _validate_geofence(self, request: CheckInRequest, session: AttendanceSession) -> None:
        center = session.geofence_center
        if center is None:
            raise GeofenceNotConfigured(session.id)

        point = GeoPoint(request.latitude, request.longitude)
        if not is_within(center, session.geofence_radius_meters, point):
            raise OutOfRange(distance_between(center, point), session.geofence_radius_meters)

    def _no_extra_validation(self, request: CheckInRequest, session: AttendanceSession) -> None:
        """Manual, self-service and app check-ins carry no proof to verify."""
