"""Typed check-in rejections.

Every way a check-in attempt can be refused is a subclass of CheckInRejected.
They are ordinary, expected outcomes: callers catch CheckInRejected (or
ValueError) and report ``reason`` and the message back to the attendee.
"""
from enum import Enum
from typing import Optional


class RejectionReason(str, Enum):
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_IS_TEMPLATE = "SESSION_IS_TEMPLATE"
    SESSION_COMPLETED = "SESSION_COMPLETED"
    WINDOW_NOT_OPEN_YET = "WINDOW_NOT_OPEN_YET"
    WINDOW_CLOSED = "WINDOW_CLOSED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_SESSION_MISMATCH = "TOKEN_SESSION_MISMATCH"
    GEOFENCE_NOT_CONFIGURED = "GEOFENCE_NOT_CONFIGURED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    DUPLICATE_CHECK_IN = "DUPLICATE_CHECK_IN"
    LATE_NOT_ALLOWED = "LATE_NOT_ALLOWED"
    LATE_CUTOFF_EXCEEDED = "LATE_CUTOFF_EXCEEDED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"


class CheckInRejected(ValueError):
    """A check-in attempt was refused."""

    reason: RejectionReason
    default_message = "Check-in rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_error_response(self):
        from attendance.schemas.common import ErrorDetail, ErrorResponse

        return ErrorResponse(error=ErrorDetail(code=self.reason.value, message=self.message))


class SessionNotFound(CheckInRejected):
    reason = RejectionReason.SESSION_NOT_FOUND

    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(f"Attendance session not found with id: {session_id}")


class SessionIsTemplate(CheckInRejected):
    reason = RejectionReason.SESSION_IS_TEMPLATE
    default_message = "Cannot check in to a recurring session template"


class SessionCompleted(CheckInRejected):
    reason = RejectionReason.SESSION_COMPLETED
    default_message = "Cannot check in to a completed session"


class WindowNotOpenYet(CheckInRejected):
    reason = RejectionReason.WINDOW_NOT_OPEN_YET
    default_message = "Check-in has not opened yet for this session"


class WindowClosed(CheckInRejected):
    reason = RejectionReason.WINDOW_CLOSED
    default_message = "Check-in window has closed for this session"


class TokenInvalid(CheckInRejected):
    reason = RejectionReason.TOKEN_INVALID
    default_message = "Check-in token is invalid"


class TokenExpired(CheckInRejected):
    reason = RejectionReason.TOKEN_EXPIRED
    default_message = "Check-in token has expired"


class TokenSessionMismatch(CheckInRejected):
    reason = RejectionReason.TOKEN_SESSION_MISMATCH
    default_message = "Check-in token is not valid for this session"


class GeofenceNotConfigured(CheckInRejected):
    reason = RejectionReason.GEOFENCE_NOT_CONFIGURED

    def __init__(self, session_id: int):
        super().__init__(f"Geofence not configured for session: {session_id}")


class OutOfRange(CheckInRejected):
    reason = RejectionReason.OUT_OF_RANGE

    def __init__(self, distance_meters: float, radius_meters: int):
        self.distance_meters = distance_meters
        self.radius_meters = radius_meters
        super().__init__(
            f"You are not within the geofence radius. Distance: {distance_meters:.2f} meters"
        )


class DuplicateCheckIn(CheckInRejected):
    reason = RejectionReason.DUPLICATE_CHECK_IN
    default_message = "Already checked in to this session"


class LateNotAllowed(CheckInRejected):
    reason = RejectionReason.LATE_NOT_ALLOWED
    default_message = "Late check-in is not allowed for this session"


class LateCutoffExceeded(CheckInRejected):
    reason = RejectionReason.LATE_CUTOFF_EXCEEDED

    def __init__(self, cutoff_minutes: int, minutes_late: int):
        self.cutoff_minutes = cutoff_minutes
        self.minutes_late = minutes_late
        super().__init__(
            f"Check-in cutoff time exceeded. Maximum allowed: {cutoff_minutes} minutes"
        )


class CapacityExceeded(CheckInRejected):
    reason = RejectionReason.CAPACITY_EXCEEDED

    def __init__(self, max_capacity: int):
        self.max_capacity = max_capacity
        super().__init__(f"Session has reached its maximum capacity of {max_capacity}")


class InvalidRecurrencePattern(ValueError):
    """A recurrence pattern string could not be parsed."""

    def __init__(self, pattern: Optional[str], problem: str):
        self.pattern = pattern
        super().__init__(f"Invalid recurrence pattern {pattern!r}: {problem}")
