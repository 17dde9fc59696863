from .checkin import CheckInOrchestrator, compute_lateness
from .geofence import find_nearby_sessions
from .qr import SessionQRCodeIssuer, generate_qr_code
from .recurrence import (
    RecurrenceMaterializer,
    RecurrenceRule,
    instance_from,
    occurrence_dates,
    parse_recurrence_pattern,
)

__all__ = [
    # checkin
    "CheckInOrchestrator",
    "compute_lateness",
    # geofence
    "find_nearby_sessions",
    # qr
    "SessionQRCodeIssuer",
    "generate_qr_code",
    # recurrence
    "RecurrenceMaterializer",
    "RecurrenceRule",
    "instance_from",
    "occurrence_dates",
    "parse_recurrence_pattern",
]
