"""Enumerations shared by models and schemas."""
from enum import Enum


class CheckInMethod(str, Enum):
    """How an attendee proved presence. Closed set: the orchestrator dispatches on every member."""
    TOKEN = "TOKEN"
    GEOFENCE = "GEOFENCE"
    MANUAL = "MANUAL"
    SELF = "SELF"
    APP = "APP"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]


_METHOD_LABELS = {
    CheckInMethod.TOKEN: "qr code",
    CheckInMethod.GEOFENCE: "geofence",
    CheckInMethod.MANUAL: "manual",
    CheckInMethod.SELF: "self checkin",
    CheckInMethod.APP: "mobile app",
}


class ServiceType(str, Enum):
    SUNDAY_MAIN_SERVICE = "SUNDAY_MAIN_SERVICE"
    SUNDAY_SECOND_SERVICE = "SUNDAY_SECOND_SERVICE"
    MIDWEEK_SERVICE = "MIDWEEK_SERVICE"
    PRAYER_MEETING = "PRAYER_MEETING"
    BIBLE_STUDY = "BIBLE_STUDY"
    YOUTH_SERVICE = "YOUTH_SERVICE"
    FELLOWSHIP_MEETING = "FELLOWSHIP_MEETING"
    SPECIAL_EVENT = "SPECIAL_EVENT"
    OTHER = "OTHER"
