"""Check-in schemas."""
from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from attendance.core.enums import CheckInMethod, ServiceType
from attendance.core.sanitization import sanitize_device_info, validate_token_format


class CheckInRequest(BaseModel):
    session_id: int
    method: CheckInMethod
    member_id: Optional[int] = None
    visitor_id: Optional[int] = None
    token: Optional[str] = Field(None, max_length=500)  # Required for TOKEN
    latitude: Optional[float] = Field(None, ge=-90, le=90)  # Required for GEOFENCE
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    device_info: Optional[str] = None

    @field_validator('token')
    @classmethod
    def validate_token_field(cls, v: Optional[str]) -> Optional[str]:
        """Strip the token and bound its length; content is checked at check-in."""
        if v is not None:
            return validate_token_format(v)
        return v

    @field_validator('device_info')
    @classmethod
    def sanitize_device_info_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_device_info(v)
        return v

    @model_validator(mode='after')
    def check_person_and_method(self) -> "CheckInRequest":
        """Exactly one person reference, plus the evidence the method needs."""
        if self.member_id is None and self.visitor_id is None:
            raise ValueError("Either member_id or visitor_id must be provided")
        if self.member_id is not None and self.visitor_id is not None:
            raise ValueError("Cannot provide both member_id and visitor_id")

        if self.method == CheckInMethod.TOKEN and not self.token:
            raise ValueError("A check-in token is required for TOKEN check-in")
        if self.method == CheckInMethod.GEOFENCE and (self.latitude is None or self.longitude is None):
            raise ValueError("Latitude and longitude are required for GEOFENCE check-in")
        return self

    @property
    def person_id(self) -> int:
        return self.member_id if self.member_id is not None else self.visitor_id


class CheckInResponse(BaseModel):
    attendance_id: int
    session_id: int
    session_name: str
    person_id: int
    person_name: Optional[str] = None
    member_id: Optional[int] = None
    visitor_id: Optional[int] = None
    method: CheckInMethod
    check_in_time: datetime
    is_late: bool
    minutes_late: int
    message: str


class NearbySession(BaseModel):
    session_id: int
    session_name: str
    session_date: date
    session_time: Optional[time] = None
    service_type: ServiceType
    fellowship_id: Optional[int] = None
    distance_meters: float
    geofence_radius_meters: int
    within_geofence: bool
    is_completed: bool
