"""Pydantic schemas for request/response validation."""
from attendance.schemas.checkin import CheckInRequest, CheckInResponse, NearbySession
from attendance.schemas.token import TokenValidation
from attendance.schemas.recurrence import MaterializationReport
from attendance.schemas.qr import SessionQRCode
from attendance.schemas.common import ErrorResponse, ErrorDetail

__all__ = [
    "CheckInRequest",
    "CheckInResponse",
    "NearbySession",
    "TokenValidation",
    "MaterializationReport",
    "SessionQRCode",
    "ErrorResponse",
    "ErrorDetail",
]
