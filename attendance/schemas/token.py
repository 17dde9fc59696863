"""Check-in token schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from attendance.core.exceptions import RejectionReason


class TokenValidation(BaseModel):
    valid: bool
    session_id: Optional[int] = None
    expiry: Optional[datetime] = None
    reason: Optional[RejectionReason] = None
    message: str
