"""QR code schemas."""
from datetime import datetime
from pydantic import BaseModel


class SessionQRCode(BaseModel):
    """A freshly issued QR code for a session."""
    session_id: int
    session_name: str
    token: str
    check_in_url: str  # What the QR code encodes
    image: str  # data: URI, ready for an <img> src
    expires_at: datetime
    message: str
