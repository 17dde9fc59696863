"""QR codes for token check-in.

A session's QR code carries a freshly minted check-in token, either bare or
wrapped in a check-in URL. The latest token and its expiry are recorded on
the session so it can be shown again without minting a new one.
"""
import base64
import io
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

import qrcode
from qrcode.image.svg import SvgImage

from attendance.core.constants import QR_BORDER, QR_BOX_SIZE
from attendance.core.exceptions import SessionIsTemplate, SessionNotFound
from attendance.core.logging_config import get_logger
from attendance.core.security import CheckInTokenCodec
from attendance.repositories import SessionRepository
from attendance.schemas.qr import SessionQRCode

logger = get_logger(__name__)


def generate_qr_code(data: str, svg=True) -> io.BytesIO:
    """Generate a QR code as a BytesIO object.

    Args:
        data: The data to encode in the QR code
        svg: SVG output when True, PNG otherwise

    Returns:
        io.BytesIO: A BytesIO object containing the QR code image
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=QR_BOX_SIZE,
        border=QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)

    # Create an in-memory image
    if svg:
        img = qr.make_image(
            image_factory=SvgImage, fill_color="black", back_color="white"
        )
    else:
        img = qr.make_image(fill_color="black", back_color="white")
    # Save to a bytes buffer
    buffer = io.BytesIO()
    img.save(buffer)
    buffer.seek(0)
    return buffer


def qr_code_data_uri(data: str, svg=True) -> str:
    """Render a QR code as a data: URI."""
    mime_type = "image/svg+xml" if svg else "image/png"
    encoded = base64.b64encode(generate_qr_code(data, svg=svg).getvalue()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def build_check_in_url(session_id: int, token: str, base_url: Optional[str] = None) -> str:
    """The text a QR code encodes: a check-in URL when a base is configured, else the token."""
    if not base_url:
        return token
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode({'session_id': session_id, 'token': token})}"


class SessionQRCodeIssuer:
    """Issues QR codes for sessions and records the latest token on the session."""

    def __init__(
        self,
        sessions: SessionRepository,
        codec: CheckInTokenCodec,
        base_url: Optional[str] = None,
        svg: bool = True,
    ):
        self.sessions = sessions
        self.codec = codec
        self.base_url = base_url
        self.svg = svg

    def issue(self, session_id: int, ttl: Optional[timedelta] = None) -> SessionQRCode:
        """
        Mint a token for a session and render it as a QR code.

        Args:
            session_id: Session to issue the code for
            ttl: Token lifetime (defaults to the codec's, 24 hours)

        Raises:
            SessionNotFound: if no session has this id
            SessionIsTemplate: if the session is a recurring template
            ValueError: if ttl is not positive
        """
        session = self.sessions.find_by_id(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        if session.is_template:
            raise SessionIsTemplate()

        ttl = self.codec.default_ttl if ttl is None else ttl
        if ttl <= timedelta(0):
            raise ValueError("Token time-to-live must be positive")

        expires_at = self.codec.clock.now() + ttl
        token = self.codec.mint_until(session.id, expires_at)
        check_in_url = build_check_in_url(session.id, token, self.base_url)

        session.qr_code_token = token
        session.qr_code_expires_at = expires_at
        session = self.sessions.save(session)

        logger.info("qr_code_issued", session_id=session.id, expires_at=expires_at.isoformat())

        return SessionQRCode(
            session_id=session.id,
            session_name=session.session_name,
            token=token,
            check_in_url=check_in_url,
            image=qr_code_data_uri(check_in_url, svg=self.svg),
            expires_at=expires_at,
            message=f"QR code generated successfully. Scan to check in at: {check_in_url}",
        )
