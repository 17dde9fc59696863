"""Check-in token minting and validation.

A check-in token binds a session id to an expiry instant:

    payload = "{session_id}:{expiry}"    e.g. "42:2025-01-05T10:00:00"

The payload is encrypted with Fernet (AES-128-CBC with a random IV per token,
authenticated with HMAC-SHA256) and the resulting URL-safe base64 string is
the token printed in the QR code. Tokens are not single-use; they stop
working once the embedded expiry passes.

Keys are injected. The codec takes an ordered list: the first key encrypts
new tokens and every key is tried on decryption, so a key can be rotated
while tokens minted under the previous key keep working until they expire.
"""
from datetime import datetime, timedelta
from typing import Optional, Sequence

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

from attendance.core.clock import Clock, SystemClock
from attendance.core.constants import (
    DEFAULT_TOKEN_TTL_HOURS,
    TOKEN_PAYLOAD_SEPARATOR,
    TOKEN_TIMESTAMP_FORMAT,
)
from attendance.core.exceptions import RejectionReason
from attendance.core.logging_config import get_logger
from attendance.schemas.token import TokenValidation

logger = get_logger(__name__)


def generate_token_key() -> str:
    """Generate a new key suitable for CHECKIN_TOKEN_KEY."""
    return Fernet.generate_key().decode()


class CheckInTokenCodec:
    """Mints and validates session-bound, expiring check-in tokens."""

    def __init__(
        self,
        keys: Sequence[str],
        clock: Optional[Clock] = None,
        default_ttl: timedelta = timedelta(hours=DEFAULT_TOKEN_TTL_HOURS),
    ):
        if not keys:
            raise ValueError("At least one token key is required")
        if default_ttl <= timedelta(0):
            raise ValueError("Token time-to-live must be positive")

        self._fernet = MultiFernet([Fernet(key) for key in keys])
        self.clock = clock or SystemClock()
        self.default_ttl = default_ttl

    def mint(self, session_id: int, ttl: Optional[timedelta] = None) -> str:
        """Mint a token for a session that expires ``ttl`` from now (default 24 hours)."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= timedelta(0):
            raise ValueError("Token time-to-live must be positive")
        return self.mint_until(session_id, self.clock.now() + ttl)

    def mint_until(self, session_id: int, expires_at: datetime) -> str:
        """Mint a token for a session with an explicit expiry instant."""
        payload = f"{session_id}{TOKEN_PAYLOAD_SEPARATOR}{expires_at.strftime(TOKEN_TIMESTAMP_FORMAT)}"
        return self._fernet.encrypt(payload.encode("utf-8")).decode("ascii")

    def validate(self, token: str) -> TokenValidation:
        """
        Decrypt and check a token.

        Never raises for malformed input; every failure comes back as
        ``valid=False`` with a reason and message.

        Returns:
            TokenValidation with:
                - valid: True only for a well-formed, unexpired token
                - session_id / expiry: populated whenever the payload parsed
                - reason: TOKEN_INVALID or TOKEN_EXPIRED when not valid
        """
        try:
            session_id, expiry = self._decode(token)
        except InvalidToken:
            return TokenValidation(
                valid=False,
                reason=RejectionReason.TOKEN_INVALID,
                message="Check-in token could not be decrypted",
            )
        except ValueError as exc:
            return TokenValidation(
                valid=False,
                reason=RejectionReason.TOKEN_INVALID,
                message=f"Invalid check-in token format: {exc}",
            )

        if self.clock.now() > expiry:
            return TokenValidation(
                valid=False,
                session_id=session_id,
                expiry=expiry,
                reason=RejectionReason.TOKEN_EXPIRED,
                message="Check-in token has expired",
            )

        return TokenValidation(
            valid=True,
            session_id=session_id,
            expiry=expiry,
            message="Check-in token is valid",
        )

    def is_expired(self, token: str) -> bool:
        """Check expiry without full validation. Unreadable tokens count as expired."""
        try:
            _, expiry = self._decode(token)
        except (InvalidToken, ValueError):
            return True
        return self.clock.now() > expiry

    def extract_session_id(self, token: str) -> Optional[int]:
        """Read the session id from a token, or None if it cannot be read."""
        try:
            session_id, _ = self._decode(token)
        except (InvalidToken, ValueError):
            return None
        return session_id

    def _decode(self, token: str):
        if not isinstance(token, str) or not token:
            raise ValueError("token must be a non-empty string")

        # Non-ASCII input makes base64 decoding raise ValueError rather than InvalidToken
        payload = self._fernet.decrypt(token.encode("ascii")).decode("utf-8")

        parts = payload.split(TOKEN_PAYLOAD_SEPARATOR, 1)
        if len(parts) != 2:
            raise ValueError("expected '<session_id>:<expiry>'")

        raw_session_id, raw_expiry = parts
        session_id = int(raw_session_id)
        expiry = datetime.strptime(raw_expiry, TOKEN_TIMESTAMP_FORMAT)
        return session_id, expiry


def build_token_codec(settings=None, clock: Optional[Clock] = None) -> CheckInTokenCodec:
    """
    Build the process-wide codec from configuration.

    Outside production a missing CHECKIN_TOKEN_KEY falls back to a key
    generated for this process only; tokens minted with it stop validating
    after a restart.
    """
    if settings is None:
        from attendance.core.config import settings

    keys = settings.get_token_keys()
    if not keys:
        if settings.ENVIRONMENT == "production":
            raise ValueError("CHECKIN_TOKEN_KEY must be configured in production")
        logger.warning("checkin_token_key_missing", detail="using an ephemeral key for this process")
        keys = [generate_token_key()]

    return CheckInTokenCodec(
        keys,
        clock=clock or SystemClock(settings.tz),
        default_ttl=timedelta(hours=settings.CHECKIN_TOKEN_TTL_HOURS),
    )
