"""Composition root: wires configuration, logging and services together."""
from typing import Optional

from sqlalchemy.orm import Session

from attendance.core.clock import Clock, SystemClock
from attendance.core.config import settings
from attendance.core.logging_config import setup_logging, get_logger
from attendance.core.security import CheckInTokenCodec, build_token_codec
from attendance.repositories import AttendanceRepository, SessionRepository
from attendance.services.checkin import CheckInOrchestrator, PersonNameResolver
from attendance.services.qr import SessionQRCodeIssuer
from attendance.services.recurrence import RecurrenceMaterializer

logger = get_logger(__name__)

_codec: Optional[CheckInTokenCodec] = None


def configure() -> None:
    """Initialize structured logging and validate settings for this process."""
    setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENVIRONMENT == "production")

    # Validate production configuration after logging is configured
    if settings.ENVIRONMENT == "production":
        settings.validate_production_config()

    logger.info(
        "application_starting",
        environment=settings.ENVIRONMENT,
        timezone=settings.TIMEZONE,
    )


def default_clock() -> Clock:
    return SystemClock(settings.tz)


def get_token_codec() -> CheckInTokenCodec:
    """The process-wide token codec, built from settings on first use."""
    global _codec
    if _codec is None:
        _codec = build_token_codec(settings, clock=default_clock())
    return _codec


def create_orchestrator(
    db: Session,
    clock: Optional[Clock] = None,
    resolve_person_name: Optional[PersonNameResolver] = None,
) -> CheckInOrchestrator:
    """Build a check-in orchestrator bound to one database session."""
    return CheckInOrchestrator(
        SessionRepository(db),
        AttendanceRepository(db),
        get_token_codec(),
        clock=clock or default_clock(),
        resolve_person_name=resolve_person_name,
        nearby_radius_meters=settings.NEARBY_SEARCH_RADIUS_METERS,
    )


def create_materializer(db: Session, clock: Optional[Clock] = None) -> RecurrenceMaterializer:
    """Build a recurrence materializer bound to one database session."""
    return RecurrenceMaterializer(
        SessionRepository(db),
        clock=clock or default_clock(),
        days_ahead=settings.MATERIALIZE_DAYS_AHEAD,
    )


def create_qr_issuer(db: Session) -> SessionQRCodeIssuer:
    """Build a QR code issuer bound to one database session."""
    return SessionQRCodeIssuer(
        SessionRepository(db),
        get_token_codec(),
        base_url=settings.CHECKIN_URL_BASE,
    )
