from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from attendance.core.clock import Clock
from attendance.core.enums import ServiceType
from attendance.db.models import AttendanceSession


class FrozenClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def create_session(session: Session, **overrides) -> AttendanceSession:
    """Insert an attendance session with sensible defaults and return it.

    Defaults describe a Sunday 10:00 service on 2025-01-05 with the check-in
    window open from 09:00 to 12:00 and late arrivals allowed for 15 minutes.

    Args:
        session: SQLAlchemy session
        overrides: Column values replacing the defaults
    """
    values = dict(
        organization_id=1,
        session_name="Sunday Service",
        session_date=date(2025, 1, 5),
        session_time=time(10, 0),
        service_type=ServiceType.SUNDAY_MAIN_SERVICE,
        is_completed=False,
        check_in_opens_at=datetime(2025, 1, 5, 9, 0),
        check_in_closes_at=datetime(2025, 1, 5, 12, 0),
        allow_late_checkin=True,
        late_cutoff_minutes=15,
        geofence_radius_meters=100,
    )
    values.update(overrides)

    attendance_session = AttendanceSession(**values)
    session.add(attendance_session)
    session.commit()
    session.refresh(attendance_session)
    return attendance_session


def create_template(session: Session, pattern: str, end_date: Optional[date] = None, **overrides) -> AttendanceSession:
    """Insert a recurring template session."""
    return create_session(session, recurrence_pattern=pattern, recurrence_end_date=end_date, **overrides)
