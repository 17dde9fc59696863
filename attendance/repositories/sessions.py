"""Session persistence."""
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from attendance.db.models import AttendanceSession


class SessionRepository:
    """Reads and writes AttendanceSession rows through one database session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        return self.db.get(AttendanceSession, session_id)

    def find_templates(self) -> List[AttendanceSession]:
        """All recurring templates, oldest first."""
        return (
            self.db.query(AttendanceSession)
            .filter(AttendanceSession.recurrence_pattern.isnot(None))
            .filter(AttendanceSession.recurrence_pattern != "")
            .order_by(AttendanceSession.id)
            .all()
        )

    def find_instances_of_template(self, template_id: int) -> List[AttendanceSession]:
        return (
            self.db.query(AttendanceSession)
            .filter(AttendanceSession.template_id == template_id)
            .order_by(AttendanceSession.session_date)
            .all()
        )

    def exists_instance_on_date(self, organization_id: int, session_date: date, session_name: str) -> bool:
        """Whether a non-recurring session with this name already exists on the date."""
        query = self.db.query(AttendanceSession.id).filter(
            AttendanceSession.organization_id == organization_id,
            AttendanceSession.session_date == session_date,
            AttendanceSession.session_name == session_name,
            AttendanceSession.recurrence_pattern.is_(None),
        )
        return self.db.query(query.exists()).scalar()

    def find_open_geofenced(self) -> List[AttendanceSession]:
        """Sessions that are not completed, are not templates, and have a geofence center."""
        return (
            self.db.query(AttendanceSession)
            .filter(
                AttendanceSession.is_completed.is_(False),
                AttendanceSession.recurrence_pattern.is_(None),
                AttendanceSession.geofence_latitude.isnot(None),
                AttendanceSession.geofence_longitude.isnot(None),
            )
            .all()
        )

    def save(self, session: AttendanceSession) -> AttendanceSession:
        """
        Insert or update a session and commit.

        Raises:
            IntegrityError: if a constraint is violated
            SQLAlchemyError: on any other database failure

        The transaction is rolled back before either is re-raised.
        """
        try:
            self.db.add(session)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(session)
        return session
