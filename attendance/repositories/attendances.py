"""Attendance persistence."""
from typing import Optional

from sqlalchemy import func, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from attendance.db.models import Attendance, AttendanceSession

# Columns written by a check-in; everything except the generated id
_INSERT_COLUMNS = (
    "session_id",
    "member_id",
    "visitor_id",
    "check_in_method",
    "check_in_time",
    "latitude",
    "longitude",
    "device_info",
    "is_late",
    "minutes_late",
)

# One row per person per session; how each backend names a violation of it
_DUPLICATE_MARKERS = (
    "uq_attendance_session_member",
    "uq_attendance_session_visitor",
    "UNIQUE constraint failed: attendances.session_id",
)


def is_duplicate_attendance(error: IntegrityError) -> bool:
    """True when ``error`` comes from the one-record-per-person constraints."""
    message = str(error.orig)
    return any(marker in message for marker in _DUPLICATE_MARKERS)


class AttendanceRepository:
    """Writes attendance records; the table's unique constraints enforce one per person per session."""

    def __init__(self, db: Session):
        self.db = db

    def exists_for_session_and_person(
        self,
        session_id: int,
        member_id: Optional[int] = None,
        visitor_id: Optional[int] = None,
    ) -> bool:
        if (member_id is None) == (visitor_id is None):
            raise ValueError("Exactly one of member_id or visitor_id is required")

        query = self.db.query(Attendance.id).filter(Attendance.session_id == session_id)
        if member_id is not None:
            query = query.filter(Attendance.member_id == member_id)
        else:
            query = query.filter(Attendance.visitor_id == visitor_id)
        return self.db.query(query.exists()).scalar()

    def count_for_session(self, session_id: int) -> int:
        return self.db.query(Attendance).filter(Attendance.session_id == session_id).count()

    def save(self, record: Attendance, max_capacity: Optional[int] = None) -> Optional[Attendance]:
        """
        Insert a new attendance record and commit.

        With ``max_capacity`` the insert is conditional on the session holding
        fewer than that many records, evaluated inside the INSERT statement
        itself so two concurrent check-ins cannot both take the last place.

        Returns:
            The stored record, or None when the session is already full

        Raises:
            IntegrityError: if the person already has a record for the session
                (the transaction is rolled back)
        """
        try:
            if max_capacity is None:
                self.db.add(record)
                self.db.commit()
                self.db.refresh(record)
                return record
            return self._save_within_capacity(record, max_capacity)
        except IntegrityError:
            self.db.rollback()
            raise

    def _save_within_capacity(self, record: Attendance, max_capacity: int) -> Optional[Attendance]:
        table = Attendance.__table__

        # Serializes capacity-limited inserts per session on databases with row locks
        self.db.execute(
            select(AttendanceSession.id)
            .where(AttendanceSession.id == record.session_id)
            .with_for_update()
        ).scalar_one_or_none()

        occupied = (
            select(func.count(Attendance.id))
            .where(Attendance.session_id == record.session_id)
            .correlate(None)
            .scalar_subquery()
        )
        values = select(
            *[literal(getattr(record, name), type_=table.c[name].type) for name in _INSERT_COLUMNS]
        ).where(occupied < max_capacity)

        stmt = insert(Attendance).from_select(list(_INSERT_COLUMNS), values).returning(Attendance.id)
        new_id = self.db.execute(stmt).scalar_one_or_none()

        if new_id is None:
            self.db.rollback()
            return None

        self.db.commit()
        return self.db.get(Attendance, new_id)
