"""Attendance model."""
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from attendance.core.constants import MAX_DEVICE_INFO_LENGTH
from attendance.core.enums import CheckInMethod
from attendance.db.base import Base


class Attendance(Base):
    __tablename__ = "attendances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id", ondelete="CASCADE"), nullable=False)
    member_id = Column(Integer, nullable=True)
    visitor_id = Column(Integer, nullable=True)
    check_in_method = Column(Enum(CheckInMethod), nullable=False)
    check_in_time = Column(DateTime, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    device_info = Column(String(MAX_DEVICE_INFO_LENGTH), nullable=True)
    is_late = Column(Boolean, nullable=False, default=False)
    minutes_late = Column(Integer, nullable=False, default=0)

    # Relationships
    session = relationship("AttendanceSession", back_populates="attendances")

    __table_args__ = (
        Index("idx_attendances_session", "session_id"),
        # One admission per person per session; NULLs never collide
        UniqueConstraint("session_id", "member_id", name="uq_attendance_session_member"),
        UniqueConstraint("session_id", "visitor_id", name="uq_attendance_session_visitor"),
        CheckConstraint(
            "(member_id IS NULL) <> (visitor_id IS NULL)",
            name="ck_attendance_single_person",
        ),
    )

    @property
    def person_id(self) -> int:
        return self.member_id if self.member_id is not None else self.visitor_id
