"""AttendanceSession model."""
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from attendance.core.constants import (
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_LATE_CUTOFF_MINUTES,
    MAX_RECURRENCE_PATTERN_LENGTH,
    MAX_SESSION_NAME_LENGTH,
    MAX_TOKEN_LENGTH,
)
from attendance.core.enums import ServiceType
from attendance.core.geo import GeoPoint
from attendance.db.base import Base


class AttendanceSession(Base):
    """
    A plannable gathering.

    Rows with a recurrence pattern are templates: they are never checked
    into and only exist to be expanded into dated instances, which point
    back at their template through ``template_id``.
    """
    __tablename__ = "attendance_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, nullable=False, index=True)
    fellowship_id = Column(Integer, nullable=True)

    session_name = Column(String(MAX_SESSION_NAME_LENGTH), nullable=False)
    session_date = Column(Date, nullable=False)
    session_time = Column(Time, nullable=True)
    service_type = Column(Enum(ServiceType), nullable=False, default=ServiceType.SUNDAY_MAIN_SERVICE)
    notes = Column(Text, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)

    # Admission window (naive local time); a missing bound is open on that side
    check_in_opens_at = Column(DateTime, nullable=True)
    check_in_closes_at = Column(DateTime, nullable=True)

    allow_late_checkin = Column(Boolean, nullable=False, default=True)
    late_cutoff_minutes = Column(Integer, nullable=False, default=DEFAULT_LATE_CUTOFF_MINUTES)
    max_capacity = Column(Integer, nullable=True)

    geofence_latitude = Column(Float, nullable=True)
    geofence_longitude = Column(Float, nullable=True)
    geofence_radius_meters = Column(Integer, nullable=False, default=DEFAULT_GEOFENCE_RADIUS_METERS)

    recurrence_pattern = Column(String(MAX_RECURRENCE_PATTERN_LENGTH), nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    template_id = Column(Integer, ForeignKey("attendance_sessions.id", ondelete="SET NULL"), nullable=True)

    # Most recently issued QR code token and its expiry
    qr_code_token = Column(String(MAX_TOKEN_LENGTH), nullable=True)
    qr_code_expires_at = Column(DateTime, nullable=True)

    # Relationships
    attendances = relationship("Attendance", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_attendance_sessions_lookup", "organization_id", "session_date", "session_name"),
        UniqueConstraint("template_id", "session_date", name="uq_template_instance_date"),
    )

    @property
    def is_template(self) -> bool:
        return bool(self.recurrence_pattern)

    @property
    def geofence_center(self) -> Optional[GeoPoint]:
        if self.geofence_latitude is None or self.geofence_longitude is None:
            return None
        return GeoPoint(self.geofence_latitude, self.geofence_longitude)

    @property
    def starts_at(self) -> Optional[datetime]:
        """Scheduled start as a naive local datetime, or None without a time of day."""
        if self.session_time is None:
            return None
        return datetime.combine(self.session_date, self.session_time)

    def __repr__(self) -> str:
        return f"<AttendanceSession id={self.id} name={self.session_name!r} date={self.session_date}>"
