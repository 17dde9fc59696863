"""Database models."""
from attendance.db.models.attendance_session import AttendanceSession
from attendance.db.models.attendance import Attendance

__all__ = ["AttendanceSession", "Attendance"]
