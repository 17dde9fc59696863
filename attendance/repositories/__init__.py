"""Persistence boundary used by the check-in and recurrence services."""
from attendance.repositories.sessions import SessionRepository
from attendance.repositories.attendances import AttendanceRepository, is_duplicate_attendance

__all__ = ["SessionRepository", "AttendanceRepository", "is_duplicate_attendance"]
