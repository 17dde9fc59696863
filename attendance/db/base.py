"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here so metadata.create_all() sees them
from attendance.db.models.attendance_session import AttendanceSession  # noqa: F401, E402
from attendance.db.models.attendance import Attendance  # noqa: F401, E402
