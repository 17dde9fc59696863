"""Unit tests for the repositories."""
from datetime import date, datetime

import pytest
from sqlalchemy.exc import IntegrityError

from attendance.core.enums import CheckInMethod
from attendance.db.models import Attendance, AttendanceSession
from attendance.repositories import is_duplicate_attendance
from tests.utils import create_session, create_template


def _attendance(session_id, member_id=None, visitor_id=None):
    return Attendance(
        session_id=session_id,
        member_id=member_id,
        visitor_id=visitor_id,
        check_in_method=CheckInMethod.MANUAL,
        check_in_time=datetime(2025, 1, 5, 9, 50),
        is_late=False,
        minutes_late=0,
    )


@pytest.mark.unit
class TestSessionRepository:
    """Test session queries."""

    def test_find_by_id(self, session_repository, db_session):
        session = create_session(db_session)
        assert session_repository.find_by_id(session.id) is session
        assert session_repository.find_by_id(999) is None

    def test_find_templates(self, session_repository, db_session):
        weekly = create_template(db_session, "WEEKLY")
        create_session(db_session)
        create_session(db_session, recurrence_pattern="")
        daily = create_template(db_session, "DAILY")

        assert session_repository.find_templates() == [weekly, daily]

    def test_find_instances_of_template(self, session_repository, db_session):
        template = create_template(db_session, "WEEKLY")
        later = create_session(db_session, session_date=date(2025, 1, 19), template_id=template.id)
        earlier = create_session(db_session, session_date=date(2025, 1, 12), template_id=template.id)
        create_session(db_session)

        assert session_repository.find_instances_of_template(template.id) == [earlier, later]

    def test_exists_instance_on_date(self, session_repository, db_session):
        create_session(db_session, session_date=date(2025, 1, 12))
        create_template(db_session, "WEEKLY", session_date=date(2025, 1, 19))

        assert session_repository.exists_instance_on_date(1, date(2025, 1, 12), "Sunday Service") is True
        assert session_repository.exists_instance_on_date(2, date(2025, 1, 12), "Sunday Service") is False
        assert session_repository.exists_instance_on_date(1, date(2025, 1, 12), "Evening Service") is False
        # templates do not count as instances
        assert session_repository.exists_instance_on_date(1, date(2025, 1, 19), "Sunday Service") is False

    def test_find_open_geofenced(self, session_repository, db_session):
        fenced = create_session(db_session, geofence_latitude=6.5, geofence_longitude=3.3)
        create_session(db_session, geofence_latitude=6.5, geofence_longitude=3.3, is_completed=True)
        create_session(db_session, geofence_latitude=6.5)
        create_template(db_session, "DAILY", geofence_latitude=6.5, geofence_longitude=3.3)

        assert session_repository.find_open_geofenced() == [fenced]

    def test_save_duplicate_instance_rolls_back(self, session_repository, db_session):
        template = create_template(db_session, "WEEKLY")
        create_session(db_session, session_date=date(2025, 1, 12), template_id=template.id)

        with pytest.raises(IntegrityError):
            session_repository.save(
                AttendanceSession(
                    organization_id=1,
                    session_name="Sunday Service",
                    session_date=date(2025, 1, 12),
                    template_id=template.id,
                )
            )

        # the session is usable again after the rollback
        assert len(session_repository.find_instances_of_template(template.id)) == 1


@pytest.mark.unit
class TestAttendanceRepository:
    """Test attendance persistence."""

    def test_exists_for_member_and_visitor(self, attendance_repository, db_session):
        session = create_session(db_session)
        attendance_repository.save(_attendance(session.id, member_id=7))

        assert attendance_repository.exists_for_session_and_person(session.id, member_id=7) is True
        assert attendance_repository.exists_for_session_and_person(session.id, visitor_id=7) is False
        assert attendance_repository.exists_for_session_and_person(session.id, member_id=8) is False

    def test_exists_requires_exactly_one_person(self, attendance_repository):
        with pytest.raises(ValueError, match="Exactly one"):
            attendance_repository.exists_for_session_and_person(1)
        with pytest.raises(ValueError, match="Exactly one"):
            attendance_repository.exists_for_session_and_person(1, member_id=1, visitor_id=2)

    def test_count_for_session(self, attendance_repository, db_session):
        session = create_session(db_session)
        other = create_session(db_session, session_name="Other")
        attendance_repository.save(_attendance(session.id, member_id=1))
        attendance_repository.save(_attendance(session.id, visitor_id=1))
        attendance_repository.save(_attendance(other.id, member_id=1))

        assert attendance_repository.count_for_session(session.id) == 2

    def test_duplicate_member_raises_integrity_error(self, attendance_repository, db_session):
        session = create_session(db_session)
        attendance_repository.save(_attendance(session.id, member_id=7))

        with pytest.raises(IntegrityError):
            attendance_repository.save(_attendance(session.id, member_id=7))

        assert attendance_repository.count_for_session(session.id) == 1

    def test_duplicate_member_within_capacity_raises_integrity_error(self, attendance_repository, db_session):
        session = create_session(db_session)
        attendance_repository.save(_attendance(session.id, member_id=7), max_capacity=10)

        with pytest.raises(IntegrityError):
            attendance_repository.save(_attendance(session.id, member_id=7), max_capacity=10)

        assert attendance_repository.count_for_session(session.id) == 1

    def test_record_needs_exactly_one_person(self, attendance_repository, db_session):
        session = create_session(db_session)

        with pytest.raises(IntegrityError):
            attendance_repository.save(_attendance(session.id, member_id=1, visitor_id=2))

    @pytest.mark.parametrize("max_capacity", [None, 10])
    def test_duplicate_error_is_recognized(self, attendance_repository, db_session, max_capacity):
        session = create_session(db_session)
        attendance_repository.save(_attendance(session.id, visitor_id=3), max_capacity=max_capacity)

        with pytest.raises(IntegrityError) as exc_info:
            attendance_repository.save(_attendance(session.id, visitor_id=3), max_capacity=max_capacity)

        assert is_duplicate_attendance(exc_info.value) is True

    def test_other_integrity_errors_are_not_duplicates(self, attendance_repository, db_session):
        session = create_session(db_session)

        with pytest.raises(IntegrityError) as exc_info:
            attendance_repository.save(_attendance(session.id, member_id=1, visitor_id=2))

        assert is_duplicate_attendance(exc_info.value) is False

    @pytest.mark.parametrize("message, expected", [
        ('duplicate key value violates unique constraint "uq_attendance_session_member"', True),
        ("Duplicate entry '4-9' for key 'uq_attendance_session_visitor'", True),
        ('insert or update on table "attendances" violates foreign key constraint', False),
    ])
    def test_duplicate_detection_across_backends(self, message, expected):
        error = IntegrityError("INSERT INTO attendances", {}, Exception(message))

        assert is_duplicate_attendance(error) is expected

    def test_save_within_capacity(self, attendance_repository, db_session):
        session = create_session(db_session)

        saved = attendance_repository.save(_attendance(session.id, member_id=1), max_capacity=1)
        full = attendance_repository.save(_attendance(session.id, member_id=2), max_capacity=1)

        assert saved.id is not None
        assert saved.member_id == 1
        assert saved.check_in_time == datetime(2025, 1, 5, 9, 50)
        assert full is None
        assert attendance_repository.count_for_session(session.id) == 1
