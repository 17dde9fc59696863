"""Tests for check-in rejection types."""
import pytest

from attendance.core.exceptions import (
    CapacityExceeded,
    CheckInRejected,
    DuplicateCheckIn,
    InvalidRecurrencePattern,
    LateCutoffExceeded,
    OutOfRange,
    RejectionReason,
    SessionNotFound,
    WindowClosed,
)


@pytest.mark.unit
class TestRejections:
    """Test rejection codes and messages."""

    def test_rejections_are_value_errors(self):
        assert issubclass(CheckInRejected, ValueError)
        with pytest.raises(ValueError):
            raise DuplicateCheckIn()

    def test_default_message(self):
        error = WindowClosed()
        assert error.reason == RejectionReason.WINDOW_CLOSED
        assert error.message == "Check-in window has closed for this session"
        assert str(error) == error.message

    def test_session_not_found_message(self):
        error = SessionNotFound(17)
        assert error.session_id == 17
        assert "17" in error.message

    def test_out_of_range_formats_distance(self):
        error = OutOfRange(150.456, 100)
        assert error.reason == RejectionReason.OUT_OF_RANGE
        assert error.distance_meters == 150.456
        assert error.radius_meters == 100
        assert "Distance: 150.46 meters" in error.message

    def test_late_cutoff_exceeded(self):
        error = LateCutoffExceeded(15, 20)
        assert error.minutes_late == 20
        assert "Maximum allowed: 15 minutes" in error.message

    def test_capacity_exceeded(self):
        error = CapacityExceeded(50)
        assert error.max_capacity == 50
        assert "50" in error.message

    def test_to_error_response(self):
        response = DuplicateCheckIn().to_error_response()
        assert response.success is False
        assert response.error.code == "DUPLICATE_CHECK_IN"
        assert response.error.message == "Already checked in to this session"

    def test_invalid_recurrence_pattern(self):
        error = InvalidRecurrencePattern("YEARLY", "unknown recurrence type")
        assert isinstance(error, ValueError)
        assert error.pattern == "YEARLY"
        assert "YEARLY" in str(error)
