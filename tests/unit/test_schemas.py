"""Tests for check-in request validation."""
import pytest
from pydantic import ValidationError

from attendance.core.enums import CheckInMethod
from attendance.schemas.checkin import CheckInRequest


@pytest.mark.unit
class TestCheckInRequest:
    """Test request shape rules."""

    def test_member_request(self):
        request = CheckInRequest(session_id=1, method=CheckInMethod.MANUAL, member_id=5)
        assert request.person_id == 5

    def test_visitor_request(self):
        request = CheckInRequest(session_id=1, method="SELF", visitor_id=8)
        assert request.method == CheckInMethod.SELF
        assert request.person_id == 8

    def test_requires_a_person(self):
        with pytest.raises(ValidationError, match="Either member_id or visitor_id"):
            CheckInRequest(session_id=1, method=CheckInMethod.MANUAL)

    def test_rejects_both_people(self):
        with pytest.raises(ValidationError, match="Cannot provide both"):
            CheckInRequest(session_id=1, method=CheckInMethod.MANUAL, member_id=1, visitor_id=2)

    def test_token_method_requires_token(self):
        with pytest.raises(ValidationError, match="token is required"):
            CheckInRequest(session_id=1, method=CheckInMethod.TOKEN, member_id=1)

    def test_token_content_not_checked(self):
        request = CheckInRequest(session_id=1, method=CheckInMethod.TOKEN, member_id=1, token=" not a token! ")
        assert request.token == "not a token!"

    def test_blank_token_rejected(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            CheckInRequest(session_id=1, method=CheckInMethod.TOKEN, member_id=1, token="   ")

    def test_geofence_method_requires_coordinates(self):
        with pytest.raises(ValidationError, match="Latitude and longitude are required"):
            CheckInRequest(session_id=1, method=CheckInMethod.GEOFENCE, member_id=1, latitude=6.5)

    @pytest.mark.parametrize("latitude, longitude", [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_coordinates_in_range(self, latitude, longitude):
        with pytest.raises(ValidationError):
            CheckInRequest(
                session_id=1,
                method=CheckInMethod.GEOFENCE,
                member_id=1,
                latitude=latitude,
                longitude=longitude,
            )

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            CheckInRequest(session_id=1, method="CARRIER_PIGEON", member_id=1)

    def test_device_info_sanitized(self):
        request = CheckInRequest(
            session_id=1, method=CheckInMethod.APP, member_id=1, device_info="<b>Android</b>  14"
        )
        assert request.device_info == "Android 14"
