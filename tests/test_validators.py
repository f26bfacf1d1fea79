"""
Validator Tests

Field-level rules and the booking request validator.
"""

from datetime import datetime, timezone

import pytest

from vtc_booking.domain.bookings.schemas import validate_booking_request
from vtc_booking.shared.validators import (
    parse_iso_date,
    validate_email,
    validate_fr_phone,
    validate_time,
)

from .conftest import FROZEN_NOW, PARIS


# =============================================================================
# Shared validators
# =============================================================================


class TestFrenchPhone:
    @pytest.mark.parametrize(
        "phone",
        [
            "0612345678",
            "06 12 34 56 78",
            "06.12.34.56.78",
            "06-12-34-56-78",
            "+33612345678",
            "+33 6 12 34 56 78",
            "0033 1 23 45 67 89",
        ],
    )
    def test_accepts_french_numbers(self, phone):
        assert validate_fr_phone(phone) == phone

    @pytest.mark.parametrize(
        "phone",
        ["0012345678", "061234567", "06123456789", "+44 7911 123456", "abcdefghij", ""],
    )
    def test_rejects_other_numbers(self, phone):
        with pytest.raises(ValueError):
            validate_fr_phone(phone)


class TestTime:
    def test_zero_pads_single_digit_hours(self):
        assert validate_time("9:05") == "09:05"

    def test_keeps_valid_time(self):
        assert validate_time("23:59") == "23:59"

    @pytest.mark.parametrize("value", ["24:00", "12:60", "1230", "12h30", ""])
    def test_rejects_invalid_time(self, value):
        with pytest.raises(ValueError):
            validate_time(value)


class TestDateAndEmail:
    def test_parses_iso_date_and_datetime(self):
        assert parse_iso_date("2099-06-15").isoformat() == "2099-06-15"
        assert parse_iso_date("2099-06-15T10:00:00").isoformat() == "2099-06-15"

    def test_rejects_non_iso_date(self):
        with pytest.raises(ValueError):
            parse_iso_date("15/06/2099")

    def test_email_is_lowercased(self):
        assert validate_email(" Camille@Example.COM ") == "camille@example.com"

    def test_blank_email_is_none(self):
        assert validate_email("") is None
        assert validate_email(None) is None

    def test_rejects_malformed_email(self):
        with pytest.raises(ValueError):
            validate_email("not-an-email")


# =============================================================================
# Booking request validation
# =============================================================================


class TestBookingRequestValidation:
    def test_valid_payload(self, booking_payload):
        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        assert result.is_valid
        assert result.errors == []
        assert result.booking.pickup == booking_payload["pickup"]
        assert result.booking.serviceType == "premium"

    def test_fills_defaults(self, booking_payload):
        del booking_payload["passengers"]
        del booking_payload["serviceType"]

        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        assert result.is_valid
        assert result.booking.passengers == 1
        assert result.booking.serviceType == "standard"

    def test_blank_optional_fields_become_none(self, booking_payload):
        booking_payload["email"] = ""
        booking_payload["notes"] = "   "

        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        assert result.is_valid
        assert result.booking.email is None
        assert result.booking.notes is None

    @pytest.mark.parametrize(
        "field,value",
        [
            ("phone", "0012345678"),
            ("passengers", 0),
            ("passengers", 9),
            ("pickup", "ab"),
            ("destination", "x" * 201),
            ("name", "A"),
            ("serviceType", "luxury"),
            ("email", "camille@"),
            ("notes", "n" * 501),
            ("time", "25:00"),
            ("date", "demain"),
        ],
    )
    def test_single_field_rule_violation(self, booking_payload, field, value):
        booking_payload[field] = value

        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        assert not result.is_valid
        assert result.booking is None
        assert len(result.errors) == 1
        assert result.errors[0].startswith(f"{field}:")

    def test_collects_every_error(self, booking_payload):
        booking_payload.update({"pickup": "ab", "passengers": 12, "phone": "123"})
        del booking_payload["name"]

        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        fields = sorted(error.split(":")[0] for error in result.errors)
        assert fields == ["name", "passengers", "phone", "pickup"]

    def test_flags_past_slot(self, booking_payload):
        booking_payload["date"] = "2026-10-19"
        booking_payload["time"] = "11:59"

        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        assert result.in_past
        assert not result.is_valid

    def test_slot_equal_to_now_is_rejected(self, booking_payload):
        booking_payload["date"] = "2026-10-19"
        booking_payload["time"] = "12:00"

        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        assert result.in_past
        assert not result.is_valid

    def test_slot_one_minute_ahead_is_accepted(self, booking_payload):
        booking_payload["date"] = "2026-10-19"
        booking_payload["time"] = "12:01"

        result = validate_booking_request(booking_payload, now=FROZEN_NOW, tz=PARIS)

        assert result.is_valid

    def test_slot_is_read_in_local_time(self, booking_payload):
        # 10:30 UTC is 12:30 in Paris (CEST), so a 12:15 slot has passed
        now_utc = datetime(2026, 10, 19, 10, 30, tzinfo=timezone.utc)
        booking_payload["date"] = "2026-10-19"
        booking_payload["time"] = "12:15"

        result = validate_booking_request(booking_payload, now=now_utc, tz=PARIS)

        assert result.in_past

    @pytest.mark.parametrize("payload", [None, [], "booking", 42])
    def test_non_object_payload(self, payload):
        result = validate_booking_request(payload, now=FROZEN_NOW, tz=PARIS)

        assert not result.is_valid
        assert result.errors == ["body: doit être un objet JSON"]
