"""Booking domain schemas - Pydantic models and request validation"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...shared.validators import (
    parse_iso_date,
    validate_email,
    validate_fr_phone,
    validate_time,
)


class BookingCreate(BaseModel):
    """Schema for a ride request submitted from the public form"""

    model_config = ConfigDict(extra="ignore")

    pickup: str = Field(..., min_length=3, max_length=200)
    destination: str = Field(..., min_length=3, max_length=200)
    date: str
    time: str
    passengers: int = Field(1, ge=1, le=8)
    serviceType: str = Field("standard", pattern="^(standard|premium|business)$")
    name: str = Field(..., min_length=2, max_length=100)
    phone: str
    email: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return parse_iso_date(v).isoformat()

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_fr_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class StatusUpdate(BaseModel):
    status: Optional[str] = None


@dataclass
class BookingValidationResult:
    """Outcome of validating a booking request. Never raised, always returned."""

    booking: Optional[BookingCreate] = None
    errors: list[str] = field(default_factory=list)
    in_past: bool = False

    @property
    def is_valid(self) -> bool:
        return self.booking is not None and not self.errors and not self.in_past


def _format_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ())) or "body"
        msg = error.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        messages.append(f"{loc}: {msg}")
    return messages


def slot_datetime(booking_date: str, booking_time: str, tz: tzinfo) -> datetime:
    """Combine a stored date and time into an aware datetime in the booking timezone"""
    day = parse_iso_date(booking_date)
    hours, minutes = validate_time(booking_time).split(":")
    return datetime(day.year, day.month, day.day, int(hours), int(minutes), tzinfo=tz)


def _slot_in_past(payload: dict, now: datetime, tz: tzinfo) -> bool:
    raw_date = payload.get("date")
    raw_time = payload.get("time")
    if not isinstance(raw_date, str) or not isinstance(raw_time, str):
        return False
    try:
        return slot_datetime(raw_date, raw_time, tz) <= now
    except ValueError:
        return False


def validate_booking_request(payload: Any, now: datetime, tz: tzinfo) -> BookingValidationResult:
    """
    Validate an untyped booking payload.

    Every field rule is checked and all violations are collected together.
    Defaults are filled for passengers and serviceType. The requested slot
    must be strictly after `now` in the booking timezone; a past slot is
    flagged as soon as date and time parse, whatever the other fields hold.
    """
    if not isinstance(payload, dict):
        return BookingValidationResult(errors=["body: doit être un objet JSON"])

    result = BookingValidationResult(in_past=_slot_in_past(payload, now, tz))

    try:
        result.booking = BookingCreate.model_validate(payload)
    except ValidationError as e:
        result.errors = _format_errors(e)

    return result
