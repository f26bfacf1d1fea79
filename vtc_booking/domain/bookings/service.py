"""Booking service - Business logic for the booking lifecycle"""

import logging
import math
from datetime import datetime, tzinfo
from typing import Any, Callable, Optional, Protocol
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...config import BOOKING_TIMEZONE
from ...exceptions import BookingValidationError, InvalidStatusError, NotFoundError, PastDateError
from ...models import Booking, BookingStatus
from ...shared.validators import parse_iso_date, validate_time
from .repository import BookingRepository
from .schemas import validate_booking_request

logger = logging.getLogger(__name__)

# Any status may be set from any status
ALLOWED_STATUSES = BookingStatus.values()

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Notifier(Protocol):
    async def send_customer_confirmation(self, booking: dict) -> Any: ...

    async def send_operator_notification(self, booking: dict) -> Any: ...


class BookingService:
    """Service layer for booking intake and administration"""

    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.repo = BookingRepository(db)
        self.notifier = notifier
        self.tz = tz or ZoneInfo(BOOKING_TIMEZONE)
        self.clock = clock or (lambda: datetime.now(self.tz))

    # ------------------------------------------------------------------
    # Public intake
    # ------------------------------------------------------------------

    def submit(self, payload: Any) -> Booking:
        """
        Validate and persist a ride request.

        Raises PastDateError or BookingValidationError without touching the
        store, and PersistenceError if the insert fails. Notifications are not
        sent here; call notify() once the booking has been returned.
        """
        result = validate_booking_request(payload, now=self.clock(), tz=self.tz)

        if result.in_past:
            logger.info("❌ Booking rejected: requested slot is in the past")
            raise PastDateError()

        if result.errors:
            logger.info(f"❌ Booking rejected: {len(result.errors)} validation error(s)")
            raise BookingValidationError(result.errors)

        booking = self.repo.create(result.booking)
        logger.info(f"✅ Booking #{booking.id} saved for {booking.date} {booking.time}")
        return booking

    async def notify(self, booking: dict) -> dict:
        """
        Send the customer confirmation and the operator alert.

        Best effort: the booking is already committed, so each failure is
        logged and swallowed.
        """
        result = {"customer_sent": False, "operator_sent": False}
        if self.notifier is None:
            logger.debug(f"No notifier configured, skipping emails for booking #{booking['id']}")
            return result

        if booking.get("email"):
            try:
                await self.notifier.send_customer_confirmation(booking)
                result["customer_sent"] = True
                logger.info(f"✅ Confirmation email sent for booking #{booking['id']}")
            except Exception as e:
                logger.error(f"❌ Failed to send confirmation email for booking #{booking['id']}: {e}")
        else:
            logger.info(f"⚠️ No customer email for booking #{booking['id']}, confirmation skipped")

        try:
            await self.notifier.send_operator_notification(booking)
            result["operator_sent"] = True
            logger.info(f"✅ Operator notified of booking #{booking['id']}")
        except Exception as e:
            logger.error(f"❌ Failed to notify operator of booking #{booking['id']}: {e}")

        return result

    def get_public(self, booking_id: int) -> dict:
        booking = self.repo.get_public_by_id(booking_id)
        if not booking:
            raise NotFoundError()
        return booking

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_by_id(booking_id)
        if not booking:
            raise NotFoundError()
        return booking

    def check_availability(self, booking_date: str, booking_time: str) -> bool:
        """
        Advisory check: True when no pending/confirmed booking holds the slot.
        The slot is not reserved, a concurrent submission can still take it.
        """
        try:
            day = parse_iso_date(booking_date).isoformat()
            slot_time = validate_time(booking_time)
        except ValueError as e:
            raise BookingValidationError([str(e)], message="Date ou heure invalide") from e

        return self.repo.count_matching_slot(day, slot_time) == 0

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def list_bookings(
        self, status: Optional[str] = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> tuple[list[Booking], dict]:
        if status and status not in ALLOWED_STATUSES:
            raise InvalidStatusError()

        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)

        rows, total = self.repo.list(status=status or None, page=page, page_size=limit)
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        }
        return rows, pagination

    def update_status(self, booking_id: int, status: Optional[str]) -> None:
        affected = self.repo.update_status(booking_id, status)
        if affected == 0:
            raise NotFoundError()
        logger.info(f"🔄 Booking #{booking_id} status set to {status}")

    def stats(self) -> dict:
        return self.repo.aggregate_stats(today=self.clock().date())
