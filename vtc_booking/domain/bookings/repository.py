"""Booking repository - Database operations for bookings"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import InvalidStatusError, PersistenceError
from ...models import ACTIVE_STATUSES, Booking, BookingStatus, utcnow
from .schemas import BookingCreate

logger = logging.getLogger(__name__)

RECENT_BOOKINGS_LIMIT = 5


class BookingRepository:
    """Single source of truth for bookings"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: BookingCreate) -> Booking:
        """Insert a new pending booking"""
        now = utcnow()
        booking = Booking(
            pickup=data.pickup,
            destination=data.destination,
            date=data.date,
            time=data.time,
            passengers=data.passengers,
            service_type=data.serviceType,
            name=data.name,
            phone=data.phone,
            email=data.email,
            notes=data.notes,
            status=BookingStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(booking)
            self.db.commit()
            self.db.refresh(booking)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to insert booking for {data.date} {data.time}: {e}")
            raise PersistenceError() from e
        return booking

    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_public_by_id(self, booking_id: int) -> Optional[dict]:
        """Lookup for the confirmation page - customer contact fields are dropped"""
        booking = self.get_by_id(booking_id)
        return booking.to_public_dict() if booking else None

    def list(
        self, status: Optional[str] = None, page: int = 1, page_size: int = 10
    ) -> tuple[list[Booking], int]:
        """Return one page of bookings (newest first) and the total matching the filter"""
        query = self.db.query(Booking)
        if status:
            query = query.filter(Booking.status == status)

        total = query.count()
        rows = (
            query.order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return rows, total

    def update_status(self, booking_id: int, status: str) -> int:
        """
        Set a booking's status and refresh updated_at.

        Returns the number of rows affected (0 when the id is unknown).
        Raises InvalidStatusError before any query when status is not one of
        the four booking statuses.
        """
        if status not in BookingStatus.values():
            raise InvalidStatusError()

        booking = self.get_by_id(booking_id)
        if not booking:
            return 0

        now = utcnow()
        booking.status = status
        # updated_at never moves backwards, even if the clock does
        booking.updated_at = max(now, booking.updated_at) if booking.updated_at else now
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update status of booking {booking_id}: {e}")
            raise PersistenceError("Erreur lors de la mise à jour") from e
        return 1

    def count_matching_slot(self, booking_date: str, booking_time: str) -> int:
        """Count pending/confirmed bookings at exactly this date and time"""
        return (
            self.db.query(func.count(Booking.id))
            .filter(
                Booking.date == booking_date,
                Booking.time == booking_time,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            .scalar()
        )

    def aggregate_stats(self, today: date) -> dict:
        """Dashboard counters in one aggregate query, plus the most recent bookings"""
        today_iso = today.isoformat()
        total, pending, confirmed, today_count = self.db.query(
            func.count(Booking.id),
            func.coalesce(func.sum(case((Booking.status == BookingStatus.PENDING.value, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Booking.status == BookingStatus.CONFIRMED.value, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Booking.date == today_iso, 1), else_=0)), 0),
        ).one()

        recent = (
            self.db.query(Booking)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(RECENT_BOOKINGS_LIMIT)
            .all()
        )

        return {
            "totalBookings": int(total),
            "pendingBookings": int(pending),
            "confirmedBookings": int(confirmed),
            "todayBookings": int(today_count),
            "recentBookings": [b.to_dict() for b in recent],
        }
