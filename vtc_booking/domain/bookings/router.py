"""Booking router - Public FastAPI endpoints for ride requests"""

import logging
import re
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Request, status
from sqlalchemy.orm import Session

from ...database import get_db
from ...exceptions import BadRequestError, NotFoundError
from ...rate_limiter import booking_rate_limit
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])

# Registered by main.py only when DEBUG_ROUTES_ENABLED is set
debug_router = APIRouter(prefix="/api/bookings", tags=["Debug"])

BOOKING_ID_PATTERN = re.compile(r"[0-9]+")

# Largest value a SQLite INTEGER primary key can hold
MAX_BOOKING_ID = 2**63 - 1


def get_booking_service(request: Request, db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db, notifier=request.app.state.notifier)


def parse_booking_id(raw_id: str) -> int:
    """
    Positive ASCII integer ids only. Ids beyond the SQLite INTEGER range
    cannot exist, so they are reported as not found.
    """
    if not BOOKING_ID_PATTERN.fullmatch(raw_id) or int(raw_id) < 1:
        raise BadRequestError("ID de réservation invalide")
    booking_id = int(raw_id)
    if booking_id > MAX_BOOKING_ID:
        raise NotFoundError()
    return booking_id


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(booking_rate_limit)])
async def create_booking(
    background_tasks: BackgroundTasks,
    payload: Any = Body(None),
    service: BookingService = Depends(get_booking_service),
):
    """Submit a ride request from the public form"""
    logger.info("📝 New booking request received")
    booking = service.submit(payload)

    data = booking.to_dict()
    data.pop("updatedAt", None)

    # Emails go out after the response is sent; their outcome never changes it
    background_tasks.add_task(service.notify, booking.to_dict())

    return {
        "success": True,
        "message": "Réservation enregistrée avec succès",
        "bookingId": booking.id,
        "emailSent": "Email de confirmation envoyé" if booking.email else "Pas d'email fourni",
        "data": data,
    }


@router.get("/availability/{booking_date}/{booking_time}")
async def check_availability(
    booking_date: str,
    booking_time: str,
    service: BookingService = Depends(get_booking_service),
):
    """Advisory check that no active booking holds the slot"""
    available = service.check_availability(booking_date, booking_time)
    logger.info(f"📅 Availability {booking_date} {booking_time}: {'free' if available else 'taken'}")
    return {
        "success": True,
        "available": available,
        "message": "Créneau disponible" if available else "Créneau déjà réservé",
    }


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    """Public confirmation view - contact details are not returned"""
    return {"success": True, "data": service.get_public(parse_booking_id(booking_id))}


@debug_router.post("/test-email/{booking_id}")
async def send_test_emails(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    """Resend both notification emails for an existing booking"""
    booking = service.get_booking(parse_booking_id(booking_id))
    logger.info(f"🧪 Test emails requested for booking #{booking.id}")
    result = await service.notify(booking.to_dict())
    return {"success": True, "message": "Emails de test envoyés", "data": result}
