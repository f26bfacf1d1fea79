"""Admin router - Operator login and booking management endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ..bookings.router import get_booking_service, parse_booking_id
from ..bookings.schemas import StatusUpdate
from ..bookings.service import DEFAULT_PAGE_SIZE, BookingService
from .schemas import AdminResponse, CreateAdminRequest, LoginRequest
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


@router.post("/login")
async def login(
    data: LoginRequest,
    service: AdminService = Depends(get_admin_service),
):
    token, admin = service.login(data.username, data.password)
    return {
        "success": True,
        "token": token,
        "user": AdminResponse.model_validate(admin).model_dump(),
    }


@router.post("/create-admin", status_code=status.HTTP_201_CREATED)
async def create_admin(
    data: CreateAdminRequest,
    service: AdminService = Depends(get_admin_service),
):
    """One-time bootstrap of the operator account"""
    admin = service.bootstrap_admin(data.username, data.password, data.email)
    return {
        "success": True,
        "message": "Compte administrateur créé avec succès",
        "adminId": admin.id,
    }


@router.get("/bookings")
async def list_bookings(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    status: Optional[str] = Query(None),
    _admin: dict = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Paginated bookings, newest first, optionally filtered by status"""
    rows, pagination = service.list_bookings(status=status, page=page, limit=limit)
    return {
        "success": True,
        "data": [b.to_dict() for b in rows],
        "pagination": pagination,
    }


@router.put("/bookings/{booking_id}")
async def update_booking_status(
    booking_id: str,
    data: StatusUpdate,
    admin: dict = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    service.update_status(parse_booking_id(booking_id), data.status)
    logger.info(f"🔄 Status of booking #{booking_id} changed by {admin.get('username')}")
    return {"success": True, "message": "Statut mis à jour avec succès"}


@router.get("/stats")
async def get_stats(
    _admin: dict = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return {"success": True, "data": service.stats()}
