import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from .database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what SQLite hands back for DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


# Statuses that hold a (date, time) slot
ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class ServiceType(str, enum.Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    BUSINESS = "business"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    pickup = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    time = Column(String(5), nullable=False)  # HH:MM, 24h
    passengers = Column(Integer, nullable=False, default=1)
    service_type = Column("serviceType", String(20), nullable=False, default=ServiceType.STANDARD.value)
    name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    created_at = Column("createdAt", DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column("updatedAt", DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pickup": self.pickup,
            "destination": self.destination,
            "date": self.date,
            "time": self.time,
            "passengers": self.passengers,
            "serviceType": self.service_type,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "notes": self.notes,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_public_dict(self) -> dict:
        """Fields safe to show on the unauthenticated confirmation page"""
        return {
            "id": self.id,
            "pickup": self.pickup,
            "destination": self.destination,
            "date": self.date,
            "time": self.time,
            "passengers": self.passengers,
            "serviceType": self.service_type,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    email = Column(String(255), nullable=True)
    created_at = Column("createdAt", DateTime, nullable=False, default=utcnow)
