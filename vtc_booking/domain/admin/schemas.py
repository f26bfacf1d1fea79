"""Admin domain schemas"""

from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    # Presence is checked by AdminService so a missing field gets the same
    # 400 envelope as an empty one
    username: Optional[str] = None
    password: Optional[str] = None


class CreateAdminRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None


class AdminResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None

    class Config:
        from_attributes = True
