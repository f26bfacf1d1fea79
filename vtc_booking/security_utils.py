"""
Operator credentials

The admin password is stored as a bcrypt hash. After login the operator holds
an HS256 JWT carrying their id and username, valid for
ACCESS_TOKEN_EXPIRE_HOURS.
"""

import logging
from datetime import timedelta
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from . import config
from .models import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password_bcrypt(password: str) -> str:
    """bcrypt hash for the admin_users.password column"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """False for a wrong password or a hash passlib cannot read"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign `data` with SECRET_KEY, adding an exp claim (default ACCESS_TOKEN_EXPIRE_HOURS ahead)"""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(hours=config.ACCESS_TOKEN_EXPIRE_HOURS)

    to_encode.update({"exp": utcnow() + expires_delta})
    return jose_jwt.encode(to_encode, config.SECRET_KEY, algorithm=ALGORITHM)


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """Claims of a valid token; None when the signature, format or expiry check fails"""
    try:
        return jose_jwt.decode(token, config.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None
