"""Admin service - Operator bootstrap, login and token checks"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import (
    AdminExistsError,
    BadRequestError,
    InvalidCredentialError,
    InvalidCredentialsError,
)
from ...models import AdminUser
from ...security_utils import (
    create_jwt_token,
    hash_password_bcrypt,
    verify_jwt_token,
    verify_password_bcrypt,
)
from ...shared.validators import validate_email
from .repository import AdminRepository

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS_MESSAGE = "Nom d'utilisateur et mot de passe requis"


class AdminService:
    """Single-admin account model: one bootstrap, then login only"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AdminRepository(db)

    def bootstrap_admin(self, username: Optional[str], password: Optional[str], email: Optional[str] = None) -> AdminUser:
        """Create the operator account. Refused once any account exists."""
        if not username or not password:
            raise BadRequestError(MISSING_CREDENTIALS_MESSAGE)

        if self.repo.count() > 0:
            logger.warning(f"⚠️ Admin bootstrap refused for {username}: an account already exists")
            raise AdminExistsError()

        try:
            email = validate_email(email)
        except ValueError as e:
            raise BadRequestError("Adresse email invalide") from e

        admin = self.repo.create(username, hash_password_bcrypt(password), email)
        logger.info(f"🆕 Admin account created: {admin.username}")
        return admin

    def login(self, username: Optional[str], password: Optional[str]) -> tuple[str, AdminUser]:
        """Check credentials and issue a 24h bearer token"""
        if not username or not password:
            raise BadRequestError(MISSING_CREDENTIALS_MESSAGE)

        admin = self.repo.get_by_username(username)
        if not admin or not verify_password_bcrypt(password, admin.password):
            logger.warning(f"⚠️ Failed admin login for {username}")
            raise InvalidCredentialsError()

        token = create_jwt_token({"id": admin.id, "username": admin.username})
        logger.info(f"✅ Admin logged in: {admin.username}")
        return token, admin


def authenticate(token: str) -> dict:
    """
    Verify a bearer token's signature and expiry.

    Returns the claims ({id, username, exp}); raises InvalidCredentialError
    otherwise.
    """
    claims = verify_jwt_token(token)
    if not claims or "id" not in claims or "username" not in claims:
        raise InvalidCredentialError()
    return claims
