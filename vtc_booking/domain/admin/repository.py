"""Admin repository - Database operations for operator accounts"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import AdminExistsError, PersistenceError
from ...models import AdminUser

logger = logging.getLogger(__name__)


class AdminRepository:
    def __init__(self, db: Session):
        self.db = db

    def count(self) -> int:
        return self.db.query(func.count(AdminUser.id)).scalar()

    def get_by_username(self, username: str) -> Optional[AdminUser]:
        return self.db.query(AdminUser).filter(AdminUser.username == username).first()

    def create(self, username: str, password_hash: str, email: Optional[str] = None) -> AdminUser:
        admin = AdminUser(username=username, password=password_hash, email=email)
        try:
            self.db.add(admin)
            self.db.commit()
            self.db.refresh(admin)
        except IntegrityError as e:
            self.db.rollback()
            raise AdminExistsError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create admin account {username}: {e}")
            raise PersistenceError("Erreur lors de la création du compte") from e
        return admin
