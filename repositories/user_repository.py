"""
User Repository - Data access layer for user accounts
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import AppUser
from app.exceptions import ConflictError


class UserRepository(BaseRepository[AppUser]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, AppUser)

    def get_by_id(self, user_id: str) -> Optional[AppUser]:
        """Get user by ID"""
        return self.db.query(AppUser).filter(AppUser.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[AppUser]:
        """Get user by email"""
        return self.db.query(AppUser).filter(AppUser.email == email).first()

    def create_user(
        self, email: str, username: str, user_id: Optional[str] = None
    ) -> AppUser:
        """Create a new user; duplicate email or username raises ConflictError"""
        user = AppUser(email=email, username=username)
        if user_id is not None:
            user.id = user_id
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                f"User with email {email} or username {username} already exists"
            )
