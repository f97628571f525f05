from typing import Optional, Protocol
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User
from app.utils.exceptions import DuplicateResourceError

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Storage capability the auth service depends on."""

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_username(self, username: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def create(self, name: str, email: str, username: str, password_hash: str) -> User:
        """
        Persist a new user.

        Raises:
            DuplicateResourceError: If the store rejects the email or username
                as already taken
        """
        ...


class SqlAlchemyUserRepository:
    """UserRepository backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def create(self, name: str, email: str, username: str, password_hash: str) -> User:
        user = User(
            name=name,
            email=email,
            username=username,
            password_hash=password_hash,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            # The unique constraints are the final arbiter when two
            # registrations race past the existence checks
            self.db.rollback()
            logger.warning(f"Unique constraint violated creating user '{username}': {e.orig}")
            raise DuplicateResourceError("Email or username already exists")

        self.db.refresh(user)
        return user
