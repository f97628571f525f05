import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from app.database import Base


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    User account able to open a session.

    Attributes:
        id: Opaque identifier embedded in session tokens
        name: Display name
        email: Login email (unique)
        username: Handle derived from the email local part (unique)
        password_hash: bcrypt hash, never exposed to clients
        created_at: Timestamp when the account was created
        updated_at: Timestamp when the account was last updated
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_user_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
