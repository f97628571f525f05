from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.repositories.user_repository import SqlAlchemyUserRepository
from app.schemas.user import UserPublic
from app.services.auth_service import AuthService


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Build the auth service over the request's database session."""
    return AuthService(SqlAlchemyUserRepository(db))


def get_current_user(
    request: Request,
    service: AuthService = Depends(get_auth_service)
) -> Optional[UserPublic]:
    """
    Resolve the session cookie to the current user.

    Returns None for anonymous callers rather than failing, so endpoints
    can decide whether a session is required.
    """
    token = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if not token:
        return None
    return service.get_session(token)


def require_user(
    user: Optional[UserPublic] = Depends(get_current_user)
) -> UserPublic:
    """Dependency for endpoints that need an authenticated session."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user
