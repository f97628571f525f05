from typing import Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from app.repositories.user_repository import UserRepository
from app.schemas.user import RegisterRequest, UserPublic
from app.utils.exceptions import (
    DuplicateResourceError,
    GenerationExhaustedError,
    UnauthorizedError,
    ValidationError,
)
from app.utils.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

MAX_USERNAME_ATTEMPTS = 1000


def format_errors(error: PydanticValidationError) -> list:
    """Flatten pydantic errors into JSON-safe field/message pairs."""
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


class AuthService:
    """
    Service class for registration, login and session lookup.

    Sessions are stateless signed tokens valid for one hour. There is no
    revocation list: a token stays valid until it expires, so logging out
    only removes the cookie from the client.

    USERNAME UNIQUENESS:
    ====================
    Usernames are derived from the email local part by probing `base`,
    `base1`, `base2`, ... with sequential lookups. Two concurrent
    registrations can both see the same candidate as free; the store's
    unique constraint then rejects one of them and the repository reports
    it as a DuplicateResourceError.
    """

    def __init__(self, repository: UserRepository):
        self.repository = repository

    def register(self, name: str, email: str, password: str) -> UserPublic:
        """
        Register a new account.

        Args:
            name: Display name (non-empty)
            email: Login email (must be well-formed and unused)
            password: Plain password (at least 6 characters)

        Returns:
            Public view of the created user

        Raises:
            ValidationError: If the input shape is invalid
            DuplicateResourceError: If the email (or a raced username) is taken
            GenerationExhaustedError: If no free username was found
        """
        try:
            data = RegisterRequest(name=name, email=email, password=password)
        except PydanticValidationError as e:
            raise ValidationError("Validation failed", details=format_errors(e))

        if self.repository.find_by_email(data.email):
            raise DuplicateResourceError("User already exists")

        username = self.generate_username(data.email)
        password_hash = hash_password(data.password)

        user = self.repository.create(
            name=data.name,
            email=data.email,
            username=username,
            password_hash=password_hash,
        )
        logger.info(f"Registered user {user.id} as '{username}'")

        return UserPublic.model_validate(user)

    def generate_username(self, email: str) -> str:
        """
        Derive a free username from the local part of an email address.

        Tries `base` followed by `base1` .. `base999`, MAX_USERNAME_ATTEMPTS
        candidates in total.

        Raises:
            GenerationExhaustedError: After MAX_USERNAME_ATTEMPTS collisions
        """
        base = email.split("@")[0]
        username = base
        counter = 1

        while self.repository.find_by_username(username):
            if counter >= MAX_USERNAME_ATTEMPTS:
                raise GenerationExhaustedError("Unable to generate unique username")
            username = f"{base}{counter}"
            counter += 1

        return username

    def authenticate(self, email: str, password: str) -> UserPublic:
        """
        Check credentials and return the matching user.

        Raises:
            UnauthorizedError: If the email is unknown or the password is wrong
        """
        user = self.repository.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        return UserPublic.model_validate(user)

    def issue_token(self, user_id: str) -> str:
        """Issue a signed session token valid for one hour."""
        return create_session_token(user_id)

    def verify_token(self, token: Optional[str]) -> Optional[str]:
        """Return the user ID embedded in a valid token, else None."""
        return decode_session_token(token)

    def get_session(self, token: Optional[str]) -> Optional[UserPublic]:
        """
        Resolve a session token to the current user.

        Returns None for an anonymous caller: no token, an invalid or
        expired token, or a token for a user that no longer exists.
        """
        user_id = self.verify_token(token)
        if not user_id:
            return None

        user = self.repository.find_by_id(user_id)
        if not user:
            logger.info(f"Session token references missing user {user_id}")
            return None

        return UserPublic.model_validate(user)
