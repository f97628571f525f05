import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from app.api.deps import get_auth_service, get_current_user
from app.config import get_settings
from app.schemas.user import LoginRequest, UserPublic
from app.services.auth_service import AuthService
from app.utils.exceptions import (
    DuplicateResourceError,
    InternalFailureError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

# Mounted under /api/v1 in app.main
REGISTER_PATH = f"/api/v1{router.prefix}/register"


def register_cors_headers(origin: Optional[str]) -> Dict[str, str]:
    """
    CORS headers for the registration endpoint.

    The request origin is echoed back only when it is on the allow-list;
    any other caller gets the canonical frontend origin.
    """
    settings = get_settings()
    if origin and origin in settings.CORS_ALLOWED_ORIGINS:
        allow_origin = origin
    else:
        allow_origin = settings.CORS_DEFAULT_ORIGIN

    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Credentials": "true",
    }


@router.options(
    "/register",
    include_in_schema=False
)
def register_preflight(request: Request):
    """Answer CORS preflight for registration."""
    return Response(
        status_code=status.HTTP_200_OK,
        headers=register_cors_headers(request.headers.get("origin"))
    )


async def read_json_body(request: Request) -> Any:
    """Decode the request body, or return None when it is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.post(
    "/register",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="""
    Create an account from name, email and password.

    The username is derived from the email local part, with a numeric
    suffix when it is already taken. Malformed bodies, validation failures
    and duplicate emails return 400.
    """,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"example": {
                "name": "Ada Lovelace",
                "email": "ada@stockly.io",
                "password": "secret123"
            }}}
        }
    }
)
def register(
    request: Request,
    payload: Any = Depends(read_json_body),
    service: AuthService = Depends(get_auth_service)
):
    """
    Register a user.

    - **name**: Display name (required)
    - **email**: Login email, must be unused (required)
    - **password**: At least 6 characters (required)
    """
    headers = register_cors_headers(request.headers.get("origin"))

    try:
        if not isinstance(payload, dict):
            raise ValidationError(
                "Validation failed",
                details=[{"field": "body", "message": "Body must be a JSON object"}]
            )
        user = service.register(
            name=payload.get("name"),
            email=payload.get("email"),
            password=payload.get("password"),
        )
    except (ValidationError, DuplicateResourceError) as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": e.message, "details": e.details},
            headers=headers
        )
    except Exception:
        logger.exception("Error registering user")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
            headers=headers
        )

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=user.model_dump(mode="json"),
        headers=headers
    )


@router.post(
    "/login",
    response_model=UserPublic,
    summary="Open a session",
    description="Check credentials and set the session cookie (valid for one hour)."
)
def login(
    credentials: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service)
):
    """Log in with email and password."""
    try:
        user = service.authenticate(credentials.email, credentials.password)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message
        )

    try:
        token = service.issue_token(user.id)
    except InternalFailureError:
        logger.exception(f"Could not issue session for user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )

    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.TOKEN_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    logger.info(f"User {user.id} logged in")

    return user


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Close the session",
    description="""
    Delete the session cookie.

    Tokens are not revoked server-side: a copied token stays valid until
    it expires.
    """
)
def logout():
    """Log out by clearing the session cookie."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME)
    return response


@router.get(
    "/session",
    response_model=UserPublic,
    summary="Current session",
    description="Return the user behind the session cookie, or 401 when there is none."
)
def get_session(
    user: Optional[UserPublic] = Depends(get_current_user)
):
    """Get the logged-in user."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user
