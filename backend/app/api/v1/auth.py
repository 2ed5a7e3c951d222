# backend/app/api/v1/auth.py

import logging
import secrets
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from app.api.deps import SESSION_USER_KEY, get_auth_service, get_current_user, get_google_client
from app.clients.google import GoogleOAuthClient
from app.core.exceptions import PriceScanException, ServiceUnavailableException
from app.models.user import User
from app.schemas.auth import AuthResponse, CurrentUserResponse, UserLogin, UserRegister
from app.schemas.user import UserRead
from app.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_KEY = "oauth_state"
LOGIN_SUCCESS_PATH = "/login/success"
LOGIN_FAILURE_PATH = "/login"


def _login(request: Request, user: User, auth_service: AuthService) -> AuthResponse:
    """Establish the session and issue a bearer token."""
    request.session[SESSION_USER_KEY] = user.id
    return AuthResponse(
        user=UserRead.model_validate(user, from_attributes=True),
        token=auth_service.create_access_token(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
        user_data: UserRegister,
        request: Request,
        auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register new user and log them in."""
    user = await auth_service.register(user_data)
    return _login(request, user, auth_service)


@router.post("/login", response_model=AuthResponse)
async def login(
        user_credentials: UserLogin,
        request: Request,
        auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login user and return a token."""
    user = await auth_service.authenticate_user(
        user_credentials.email, user_credentials.password
    )
    if not user:
        logger.info(f"Failed login for {user_credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _login(request, user, auth_service)


@router.get("/user", response_model=CurrentUserResponse)
async def get_authenticated_user(
        current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    """Get the signed-in user."""
    return CurrentUserResponse(user=UserRead.model_validate(current_user, from_attributes=True))


@router.post("/logout")
async def logout(request: Request) -> dict[str, bool]:
    """End the session. Bearer tokens stay valid until they expire."""
    request.session.clear()
    return {"success": True}


@router.get("/google")
async def google_login(
        request: Request,
        google_client: GoogleOAuthClient = Depends(get_google_client),
) -> RedirectResponse:
    """Redirect to Google's consent screen."""
    if not google_client.configured:
        raise ServiceUnavailableException("Google authentication is not configured")

    state = secrets.token_urlsafe(32)
    request.session[OAUTH_STATE_KEY] = state
    return RedirectResponse(google_client.authorization_url(state), status_code=status.HTTP_302_FOUND)


@router.get("/google/callback")
async def google_callback(
        request: Request,
        code: str = "",
        state: str = "",
        google_client: GoogleOAuthClient = Depends(get_google_client),
        auth_service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Finish Google sign-in, creating the user on first visit."""
    if not google_client.configured:
        raise ServiceUnavailableException("Google authentication is not configured")

    expected_state = request.session.pop(OAUTH_STATE_KEY, None)
    if not code or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Google callback with missing code or mismatched state")
        return RedirectResponse(LOGIN_FAILURE_PATH, status_code=status.HTTP_302_FOUND)

    try:
        profile = await google_client.authenticate(code)
        user = await auth_service.get_or_create_google_user(profile)
    except PriceScanException as e:
        logger.warning(f"Google sign-in failed: {e.detail}")
        return RedirectResponse(LOGIN_FAILURE_PATH, status_code=status.HTTP_302_FOUND)

    auth = _login(request, user, auth_service)
    return RedirectResponse(
        f"{LOGIN_SUCCESS_PATH}?{urlencode({'token': auth.token})}",
        status_code=status.HTTP_302_FOUND,
    )
