# backend/app/clients/google.py

import logging
from urllib.parse import urlencode

from pydantic import ValidationError

from app.clients.base import BaseAPIClient
from app.config import Settings
from app.core.exceptions import ExternalAPIException
from app.schemas.auth import GoogleProfile

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthClient(BaseAPIClient):
    """Authorization-code flow against Google's OpenID Connect endpoints."""

    service_name = "google"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 30.0):
        super().__init__(timeout=timeout)
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleOAuthClient":
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_callback_url,
        )

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token."""
        response = await self.request(
            "POST",
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        try:
            token_data = response.json()
        except ValueError as e:
            logger.warning(f"Unreadable Google token response: {e}")
            raise ExternalAPIException(
                detail="Malformed token response", service_name="google"
            ) from e

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise ExternalAPIException(detail="No access token in Google response", service_name="google")
        return access_token

    async def fetch_profile(self, access_token: str) -> GoogleProfile:
        response = await self.request(
            "GET", USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        try:
            return GoogleProfile.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Unreadable Google userinfo response: {e}")
            raise ExternalAPIException(
                detail="Malformed userinfo response", service_name="google"
            ) from e

    async def authenticate(self, code: str) -> GoogleProfile:
        access_token = await self.exchange_code(code)
        profile = await self.fetch_profile(access_token)
        logger.info(f"Google sign-in for subject {profile.sub}")
        return profile
