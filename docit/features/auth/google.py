"""Google OAuth 2.0 authorization-code flow over httpx"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from docit import config
from docit.errors import AuthenticationError, UpstreamError
from docit.features.auth.domain import GoogleProfile

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ["openid", "email", "profile"]


class GoogleOAuthClient:
    """Builds the consent URL and turns an authorization code into a profile"""

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id or config.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or config.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or config.GOOGLE_REDIRECT_URI
        self.transport = transport

    def authorization_url(self) -> str:
        if not self.client_id:
            raise ValueError("GOOGLE_CLIENT_ID must be set")
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """
        Exchange the code for tokens and read the user's profile.

        Raises:
            AuthenticationError: Google rejected the code or the profile has no email
            UpstreamError: Google could not be reached
        """
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self.transport) as client:
                token_response = await client.post(GOOGLE_TOKEN_URL, data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                })
                if token_response.status_code >= 500:
                    raise UpstreamError("Google sign-in is unavailable", code="OAUTH_ERROR")
                if token_response.status_code != 200:
                    logger.warning(f"Google code exchange rejected: {token_response.status_code}")
                    raise AuthenticationError("Google sign-in failed", code="AUTH_FAILED")

                access_token = token_response.json().get("access_token")
                userinfo_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                if userinfo_response.status_code != 200:
                    logger.warning(f"Google userinfo failed: {userinfo_response.status_code}")
                    raise AuthenticationError("Google sign-in failed", code="AUTH_FAILED")
                info = userinfo_response.json()
        except httpx.HTTPError as e:
            logger.error(f"Google OAuth request failed: {e}")
            raise UpstreamError("Google sign-in is unavailable", code="OAUTH_ERROR")

        email = info.get("email")
        if not email:
            raise AuthenticationError("Google profile missing email", code="AUTH_FAILED")
        email = email.strip().lower()
        return GoogleProfile(
            id=str(info.get("sub")),
            email=email,
            name=info.get("name") or email,
            picture=info.get("picture"),
        )


def get_google_client() -> GoogleOAuthClient:
    """FastAPI dependency"""
    return GoogleOAuthClient()
