"""Business logic for sign-in, token refresh and profile updates"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from docit import config
from docit.errors import AuthenticationError, NotFoundError
from docit.features.auth.domain import User
from docit.features.auth.google import GoogleOAuthClient
from docit.features.auth.repository import UserRepository
from docit.features.auth.tokens import (
    TokenPair,
    create_access_token,
    decode_refresh_token,
    issue_tokens,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Service layer for authentication"""

    def __init__(self, db: AsyncSession):
        self.users = UserRepository(db)

    async def sign_in_with_google(self, code: str, google: GoogleOAuthClient) -> Tuple[User, TokenPair]:
        profile = await google.fetch_profile(code)
        user = await self.users.upsert_from_google(profile)
        logger.info(f"User {user.id} signed in with Google")
        return user, issue_tokens(user.id, user.email, user.role.value)

    async def refresh(self, refresh_token: str) -> Tuple[str, int]:
        """Returns a new access token and its lifetime in seconds"""
        user_id = decode_refresh_token(refresh_token)
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise AuthenticationError("User not found", code="INVALID_TOKEN")
        access_token = create_access_token(user.id, user.email, user.role.value)
        return access_token, config.JWT_EXPIRES_MINUTES * 60

    async def workspace_ids(self, user_id: int) -> List[int]:
        return await self.users.get_workspace_ids(user_id)

    async def update_profile(self, user_id: int, name: Optional[str], avatar: Optional[str]) -> User:
        clean_name = name.strip() if name is not None else None
        clean_avatar = avatar.strip() if avatar is not None else None
        user = await self.users.update_profile(
            user_id,
            name=clean_name or None,
            avatar_url=clean_avatar or None,
            clear_avatar=avatar is not None and not clean_avatar,
        )
        if user is None:
            raise NotFoundError("User not found")
        return user
