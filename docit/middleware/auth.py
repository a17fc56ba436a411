"""
JWT Authentication Middleware

FastAPI dependencies that verify the HS256 access tokens issued at sign-in
and resolve the calling user.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from docit.db import get_db
from docit.errors import AuthenticationError
from docit.features.auth.domain import User
from docit.features.auth.repository import UserRepository
from docit.features.auth.tokens import decode_access_token

logger = logging.getLogger(__name__)


def _extract_token(authorization: Optional[str], query_token: Optional[str]) -> str:
    """
    Extract the bearer token from the Authorization header, falling back to
    the ``token`` query parameter (used by download links).
    """
    if authorization:
        try:
            scheme, token = authorization.split(" ", 1)
        except ValueError:
            raise HTTPException(
                status_code=401,
                detail="Invalid authorization header format. Expected 'Bearer <token>'"
            )
        if scheme.lower() != "bearer":
            raise HTTPException(
                status_code=401,
                detail="Invalid authorization scheme. Expected 'Bearer'"
            )
        return token.strip()

    if query_token and query_token.strip():
        return query_token.strip()

    raise HTTPException(status_code=401, detail="Authorization header missing")


async def get_current_user_id(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Query(None, include_in_schema=False),
) -> int:
    """
    FastAPI dependency to extract and verify the access token
    Returns the authenticated user ID
    """
    raw_token = _extract_token(authorization, token)
    try:
        payload = decode_access_token(raw_token)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)
    return payload.user_id


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the authenticated user, rejecting tokens for deleted accounts"""
    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        logger.info(f"Token for unknown user {user_id} rejected")
        raise HTTPException(status_code=401, detail="User not found")
    return user
