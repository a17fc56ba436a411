"""JWT issuance and verification (HS256 via python-jose)"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from pydantic import BaseModel

from docit import config
from docit.errors import AuthenticationError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenPayload(BaseModel):
    """Identity carried by a verified access token"""
    user_id: int
    email: Optional[str] = None
    role: Optional[str] = None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int  # seconds


def create_access_token(user_id: int, email: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(minutes=config.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(claims, config.get_jwt_secret(), algorithm=config.JWT_ALGORITHM)


def create_refresh_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "type": REFRESH_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(days=config.JWT_REFRESH_EXPIRES_DAYS),
    }
    return jwt.encode(claims, config.get_jwt_refresh_secret(), algorithm=config.JWT_ALGORITHM)


def issue_tokens(user_id: int, email: str, role: str) -> TokenPair:
    """Generate an access/refresh token pair for a user"""
    return TokenPair(
        access_token=create_access_token(user_id, email, role),
        refresh_token=create_refresh_token(user_id),
        expires_in=config.JWT_EXPIRES_MINUTES * 60,
    )


def _subject_to_user_id(payload: dict) -> int:
    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token: no user ID", code="INVALID_TOKEN")


def decode_access_token(token: str) -> TokenPayload:
    """
    Verify an access token and return its identity.

    Raises:
        AuthenticationError: If the token is malformed, expired or not an access token
    """
    try:
        payload = jwt.decode(token, config.get_jwt_secret(), algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired", code="INVALID_TOKEN")
    except JWTError as e:
        logger.debug(f"Access token rejected: {e}")
        raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise AuthenticationError("Invalid token type", code="INVALID_TOKEN")

    return TokenPayload(
        user_id=_subject_to_user_id(payload),
        email=payload.get("email"),
        role=payload.get("role"),
    )


def decode_refresh_token(token: str) -> int:
    """Verify a refresh token and return the user ID"""
    try:
        payload = jwt.decode(
            token, config.get_jwt_refresh_secret(), algorithms=[config.JWT_ALGORITHM]
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired refresh token", code="INVALID_TOKEN")

    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise AuthenticationError("Invalid refresh token", code="INVALID_TOKEN")
    return _subject_to_user_id(payload)
