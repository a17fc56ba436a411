"""Auth API endpoints"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from docit.api.schemas import ApiResponse
from docit.db import get_db
from docit.features.auth.domain import User
from docit.features.auth.google import GoogleOAuthClient, get_google_client
from docit.features.auth.schemas import (
    AuthResponse,
    GoogleAuthUrlResponse,
    GoogleCallbackRequest,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    UpdateProfileRequest,
    UserResponse,
)
from docit.features.auth.service import AuthService
from docit.middleware.auth import get_current_user

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/google", response_model=ApiResponse[GoogleAuthUrlResponse])
async def get_google_auth_url(google: GoogleOAuthClient = Depends(get_google_client)):
    """Google consent URL for the frontend to redirect to"""
    return ApiResponse(data=GoogleAuthUrlResponse(url=google.authorization_url()))


@router.post("/google/callback", response_model=ApiResponse[AuthResponse])
async def google_callback(
    request: GoogleCallbackRequest,
    db: AsyncSession = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client),
):
    """Exchange the authorization code, create or update the user and issue tokens"""
    user, tokens = await AuthService(db).sign_in_with_google(request.code, google)
    return ApiResponse(data=AuthResponse(
        user=UserResponse.from_user(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    ))


@router.post("/refresh", response_model=ApiResponse[RefreshResponse])
async def refresh_token(request: RefreshRequest, db: AsyncSession = Depends(get_db)):
    access_token, expires_in = await AuthService(db).refresh(request.refresh_token)
    return ApiResponse(data=RefreshResponse(access_token=access_token, expires_in=expires_in))


@router.get("/me", response_model=ApiResponse[MeResponse])
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    workspaces = await AuthService(db).workspace_ids(user.id)
    base = UserResponse.from_user(user)
    return ApiResponse(data=MeResponse(**base.model_dump(), workspaces=workspaces))


@router.patch("/me", response_model=ApiResponse[UserResponse])
async def update_me(
    request: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await AuthService(db).update_profile(user.id, request.name, request.avatar)
    return ApiResponse(data=UserResponse.from_user(updated))
