"""Request and response schemas for Auth API"""

from typing import List, Optional

from pydantic import Field

from docit.api.schemas import CamelModel
from docit.features.auth.domain import GlobalRole, User


class GoogleAuthUrlResponse(CamelModel):
    url: str


class GoogleCallbackRequest(CamelModel):
    code: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class UpdateProfileRequest(CamelModel):
    """Blank name is ignored; blank avatar clears it"""
    name: Optional[str] = Field(default=None, max_length=200)
    avatar: Optional[str] = Field(default=None, max_length=2048)


class UserResponse(CamelModel):
    id: int
    email: str
    name: str
    avatar: Optional[str] = None
    role: GlobalRole

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, email=user.email, name=user.name, avatar=user.avatar_url, role=user.role)


class MeResponse(UserResponse):
    workspaces: List[int] = []


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str
    expires_in: int


class RefreshResponse(CamelModel):
    access_token: str
    expires_in: int
