"""SQLAlchemy repository for users"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docit.db.models.user import User as UserORM, UserWorkspace as UserWorkspaceORM
from docit.features.auth.domain import GoogleProfile, User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> Optional[User]:
        orm_user = await self.db.get(UserORM, user_id)
        return User.model_validate(orm_user) if orm_user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(UserORM).where(UserORM.email == email.strip().lower())
        orm_user = (await self.db.execute(stmt)).scalar_one_or_none()
        return User.model_validate(orm_user) if orm_user else None

    async def get_workspace_ids(self, user_id: int) -> List[int]:
        """Return the user's denormalized workspace list"""
        stmt = (
            select(UserWorkspaceORM.workspace_id)
            .where(UserWorkspaceORM.user_id == user_id)
            .order_by(UserWorkspaceORM.id)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def upsert_from_google(self, profile: GoogleProfile) -> User:
        """
        Find or create a user from a Google profile.

        Lookup order: Google ID, then email (links the Google account),
        then create a new viewer.
        """
        stmt = select(UserORM).where(UserORM.google_id == profile.id)
        orm_user = (await self.db.execute(stmt)).scalar_one_or_none()

        if orm_user is None:
            stmt = select(UserORM).where(UserORM.email == profile.email)
            orm_user = (await self.db.execute(stmt)).scalar_one_or_none()
            if orm_user is not None:
                orm_user.google_id = profile.id

        if orm_user is not None:
            orm_user.name = profile.name
            orm_user.avatar_url = profile.picture
        else:
            orm_user = UserORM(
                email=profile.email,
                name=profile.name,
                google_id=profile.id,
                avatar_url=profile.picture,
                role="viewer",
            )
            self.db.add(orm_user)
            logger.info(f"New user created via Google: {profile.email}")

        await self.db.commit()
        return User.model_validate(orm_user)

    async def update_profile(
        self,
        user_id: int,
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        clear_avatar: bool = False,
    ) -> Optional[User]:
        orm_user = await self.db.get(UserORM, user_id)
        if orm_user is None:
            return None
        if name is not None:
            orm_user.name = name
        if clear_avatar:
            orm_user.avatar_url = None
        elif avatar_url is not None:
            orm_user.avatar_url = avatar_url
        await self.db.commit()
        return User.model_validate(orm_user)
