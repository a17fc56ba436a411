"""SQLAlchemy repository for workspace chat messages"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docit.db.models.chat_message import WorkspaceChatMessage as ChatMessageORM
from docit.db.models.user import User as UserORM
from docit.features.chat.domain import HISTORY_LIMIT, ChatMessage

UNKNOWN_USER = "Unknown"


class ChatMessageRepository:
    """Repository for chat message operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, workspace_id: int, user_id: int, user_name: str, text: str) -> ChatMessage:
        row = ChatMessageORM(workspace_id=workspace_id, user_id=user_id, text=text)
        self.db.add(row)
        await self.db.commit()
        return ChatMessage(
            id=row.id,
            workspace_id=row.workspace_id,
            user_id=row.user_id,
            user_name=user_name,
            text=row.text,
            created_at=row.created_at,
        )

    async def recent(self, workspace_id: int, limit: int = HISTORY_LIMIT) -> List[ChatMessage]:
        """The last ``limit`` messages, oldest first"""
        stmt = (
            select(ChatMessageORM, UserORM.name)
            .outerjoin(UserORM, UserORM.id == ChatMessageORM.user_id)
            .where(ChatMessageORM.workspace_id == workspace_id)
            .order_by(ChatMessageORM.created_at.desc(), ChatMessageORM.id.desc())
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).all()
        messages = [
            ChatMessage(
                id=row.id,
                workspace_id=row.workspace_id,
                user_id=row.user_id,
                user_name=name or UNKNOWN_USER,
                text=row.text,
                created_at=row.created_at,
            )
            for row, name in rows
        ]
        messages.reverse()
        return messages
