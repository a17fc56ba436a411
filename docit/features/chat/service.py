"""Chat room manager: join, message relay and leave for workspace rooms"""

import logging
from typing import Callable, Optional, Union

from docit.db import SessionLocal
from docit.errors import AuthenticationError
from docit.features.auth.repository import UserRepository
from docit.features.auth.tokens import TokenPayload, decode_access_token
from docit.features.chat.domain import (
    HISTORY_LIMIT,
    CloseCode,
    error_event,
    joined_event,
    parse_incoming,
)
from docit.features.chat.registry import RoomRegistry, get_room_registry
from docit.features.chat.repository import ChatMessageRepository, UNKNOWN_USER
from docit.features.chat.session import ChatSession
from docit.features.workspaces.policy import Capability, can
from docit.features.workspaces.repository import WorkspaceRepository

logger = logging.getLogger(__name__)


def parse_workspace_id(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    raw = raw.strip()
    if not raw.isdigit():
        return None
    value = int(raw)
    return value if value > 0 else None


class ChatRoomManager:
    """
    Drives one WebSocket through Connecting -> Joined -> Closed.

    The connection is authorized once at join time and treated as
    pre-authorized for the rest of its life.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        session_factory=SessionLocal,
        decode_token: Callable[[str], TokenPayload] = decode_access_token,
    ):
        self.registry = registry
        self.session_factory = session_factory
        self.decode_token = decode_token

    async def connect(self, websocket, token: Optional[str], workspace_id: Optional[str]) -> None:
        """Accept, join, then relay messages until the peer disconnects"""
        await websocket.accept()
        session = await self.join(websocket, token, workspace_id)
        if session is None:
            return
        try:
            await self.receive_loop(session)
        finally:
            await self.leave(session)

    async def join(self, websocket, token: Optional[str], raw_workspace_id: Optional[str]) -> Optional[ChatSession]:
        """
        Authorize the connection and register it in its room.

        On success the ``joined`` event with the replay history has been sent
        and the session's writer is running. A message broadcast between
        registration and the history query reaches the client once, inside the
        history. On failure the socket has been closed with the matching close
        code and None is returned.
        """
        token = (token or "").strip()
        workspace_id = parse_workspace_id(raw_workspace_id)
        if not token or workspace_id is None:
            await self._reject(websocket, CloseCode.INVALID_PARAMS, "Missing or invalid token or workspaceId")
            return None

        try:
            identity = self.decode_token(token)
        except AuthenticationError:
            await self._reject(websocket, CloseCode.INVALID_TOKEN, "Invalid token")
            return None

        session: Optional[ChatSession] = None
        try:
            async with self.session_factory() as db:
                role = await WorkspaceRepository(db).get_member_role(workspace_id, identity.user_id)
                if not can(role, Capability.READ):
                    await self._reject(websocket, CloseCode.NO_ACCESS, "Not a member of this workspace")
                    return None

                user = await UserRepository(db).get_by_id(identity.user_id)
                if user is None:
                    await self._reject(websocket, CloseCode.USER_NOT_FOUND, "User not found")
                    return None

                session = ChatSession(websocket, workspace_id, user.id, user.name or UNKNOWN_USER)
                # Broadcasts arriving from here on wait in the outbox until after "joined"
                await self.registry.join(session)
                history = await ChatMessageRepository(db).recent(workspace_id, HISTORY_LIMIT)

            await websocket.send_json(joined_event(history))
            if history:
                session.drop_replayed(max(m.id for m in history))
            session.start_writer()
        except Exception as e:
            logger.error(f"Workspace chat join error for workspace {workspace_id}: {e}", exc_info=True)
            if session is not None:
                await self.leave(session)
            await self._reject(websocket, CloseCode.SERVER_ERROR, "Server error")
            return None

        logger.info(f"Workspace chat: user {session.user_id} joined workspace {workspace_id}")
        return session

    async def receive_loop(self, session: ChatSession) -> None:
        """Process incoming frames in arrival order until disconnect"""
        while True:
            message = await session.websocket.receive()
            if message.get("type") == "websocket.disconnect":
                break
            raw: Union[str, bytes, None] = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            await self.handle_incoming(session, raw)

    async def handle_incoming(self, session: ChatSession, raw: Union[str, bytes, None]) -> None:
        """Persist a valid message, then broadcast it and echo it to the sender"""
        text = parse_incoming(raw)
        if text is None:
            return

        try:
            async with self.session_factory() as db:
                message = await ChatMessageRepository(db).create(
                    session.workspace_id, session.user_id, session.user_name, text
                )
        except Exception as e:
            logger.error(f"Workspace chat save message error in workspace {session.workspace_id}: {e}")
            session.deliver(error_event("Failed to send"))
            return

        await self.registry.broadcast(session.workspace_id, message.to_event(), echo_to=session)

    async def leave(self, session: ChatSession) -> None:
        await self.registry.leave(session)
        await session.aclose()
        logger.info(f"Workspace chat: user {session.user_id} left workspace {session.workspace_id}")

    @staticmethod
    async def _reject(websocket, code: CloseCode, reason: str) -> None:
        logger.info(f"Workspace chat connection rejected ({int(code)}): {reason}")
        try:
            await websocket.close(code=int(code), reason=reason)
        except RuntimeError as e:
            logger.debug(f"Socket already closed: {e}")


_manager: Optional[ChatRoomManager] = None


def get_chat_manager() -> ChatRoomManager:
    global _manager
    if _manager is None:
        _manager = ChatRoomManager(get_room_registry())
    return _manager
