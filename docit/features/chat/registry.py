"""In-process registry of chat rooms, one per workspace"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from docit.features.chat.domain import CloseCode
from docit.features.chat.session import ChatSession

logger = logging.getLogger(__name__)


class RoomRegistry:
    """
    Maps workspace id to the set of joined sessions.

    Join, leave and broadcast hold the same lock, so a broadcast never sees a
    half-registered or half-removed session and rooms are created on first
    join and dropped on last leave without races.
    """

    def __init__(self):
        self._rooms: Dict[int, Set[ChatSession]] = {}
        self._lock = asyncio.Lock()

    async def join(self, session: ChatSession) -> None:
        async with self._lock:
            self._rooms.setdefault(session.workspace_id, set()).add(session)

    async def leave(self, session: ChatSession) -> None:
        async with self._lock:
            room = self._rooms.get(session.workspace_id)
            if room is None:
                return
            room.discard(session)
            if not room:
                del self._rooms[session.workspace_id]

    async def broadcast(
        self,
        workspace_id: int,
        payload: Dict[str, Any],
        echo_to: Optional[ChatSession] = None,
    ) -> int:
        """
        Deliver to every session in the room except ``echo_to``, then to
        ``echo_to`` itself, as one atomic step.

        Returns:
            Number of other sessions the payload was delivered to
        """
        async with self._lock:
            room = self._rooms.get(workspace_id, set())
            others = [s for s in room if s is not echo_to]
            for session in others:
                session.deliver(payload)
            if echo_to is not None:
                echo_to.deliver(payload)
            return len(others)

    def room_size(self, workspace_id: int) -> int:
        return len(self._rooms.get(workspace_id, ()))

    def room_count(self) -> int:
        return len(self._rooms)

    async def close_all(self) -> None:
        """Clean shutdown: close every joined connection with a normal close"""
        async with self._lock:
            sessions: List[ChatSession] = [s for room in self._rooms.values() for s in room]
            self._rooms.clear()
        for session in sessions:
            await session.aclose()
            try:
                await session.websocket.close(code=int(CloseCode.NORMAL), reason="Server shutting down")
            except Exception as e:
                logger.debug(f"{session!r} already closed: {e}")
        if sessions:
            logger.info(f"Closed {len(sessions)} chat connections on shutdown")


_registry: Optional[RoomRegistry] = None


def get_room_registry() -> RoomRegistry:
    global _registry
    if _registry is None:
        _registry = RoomRegistry()
    return _registry
