"""One live chat connection and its outbound queue"""

import asyncio
import logging
from contextlib import suppress
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ChatSession:
    """
    A joined WebSocket bound to one (workspace, user) pair for its lifetime.

    Outbound events go through an outbox drained by a single writer task, so
    the connection receives them in exactly the order they were delivered.
    Delivery to a closed session is a no-op.
    """

    def __init__(self, websocket, workspace_id: int, user_id: int, user_name: str):
        self.websocket = websocket
        self.workspace_id = workspace_id
        self.user_id = user_id
        self.user_name = user_name
        self.closed = False
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"<ChatSession(workspace_id={self.workspace_id}, user_id={self.user_id})>"

    def deliver(self, payload: Dict[str, Any]) -> None:
        if self.closed:
            return
        self._outbox.put_nowait(payload)

    def drop_replayed(self, last_history_id: int) -> int:
        """
        Discard queued message events already included in the join history.

        Only valid before the writer starts. Returns the number dropped.
        """
        pending = []
        while not self._outbox.empty():
            pending.append(self._outbox.get_nowait())
            self._outbox.task_done()
        dropped = 0
        for payload in pending:
            if payload.get("type") == "message" and payload.get("id", 0) <= last_history_id:
                dropped += 1
                continue
            self._outbox.put_nowait(payload)
        return dropped

    def start_writer(self) -> None:
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    async def flush(self) -> None:
        """Wait until every delivered event has been written"""
        await self._outbox.join()

    async def aclose(self) -> None:
        self.closed = True
        if self._writer is not None and not self._writer.done():
            self._writer.cancel()
            with suppress(asyncio.CancelledError):
                await self._writer

    async def _drain(self) -> None:
        while True:
            payload = await self._outbox.get()
            try:
                if not self.closed:
                    await self.websocket.send_json(payload)
            except Exception as e:
                # Peer went away; the receive loop will observe the disconnect
                logger.debug(f"{self!r} send failed: {e}")
                self.closed = True
            finally:
                self._outbox.task_done()
