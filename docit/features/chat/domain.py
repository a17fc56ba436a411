"""Domain models and wire events for workspace chat"""

import json
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

HISTORY_LIMIT = 50
MAX_MESSAGE_LENGTH = 2000


class CloseCode(IntEnum):
    """WebSocket close codes, one per join failure reason"""
    NORMAL = 1000
    INVALID_PARAMS = 4000
    INVALID_TOKEN = 4001
    USER_NOT_FOUND = 4002
    NO_ACCESS = 4003
    SERVER_ERROR = 4010


class ChatMessage(BaseModel):
    """Persisted chat message with the author's display name"""
    id: int
    workspace_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime

    def to_history_item(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "text": self.text,
            "createdAt": self.created_at.isoformat(),
        }

    def to_event(self) -> Dict[str, Any]:
        return {"type": "message", **self.to_history_item()}


def joined_event(history: list) -> Dict[str, Any]:
    return {"type": "joined", "history": [m.to_history_item() for m in history]}


def error_event(message: str) -> Dict[str, Any]:
    return {"type": "error", "message": message}


def parse_incoming(raw: Union[str, bytes, None]) -> Optional[str]:
    """
    Return the text of a valid client message event, or None.

    Only {"type": "message", "text": <non-empty string>} is accepted. Text is
    trimmed and capped at MAX_MESSAGE_LENGTH characters.
    """
    if raw is None:
        return None
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(body, dict) or body.get("type") != "message":
        return None
    text = body.get("text")
    if not isinstance(text, str):
        return None
    text = text.strip()[:MAX_MESSAGE_LENGTH]
    return text or None
