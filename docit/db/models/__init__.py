"""SQLAlchemy ORM models"""

from docit.db.models.user import User, UserWorkspace
from docit.db.models.workspace import Workspace, WorkspaceMember
from docit.db.models.document import Document
from docit.db.models.notification import Notification
from docit.db.models.webhook import Webhook
from docit.db.models.chat_message import WorkspaceChatMessage

__all__ = [
    "User",
    "UserWorkspace",
    "Workspace",
    "WorkspaceMember",
    "Document",
    "Notification",
    "Webhook",
    "WorkspaceChatMessage",
]
