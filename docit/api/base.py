from fastapi import APIRouter

from docit.api import health
from docit.features.auth import api as auth
from docit.features.chat import api as chat
from docit.features.documents import api as documents
from docit.features.notifications import api as notifications
from docit.features.webhooks import api as webhooks
from docit.features.workspaces import api as workspaces

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(workspaces.router)
api_router.include_router(webhooks.router)
api_router.include_router(documents.router)
api_router.include_router(notifications.router)
api_router.include_router(chat.router)
