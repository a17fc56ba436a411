import logging
import os

from docit import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from docit import __version__  # noqa: E402
from docit.api.base import api_router  # noqa: E402
from docit.api.errors import register_exception_handlers  # noqa: E402
from docit.db import init_models  # noqa: E402
from docit.db.session import engine  # noqa: E402
from docit.features.chat.registry import get_room_registry  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.getenv("DB_AUTO_CREATE", "false").lower() == "true":
        await init_models()
    logger.info(f"DocIt API {__version__} started")
    yield
    await get_room_registry().close_all()
    await engine.dispose()
    logger.info("DocIt API stopped")


app = FastAPI(
    title="DocIt API",
    description="Backend API for DocIt - shared document workspaces with AI summaries and chat",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGIN,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


register_exception_handlers(app)

# Include all API routes
app.include_router(api_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "docit-api", "version": __version__}
