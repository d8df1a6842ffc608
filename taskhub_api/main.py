"""
TaskHub API Server

Multi-user task tracking over two transports that share one set of
operations: a cookie-authenticated REST API and a WebSocket channel that
pushes every change to the owner's live connections.

Usage:
    taskhub serve
    # or
    uvicorn taskhub_api.main:create_app --factory --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from taskhub_api.channel import router as channel_router
from taskhub_api.errors import install_error_handlers
from taskhub_api.routes.auth import router as auth_router
from taskhub_api.routes.files import router as files_router
from taskhub_api.routes.tasks import router as tasks_router
from taskhub_api.store import Services, build_services
from taskhub_core import __version__
from taskhub_core.config import Settings, load_settings
from taskhub_core.constants import UPLOAD_URL_PREFIX

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare storage on startup, release it on shutdown."""
    services: Services = app.state.services
    services.attachments.blobs.ensure()
    await services.db.init()
    logger.info("TaskHub API ready (env=%s)", services.settings.env)
    yield
    await services.db.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build an app with its own services. Settings default to load_settings()."""
    settings = settings or load_settings()

    app = FastAPI(
        title="TaskHub API",
        description=(
            "Owner-scoped tasks with file attachments.\n\n"
            "**REST**: cookie-authenticated CRUD under `/auth`, `/tasks`, `/files`.\n\n"
            "**Channel**: WebSocket at `/ws` with `tasks:*` commands and change events."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = build_services(settings)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    install_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────

    app.include_router(auth_router)
    app.include_router(tasks_router)
    app.include_router(files_router)
    app.include_router(channel_router)

    # blobs are immutable once written; a removed blob is a plain 404
    app.mount(
        UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    # ── Health ───────────────────────────────────────────────────────────────

    @app.get("/health", tags=["meta"])
    def health():
        """Liveness check."""
        return {
            "status": "ok",
            "service": "taskhub-api",
            "subscribers": app.state.services.broadcaster.subscriber_count(),
        }

    @app.get("/", tags=["meta"])
    def root():
        """API info."""
        return {
            "service": "TaskHub API",
            "version": __version__,
            "docs": "/docs",
            "endpoints": {
                "auth": {
                    "register": "POST /auth/register",
                    "login":    "POST /auth/login",
                    "logout":   "POST /auth/logout",
                    "me":       "GET  /auth/me",
                },
                "tasks": {
                    "list":   "GET    /tasks",
                    "get":    "GET    /tasks/{id}",
                    "create": "POST   /tasks",
                    "update": "PUT    /tasks/{id}",
                    "delete": "DELETE /tasks/{id}",
                },
                "files": {
                    "delete": "DELETE /files/{id}",
                    "serve":  f"GET    {UPLOAD_URL_PREFIX}/{{name}}",
                },
                "channel": "WS /ws",
            },
        }

    return app
