from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import get_basic_auth_dependency
from .errors import WorkflowError
from .routers import kanban as kanban_router
from .routers import notes as notes_router
from .routers import settings as settings_router
from .routers import sync as sync_router
from .routers import timesheet as timesheet_router
from .routers import views as views_router
from .settings import Settings, get_settings
from .workspace import Workspace

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "views", "description": "Which of the four views is active."},
    {"name": "timesheet", "description": "Weekly hours per project, Monday to Friday."},
    {"name": "kanban", "description": "Task board with todo, doing and done columns and task drafts."},
    {"name": "notes", "description": "Notepad with AI text improvement and task extraction."},
    {"name": "settings", "description": "Google Drive credentials, session and auto-save switch."},
    {"name": "sync", "description": "Manual save/load, auto-save status and local backup download."},
]


# PUBLIC_INTERFACE
def configure_logging(settings: Settings) -> None:
    """Configure root logging once from LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The workspace (state, sync orchestrator and editors) is created in the
    lifespan so that its timers run on the server's event loop.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        workspace = Workspace(settings)
        app.state.workspace = workspace
        await workspace.start()
        try:
            yield
        finally:
            await workspace.stop()
            logger.info("Workspace stopped")

    app = FastAPI(
        title="WorkFlow Backend",
        description="Timesheet, kanban board and notepad with Google Drive backup and AI assistance.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(WorkflowError)
    async def workflow_exception_handler(request: Request, exc: WorkflowError) -> JSONResponse:
        """Map domain errors to their HTTP status with the same envelope."""
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message, "detail": exc.message},
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {
            "message": "Healthy",
            "backend": settings.persistence_backend,
            "remote": settings.remote_backend,
        }

    guard = [Depends(get_basic_auth_dependency(settings))]
    for module in (views_router, timesheet_router, kanban_router, notes_router, settings_router, sync_router):
        app.include_router(module.router, dependencies=guard)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.workflow.main:app", host="0.0.0.0", port=8000, reload=False, log_level="info")
