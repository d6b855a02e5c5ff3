from __future__ import annotations

from fastapi import Request

from .workspace import Workspace


def get_workspace(request: Request) -> Workspace:
    """Dependency returning the workspace created in the app lifespan."""
    return request.app.state.workspace
