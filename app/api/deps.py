"""
app/api/deps.py

Purpose: FastAPI dependencies

- Resolve the service container built at startup
- Overridable in tests through app.dependency_overrides
"""

from fastapi import Request

from app.core.exceptions import RoscaBotError
from app.services.container import ServiceContainer
from app.services.identity_service import IdentityLinker


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RoscaBotError("Services are not initialized", code="SERVICE_UNAVAILABLE", status_code=503)
    return container


def get_linker(request: Request) -> IdentityLinker:
    return get_container(request).linker
