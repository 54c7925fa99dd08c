"""
Gatekeeper dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request

from app.core.config import settings
from app.dependencies.database import SessionDep
from app.services.gatekeeper import Gatekeeper
from app.services.loops.access import AccessService


def get_gatekeeper(request: Request) -> Gatekeeper:
    """Build a gatekeeper bound to the shared GitHub connection pool."""
    return Gatekeeper(
        base_url=settings.GITHUB_API_URL,
        timeout=settings.GITHUB_TIMEOUT_SECONDS,
        page_size=settings.GITHUB_PAGE_SIZE,
        http_client=getattr(request.app.state, "github_http", None),
    )


def get_access_service(
    session: SessionDep,
    gatekeeper: Annotated[Gatekeeper, Depends(get_gatekeeper)],
) -> AccessService:
    """Get access service (Dependency Injection)."""
    return AccessService(session, gatekeeper)


AccessServiceDep = Annotated[AccessService, Depends(get_access_service)]
