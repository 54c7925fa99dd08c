"""Collaborator bypass check."""

import httpx

from app.integrations.github import GitHubClient
from app.services.gatekeeper.errors import GatekeeperError
from app.services.gatekeeper.types import RepositoryCoordinates

# Repository roles that count as "already contributing".
COLLABORATOR_PERMISSIONS = frozenset({"admin", "maintain", "write"})


async def is_collaborator(
    client: GitHubClient, coordinates: RepositoryCoordinates, username: str
) -> bool:
    """
    Check whether ``username`` holds write-level access or above.

    Raises:
        GatekeeperError: when GitHub could not answer. Callers treat this as
            "not a collaborator" so a failed check never grants access.
    """
    try:
        data = await client.get_collaborator_permission(
            coordinates.owner, coordinates.name, username
        )
    except (httpx.HTTPError, ValueError) as e:
        raise GatekeeperError(
            f"Collaborator check failed for {username} on {coordinates.full_name}: {e}",
            code="COLLABORATOR_CHECK_FAILED",
        ) from e

    if not data:
        return False
    if not isinstance(data, dict):
        raise GatekeeperError(
            f"Collaborator check for {username} on {coordinates.full_name} "
            "returned an unexpected payload",
            code="COLLABORATOR_CHECK_FAILED",
        )

    if data.get("permission") in COLLABORATOR_PERMISSIONS:
        return True

    # Fine-grained roles (e.g. custom org roles) only show up in user.permissions.
    user = data.get("user")
    permissions = user.get("permissions") if isinstance(user, dict) else None
    if not isinstance(permissions, dict):
        return False
    return bool(
        permissions.get("admin") or permissions.get("maintain") or permissions.get("push")
    )
