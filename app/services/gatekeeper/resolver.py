"""
Repository identity resolution.

Loops store the durable numeric GitHub repository ID, never the owner/name
string. Repositories can be renamed or transferred, so coordinates are
re-resolved from the ID on every verification.
"""

import httpx

from app.core.logging import get_logger
from app.integrations.github import GitHubClient
from app.services.gatekeeper.errors import MissingCredential, RepositoryUnresolvable
from app.services.gatekeeper.types import RepositoryCoordinates

logger = get_logger(__name__)


async def resolve_repository(
    client: GitHubClient, repo_id: int
) -> RepositoryCoordinates:
    """
    Resolve the current owner/name of a repository from its durable ID.

    Raises:
        MissingCredential: GitHub rejected the access token (401).
        RepositoryUnresolvable: the repository is deleted, inaccessible to
            the token, or the lookup failed or timed out.
    """
    try:
        data = await client.get_repository_by_id(repo_id)
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        if status == 401:
            raise MissingCredential("GitHub rejected the access token") from e
        raise RepositoryUnresolvable(repo_id, f"GitHub returned {status}") from e
    except httpx.TimeoutException as e:
        raise RepositoryUnresolvable(repo_id, "lookup timed out") from e
    except httpx.HTTPError as e:
        raise RepositoryUnresolvable(repo_id, str(e)) from e
    except ValueError as e:
        raise RepositoryUnresolvable(repo_id, "response is not valid JSON") from e

    if not isinstance(data, dict):
        raise RepositoryUnresolvable(repo_id, "response is not a JSON object")

    owner = data.get("owner")
    owner = owner.get("login") if isinstance(owner, dict) else None
    name = data.get("name")
    if not owner or not name:
        raise RepositoryUnresolvable(repo_id, "response is missing owner or name")

    coordinates = RepositoryCoordinates(owner=owner, name=name)
    logger.debug("Resolved repository %s -> %s", repo_id, coordinates.full_name)
    return coordinates
