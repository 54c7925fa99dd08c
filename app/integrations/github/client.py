"""
GitHub REST API client for reading contribution signals.

Every call is read-only and bounded by a per-call timeout. Listings are
exposed as lazy async page iterators that follow the ``Link: rel="next"``
header, so callers can stop fetching as soon as they have seen enough.
"""

from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_TIMEOUT_SECONDS = 10.0
MAX_PAGE_SIZE = 100


class GitHubClient:
    """Client for interacting with the GitHub REST API on behalf of one user."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub OAuth or personal access token, sent as a bearer token.
            base_url: API root, overridable for GitHub Enterprise.
            timeout: Per-call timeout in seconds.
            http_client: Shared connection pool. When omitted, each call opens
                a short-lived client.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout)
        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "Loop-Gatekeeper/1.0",
            "Authorization": f"Bearer {token}",
        }
        self._http_client = http_client

    async def _get(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """Issue a GET against an API path or an absolute pagination URL."""
        if not url.startswith("http"):
            url = f"{self.base_url}{url}"

        if self._http_client is not None:
            return await self._http_client.get(
                url, params=params, headers=self.headers, timeout=self.timeout
            )

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params, headers=self.headers)

    async def get_repository_by_id(self, repo_id: int) -> Dict[str, Any]:
        """
        Look up a repository by its durable numeric ID.

        Returns:
            Repository data including ``owner.login`` and ``name``.

        Raises:
            httpx.HTTPStatusError: on any non-2xx response.
        """
        response = await self._get(f"/repositories/{repo_id}")
        response.raise_for_status()
        return response.json()

    async def get_collaborator_permission(
        self, owner: str, repo: str, username: str
    ) -> Optional[Dict[str, Any]]:
        """
        Get a user's permission level on a repository.

        Returns:
            The permission payload, or None when GitHub answers 403/404
            (the user is not a collaborator, or the caller may not see the
            collaborator list, which only push-level users can).

        Raises:
            httpx.HTTPStatusError: on any other non-2xx response.
        """
        response = await self._get(
            f"/repos/{owner}/{repo}/collaborators/{username}/permission"
        )
        if response.status_code in (403, 404):
            return None
        response.raise_for_status()
        return response.json()

    async def paginate(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        items_key: Optional[str] = None,
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Yield pages of a listing endpoint lazily.

        Args:
            path: API path of the first page.
            params: Query parameters for the first page. Subsequent pages use
                the ``next`` URL from the Link header, which already carries them.
            items_key: Key holding the list in object-shaped responses
                (``items`` for the search API); None for plain list responses.
        """
        url: Optional[str] = path
        while url:
            response = await self._get(url, params=params)
            response.raise_for_status()
            payload = response.json()
            yield payload[items_key] if items_key else payload

            url = response.links.get("next", {}).get("url")
            params = None

    def search_merged_pull_requests(
        self, owner: str, repo: str, author: str, per_page: int = MAX_PAGE_SIZE
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """Pages of merged pull requests authored by ``author``."""
        query = f"repo:{owner}/{repo} is:pr is:merged author:{author}"
        return self.paginate(
            "/search/issues",
            params={"q": query, "per_page": per_page},
            items_key="items",
        )

    def list_commits(
        self, owner: str, repo: str, author: str, per_page: int = MAX_PAGE_SIZE
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """Pages of default-branch commits authored by ``author``."""
        return self.paginate(
            f"/repos/{owner}/{repo}/commits",
            params={"author": author, "per_page": per_page},
        )

    def list_issues(
        self, owner: str, repo: str, creator: str, per_page: int = MAX_PAGE_SIZE
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Pages of issues created by ``creator``, open and closed.

        GitHub includes pull requests in this listing; they carry a
        ``pull_request`` key and are left for the caller to filter.
        """
        return self.paginate(
            f"/repos/{owner}/{repo}/issues",
            params={"creator": creator, "state": "all", "per_page": per_page},
        )
