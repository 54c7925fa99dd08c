"""
Criterion evaluators.

One evaluator per CriteriaType. Each counts a user's contributions of one kind
on the resolved repository, paginating lazily and stopping as soon as the
count reaches the rule's threshold (``cap``). Counts above the threshold are
therefore reported as exactly ``cap``; the decision only needs "met or not".
"""

from contextlib import aclosing
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

import httpx

from app.integrations.github import GitHubClient
from app.integrations.github.client import MAX_PAGE_SIZE
from app.services.gatekeeper.errors import RuleEvaluationFailed
from app.services.gatekeeper.types import CriteriaType, RepositoryCoordinates

Page = List[Dict[str, Any]]
Evaluator = Callable[
    [GitHubClient, RepositoryCoordinates, str, int, int], Awaitable[int]
]


async def count_bounded(
    pages: AsyncIterator[Page],
    cap: int,
    predicate: Optional[Callable[[Dict[str, Any]], bool]] = None,
) -> int:
    """
    Count items across pages, stopping once ``cap`` is reached.

    Args:
        pages: Lazy page sequence. It is closed on early exit so no further
            page is requested.
        cap: Count at which to stop. Values <= 0 return 0 without fetching.
        predicate: Optional filter; only matching items are counted.

    Returns:
        ``cap`` if at least ``cap`` items matched, else the exact total.
    """
    if cap <= 0:
        return 0

    count = 0
    async with aclosing(pages):
        async for page in pages:
            for item in page:
                if predicate is None or predicate(item):
                    count += 1
                    if count >= cap:
                        return cap
    return count


def _page_size(cap: int, page_size: int) -> int:
    return max(1, min(cap, page_size, MAX_PAGE_SIZE))


async def count_merged_pull_requests(
    client: GitHubClient,
    coordinates: RepositoryCoordinates,
    username: str,
    cap: int,
    page_size: int = MAX_PAGE_SIZE,
) -> int:
    pages = client.search_merged_pull_requests(
        coordinates.owner, coordinates.name, username, _page_size(cap, page_size)
    )
    return await count_bounded(pages, cap)


async def count_commits(
    client: GitHubClient,
    coordinates: RepositoryCoordinates,
    username: str,
    cap: int,
    page_size: int = MAX_PAGE_SIZE,
) -> int:
    pages = client.list_commits(
        coordinates.owner, coordinates.name, username, _page_size(cap, page_size)
    )
    try:
        return await count_bounded(pages, cap)
    except httpx.HTTPStatusError as e:
        # GitHub answers 409 Conflict for a repository with no commits yet.
        if e.response.status_code == 409:
            return 0
        raise


def _is_plain_issue(item: Dict[str, Any]) -> bool:
    return "pull_request" not in item


async def count_issues(
    client: GitHubClient,
    coordinates: RepositoryCoordinates,
    username: str,
    cap: int,
    page_size: int = MAX_PAGE_SIZE,
) -> int:
    # The issues listing mixes in pull requests, so a page may hold fewer
    # countable items than per_page; don't shrink it to the cap.
    pages = client.list_issues(
        coordinates.owner, coordinates.name, username, min(page_size, MAX_PAGE_SIZE)
    )
    return await count_bounded(pages, cap, predicate=_is_plain_issue)


EVALUATORS: Dict[CriteriaType, Evaluator] = {
    CriteriaType.PR_COUNT: count_merged_pull_requests,
    CriteriaType.COMMIT_COUNT: count_commits,
    CriteriaType.ISSUE_COUNT: count_issues,
}


async def count_contributions(
    criteria_type: CriteriaType,
    client: GitHubClient,
    coordinates: RepositoryCoordinates,
    username: str,
    cap: int,
    page_size: int = MAX_PAGE_SIZE,
) -> int:
    """
    Dispatch to the evaluator for ``criteria_type``.

    Raises:
        RuleEvaluationFailed: the GitHub API failed, timed out, or returned
            a body that could not be decoded. Zero results is not a failure.
    """
    evaluator = EVALUATORS[criteria_type]
    try:
        return await evaluator(client, coordinates, username, cap, page_size)
    except httpx.HTTPStatusError as e:
        raise RuleEvaluationFailed(
            criteria_type.value, f"GitHub returned {e.response.status_code}"
        ) from e
    except httpx.TimeoutException as e:
        raise RuleEvaluationFailed(criteria_type.value, "request timed out") from e
    except httpx.HTTPError as e:
        raise RuleEvaluationFailed(criteria_type.value, str(e)) from e
    except (ValueError, KeyError, TypeError) as e:
        raise RuleEvaluationFailed(
            criteria_type.value, f"unexpected response: {e}"
        ) from e
