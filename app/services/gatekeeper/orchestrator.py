"""
Verification orchestrator.

Runs one verification pass for a candidate against a loop's rules:
1. Resolve repository coordinates from the durable ID
2. Check collaborator bypass
3. Evaluate every rule concurrently
4. Aggregate into an AccessDecision

Nothing is cached between calls and nothing is retried; calling again is
the retry mechanism.
"""

import asyncio
from typing import List, Optional, Sequence

import httpx

from app.core.logging import get_logger
from app.integrations.github import GitHubClient
from app.integrations.github.client import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_PAGE_SIZE,
)
from app.services.gatekeeper.collaborator import is_collaborator
from app.services.gatekeeper.errors import (
    GatekeeperError,
    MissingCredential,
    RepositoryUnresolvable,
    RuleEvaluationFailed,
)
from app.services.gatekeeper.evaluators import count_contributions
from app.services.gatekeeper.resolver import resolve_repository
from app.services.gatekeeper.types import (
    AccessDecision,
    ReasonCode,
    RepositoryCoordinates,
    Rule,
    VerificationResult,
)

logger = get_logger(__name__)

MSG_UNRESOLVABLE = "Could not resolve the GitHub repository. It may be private or deleted."
MSG_COLLABORATOR = "You're a collaborator on this repo. Welcome in!"
MSG_OPEN = "This loop is open to everyone"
MSG_MET = "You meet all requirements! Click 'Join' to enter."
MSG_NOT_MET = "You don't meet all requirements yet. Keep contributing!"
MSG_INCOMPLETE = (
    "Could not verify all requirements right now. "
    "The repo may be private or GitHub may be unavailable; please try again later."
)


class Gatekeeper:
    """Contribution-gated access control engine."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        page_size: int = MAX_PAGE_SIZE,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: GitHub API root.
            timeout: Per-call timeout for every outbound request.
            page_size: Upper bound for per_page on contribution listings.
            http_client: Optional shared connection pool. The engine never
                closes it.
        """
        self.base_url = base_url
        self.timeout = timeout
        self.page_size = page_size
        self.http_client = http_client

    def _client(self, credential: str) -> GitHubClient:
        return GitHubClient(
            credential,
            base_url=self.base_url,
            timeout=self.timeout,
            http_client=self.http_client,
        )

    async def verify_access(
        self,
        credential: Optional[str],
        repo_id: int,
        username: str,
        rules: Sequence[Rule],
    ) -> AccessDecision:
        """
        Decide whether ``username`` may join a loop gated by ``rules``.

        Args:
            credential: GitHub access token used for every call.
            repo_id: Durable GitHub repository ID of the loop.
            username: Candidate's GitHub login.
            rules: Decoded rules with threshold > 0, in display order.

        Returns:
            A well-formed AccessDecision for every outcome except a missing
            or rejected credential.

        Raises:
            MissingCredential: no usable token; raised before any call when
                the token is blank, or when GitHub rejects it.
        """
        if not credential or not credential.strip():
            raise MissingCredential("No GitHub access token available for this user")

        client = self._client(credential)

        try:
            coordinates = await resolve_repository(client, repo_id)
        except RepositoryUnresolvable as e:
            logger.warning("Verification for %s aborted: %s", username, e.message)
            return AccessDecision(
                can_join=False,
                reason_code=ReasonCode.REPOSITORY_UNRESOLVABLE,
                message=MSG_UNRESOLVABLE,
            )

        if await self._check_collaborator(client, coordinates, username):
            logger.info(
                "%s is a collaborator on %s, bypassing rules",
                username,
                coordinates.full_name,
            )
            return AccessDecision(
                can_join=True,
                is_collaborator=True,
                reason_code=ReasonCode.COLLABORATOR_BYPASS,
                message=MSG_COLLABORATOR,
            )

        if not rules:
            return AccessDecision(
                can_join=True, reason_code=ReasonCode.OPEN_ACCESS, message=MSG_OPEN
            )

        # gather preserves input order and waits for every task.
        results: List[VerificationResult] = await asyncio.gather(
            *(
                self._evaluate_rule(client, coordinates, username, rule)
                for rule in rules
            )
        )

        passed = all(r.passed for r in results)
        if passed:
            reason, message = ReasonCode.REQUIREMENTS_MET, MSG_MET
        elif any(r.error for r in results):
            reason, message = ReasonCode.VERIFICATION_INCOMPLETE, MSG_INCOMPLETE
        else:
            reason, message = ReasonCode.REQUIREMENTS_NOT_MET, MSG_NOT_MET

        logger.info(
            "Verified %s on %s: %d/%d rules passed (%s)",
            username,
            coordinates.full_name,
            sum(r.passed for r in results),
            len(results),
            reason.value,
        )
        return AccessDecision(
            can_join=passed, reason_code=reason, message=message, results=results
        )

    async def _check_collaborator(
        self, client: GitHubClient, coordinates: RepositoryCoordinates, username: str
    ) -> bool:
        """Collaborator check that degrades to False on failure."""
        try:
            return await is_collaborator(client, coordinates, username)
        except GatekeeperError as e:
            logger.warning("%s; falling back to rule evaluation", e.message)
            return False

    async def _evaluate_rule(
        self,
        client: GitHubClient,
        coordinates: RepositoryCoordinates,
        username: str,
        rule: Rule,
    ) -> VerificationResult:
        label = rule.criteria_type.label
        try:
            actual = await count_contributions(
                rule.criteria_type,
                client,
                coordinates,
                username,
                rule.threshold,
                self.page_size,
            )
        except RuleEvaluationFailed as e:
            logger.warning(
                "Rule %s failed for %s on %s: %s",
                rule.criteria_type.value,
                username,
                coordinates.full_name,
                e.message,
            )
            return VerificationResult(
                criteria_type=rule.criteria_type,
                required=rule.threshold,
                actual=0,
                passed=False,
                message=f"✗ Could not verify {label} (repo may be private or inaccessible)",
                error=e.message,
            )

        passed = actual >= rule.threshold
        if passed:
            message = f"✓ You have {actual} {label} (required: {rule.threshold})"
        else:
            message = f"✗ You need {rule.threshold - actual} more {label}"

        return VerificationResult(
            criteria_type=rule.criteria_type,
            required=rule.threshold,
            actual=actual,
            passed=passed,
            message=message,
        )
