"""Gatekeeper exception classes."""

from typing import Optional


class GatekeeperError(Exception):
    """Base exception for all gatekeeper errors."""

    code = "GATEKEEPER_ERROR"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        self.code = code or self.code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


class MissingCredential(GatekeeperError):
    """Raised when there is no usable GitHub access token for the caller."""

    code = "MISSING_CREDENTIAL"


class RepositoryUnresolvable(GatekeeperError):
    """Raised when a durable repository ID no longer resolves to owner/name."""

    code = "REPOSITORY_UNRESOLVABLE"

    def __init__(self, repo_id: int, reason: str) -> None:
        self.repo_id = repo_id
        super().__init__(f"Repository {repo_id} could not be resolved: {reason}")


class RuleEvaluationFailed(GatekeeperError):
    """Raised when a single criterion could not be counted."""

    code = "RULE_EVALUATION_FAILED"

    def __init__(self, criteria_type: str, reason: str) -> None:
        self.criteria_type = criteria_type
        super().__init__(f"Could not evaluate {criteria_type}: {reason}")


class InvalidThreshold(GatekeeperError):
    """Raised when a persisted threshold is not a base-10 non-negative integer."""

    code = "INVALID_THRESHOLD"

    def __init__(self, raw: object) -> None:
        self.raw = raw
        super().__init__(f"Invalid threshold value: {raw!r}")
