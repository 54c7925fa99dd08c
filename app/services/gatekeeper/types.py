"""
Gatekeeper data types.

Pure data models, no service imports:
- CriteriaType: closed set of contribution kinds a rule can require
- Rule: a decoded (criteria_type, threshold) pair
- RepositoryCoordinates: owner/name resolved from a durable repository ID
- VerificationResult: per-rule outcome
- AccessDecision: aggregate outcome returned to request handlers
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from sqlmodel import SQLModel, Field


class CriteriaType(str, Enum):
    """Contribution kinds a loop owner can require."""

    PR_COUNT = "PR_COUNT"
    COMMIT_COUNT = "COMMIT_COUNT"
    ISSUE_COUNT = "ISSUE_COUNT"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_persisted(cls, value: str) -> "CriteriaType":
        """
        Decode a stored criteria_type value.

        ``PR_MERGED`` is accepted as a legacy spelling of ``PR_COUNT``.

        Raises:
            ValueError: for any value outside the known vocabulary.
        """
        value = (value or "").strip().upper()
        if value == "PR_MERGED":
            return cls.PR_COUNT
        return cls(value)


_LABELS = {
    CriteriaType.PR_COUNT: "merged pull requests",
    CriteriaType.COMMIT_COUNT: "commits",
    CriteriaType.ISSUE_COUNT: "issues",
}


class ReasonCode(str, Enum):
    """Machine-readable outcome of a verification."""

    ALREADY_MEMBER = "ALREADY_MEMBER"
    COLLABORATOR_BYPASS = "COLLABORATOR_BYPASS"
    OPEN_ACCESS = "OPEN_ACCESS"
    REQUIREMENTS_MET = "REQUIREMENTS_MET"
    REQUIREMENTS_NOT_MET = "REQUIREMENTS_NOT_MET"
    VERIFICATION_INCOMPLETE = "VERIFICATION_INCOMPLETE"
    REPOSITORY_UNRESOLVABLE = "REPOSITORY_UNRESOLVABLE"


@dataclass(frozen=True)
class Rule:
    """An owner-authored requirement, already decoded from storage."""

    criteria_type: CriteriaType
    threshold: int


@dataclass(frozen=True)
class RepositoryCoordinates:
    """Current owner/name of a repository. Never persisted."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class VerificationResult(SQLModel):
    """Outcome of evaluating a single rule."""

    criteria_type: CriteriaType = Field(description="The rule's contribution kind.")
    required: int = Field(description="The rule's threshold.")
    actual: int = Field(
        default=0, description="Observed count, capped at the threshold."
    )
    passed: bool = Field(default=False)
    message: str = Field(default="", description="Human-readable explanation.")
    error: Optional[str] = Field(
        default=None,
        description="Diagnostic when the rule could not be evaluated.",
    )


class AccessDecision(SQLModel):
    """Aggregate answer to "may this user join this loop?"."""

    is_member: bool = False
    can_join: bool = False
    is_collaborator: bool = False
    reason_code: ReasonCode
    message: str
    results: List[VerificationResult] = []
