"""
Contribution-gated access control engine.
"""

from app.services.gatekeeper.errors import (
    GatekeeperError,
    InvalidThreshold,
    MissingCredential,
    RepositoryUnresolvable,
    RuleEvaluationFailed,
)
from app.services.gatekeeper.orchestrator import Gatekeeper
from app.services.gatekeeper.threshold import parse_threshold
from app.services.gatekeeper.types import (
    AccessDecision,
    CriteriaType,
    ReasonCode,
    RepositoryCoordinates,
    Rule,
    VerificationResult,
)

__all__ = [
    "AccessDecision",
    "CriteriaType",
    "Gatekeeper",
    "GatekeeperError",
    "InvalidThreshold",
    "MissingCredential",
    "ReasonCode",
    "RepositoryCoordinates",
    "RepositoryUnresolvable",
    "Rule",
    "RuleEvaluationFailed",
    "VerificationResult",
    "parse_threshold",
]
