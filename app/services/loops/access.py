"""
Access decision façade.

Bridges persisted loop state (loops, rules, memberships) and the gatekeeper
engine. The engine never touches the database; this service reads rules,
short-circuits existing members, and writes the membership row only after a
fresh decision allows it.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlmodel import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.logging import get_logger
from app.db.models import Loop, LoopRule, Membership, User
from app.services.gatekeeper import (
    AccessDecision,
    CriteriaType,
    Gatekeeper,
    GatekeeperError,
    InvalidThreshold,
    ReasonCode,
    Rule,
    parse_threshold,
)

logger = get_logger(__name__)

MSG_ALREADY_MEMBER = "You are already a member of this loop"


class LoopNotFound(GatekeeperError):
    """Raised when no loop has the requested name."""

    code = "LOOP_NOT_FOUND"

    def __init__(self, loop_name: str) -> None:
        self.loop_name = loop_name
        super().__init__(f"Loop {loop_name!r} not found")


@dataclass
class JoinOutcome:
    """Result of a join attempt."""

    loop_name: str
    decision: AccessDecision
    joined: bool = False
    already_member: bool = False


def decode_rules(rows: Iterable[LoopRule]) -> List[Rule]:
    """
    Decode persisted rule rows, preserving order.

    Rows with an unknown criteria type or a malformed threshold are skipped
    with a warning; rows with threshold 0 impose nothing and are dropped.
    """
    rules: List[Rule] = []
    for row in rows:
        try:
            criteria_type = CriteriaType.from_persisted(row.criteria_type)
        except ValueError:
            logger.warning(
                "Skipping rule %s: unknown criteria type %r", row.id, row.criteria_type
            )
            continue

        try:
            threshold = parse_threshold(row.threshold)
        except InvalidThreshold as e:
            logger.warning("Skipping rule %s: %s", row.id, e.message)
            continue

        if threshold <= 0:
            continue
        rules.append(Rule(criteria_type=criteria_type, threshold=threshold))
    return rules


class AccessService:
    def __init__(self, session: AsyncSession, gatekeeper: Gatekeeper):
        self.session = session
        self.gatekeeper = gatekeeper

    async def get_loop(self, loop_name: str) -> Loop:
        """
        Fetch a loop by name.

        Raises:
            LoopNotFound: if no loop has that name.
        """
        result = await self.session.execute(select(Loop).where(Loop.name == loop_name))
        loop = result.scalar_one_or_none()
        if loop is None:
            raise LoopNotFound(loop_name)
        return loop

    async def is_member(self, user_id: uuid.UUID, loop_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(Membership.user_id).where(
                Membership.user_id == user_id, Membership.loop_id == loop_id
            )
        )
        return result.scalar_one_or_none() is not None

    async def load_rules(self, loop_id: uuid.UUID) -> List[Rule]:
        """Load and decode a loop's rules in creation order."""
        result = await self.session.execute(
            select(LoopRule)
            .where(LoopRule.loop_id == loop_id)
            .order_by(LoopRule.created_at, LoopRule.id)
        )
        return decode_rules(result.scalars().all())

    async def verify(self, loop_name: str, user: User) -> AccessDecision:
        """
        Read-only eligibility check. Never writes membership state.

        Raises:
            LoopNotFound: unknown loop.
            MissingCredential: the user has no usable GitHub token.
        """
        loop = await self.get_loop(loop_name)
        return await self._decide(loop, user)

    async def evaluate_for_join(self, loop_name: str, user: User) -> AccessDecision:
        """
        Fresh evaluation at the moment of join.

        Identical to ``verify``; an earlier "eligible" answer is never trusted.
        """
        loop = await self.get_loop(loop_name)
        return await self._decide(loop, user)

    async def join(self, loop_name: str, user: User) -> JoinOutcome:
        """
        Add ``user`` to the loop if a fresh decision allows it.

        Idempotent: a concurrent duplicate insert is reported as
        ``already_member`` rather than an error.
        """
        loop = await self.get_loop(loop_name)
        decision = await self._decide(loop, user)
        outcome = JoinOutcome(loop_name=loop_name, decision=decision)

        if decision.is_member:
            outcome.already_member = True
            return outcome

        if not decision.can_join:
            logger.info(
                "Join refused for %s on %s (%s)",
                user.username,
                loop_name,
                decision.reason_code.value,
            )
            return outcome

        inserted = await self._add_membership(user.id, loop.id)
        outcome.joined = inserted
        outcome.already_member = not inserted
        return outcome

    async def _decide(self, loop: Loop, user: User) -> AccessDecision:
        if await self.is_member(user.id, loop.id):
            return AccessDecision(
                is_member=True,
                can_join=True,
                reason_code=ReasonCode.ALREADY_MEMBER,
                message=MSG_ALREADY_MEMBER,
            )

        rules = await self.load_rules(loop.id)
        return await self.gatekeeper.verify_access(
            user.access_token, loop.github_repo_id, user.username, rules
        )

    async def _add_membership(
        self, user_id: uuid.UUID, loop_id: uuid.UUID, role: Optional[str] = None
    ) -> bool:
        """
        Insert a membership row.

        Uses ON CONFLICT DO NOTHING for idempotency.

        Returns:
            True if a row was inserted, False if it already existed.
        """
        dialect = self.session.bind.dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert

        stmt = (
            insert(Membership)
            .values(
                user_id=user_id,
                loop_id=loop_id,
                role=role or "contributor",
                joined_at=datetime.now(timezone.utc),
            )
            .on_conflict_do_nothing(index_elements=["user_id", "loop_id"])
            .returning(Membership.user_id)
        )
        res = await self.session.execute(stmt)
        inserted = res.scalar_one_or_none() is not None
        await self.session.commit()

        if inserted:
            logger.info("Added membership: user %s -> loop %s", user_id, loop_id)
        else:
            logger.info("Membership already exists: user %s -> loop %s", user_id, loop_id)
        return inserted
