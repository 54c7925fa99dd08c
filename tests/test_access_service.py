import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event
from sqlmodel import select

from fakes import REPO_ID

from app.db.models import Loop, LoopRule, Membership, User
from app.services.gatekeeper import CriteriaType, MissingCredential, ReasonCode, Rule
from app.services.loops.access import AccessService, LoopNotFound, decode_rules

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


async def seed(session, rules=(), token="gho_test"):
    user = User(github_id=583231, username="alice", access_token=token)
    owner = User(github_id=1, username="octocat", access_token="gho_owner")
    loop = Loop(github_repo_id=REPO_ID, name="hello-world", owner_id=owner.id)
    session.add_all([user, owner, loop])
    for i, (criteria_type, threshold) in enumerate(rules):
        session.add(
            LoopRule(
                loop_id=loop.id,
                criteria_type=criteria_type,
                threshold=threshold,
                created_at=T0 + timedelta(seconds=i),
            )
        )
    await session.commit()
    return user, loop


async def memberships(session):
    result = await session.execute(select(Membership))
    return result.scalars().all()


@pytest.fixture
def service(session, gatekeeper) -> AccessService:
    return AccessService(session, gatekeeper)


def test_decode_rules_skips_bad_rows() -> None:
    loop_id = uuid.uuid4()
    rows = [
        LoopRule(loop_id=loop_id, criteria_type="COMMIT_COUNT", threshold="5"),
        LoopRule(loop_id=loop_id, criteria_type="PR_COUNT", threshold="three"),
        LoopRule(loop_id=loop_id, criteria_type="STAR_COUNT", threshold="10"),
        LoopRule(loop_id=loop_id, criteria_type="ISSUE_COUNT", threshold="0"),
        LoopRule(loop_id=loop_id, criteria_type="PR_MERGED", threshold="2"),
    ]

    assert decode_rules(rows) == [
        Rule(CriteriaType.COMMIT_COUNT, 5),
        Rule(CriteriaType.PR_COUNT, 2),
    ]


async def test_verify_evaluates_rules_in_creation_order(github, session, service) -> None:
    user, _ = await seed(session, [("ISSUE_COUNT", "1"), ("PR_COUNT", "2")])
    github.merged_prs["alice"] = 2

    decision = await service.verify("hello-world", user)

    assert [r.criteria_type for r in decision.results] == [
        CriteriaType.ISSUE_COUNT,
        CriteriaType.PR_COUNT,
    ]
    assert decision.can_join is False
    assert await memberships(session) == []


async def test_verify_short_circuits_existing_members(github, session, service) -> None:
    user, loop = await seed(session, [("PR_COUNT", "50")])
    session.add(Membership(user_id=user.id, loop_id=loop.id))
    await session.commit()

    decision = await service.verify("hello-world", user)

    assert decision.is_member is True
    assert decision.can_join is True
    assert decision.reason_code == ReasonCode.ALREADY_MEMBER
    assert github.requests == []


async def test_verify_unknown_loop(session, service) -> None:
    user, _ = await seed(session)

    with pytest.raises(LoopNotFound):
        await service.verify("nope", user)


async def test_verify_without_token_raises(session, service) -> None:
    user, _ = await seed(session, token=None)

    with pytest.raises(MissingCredential):
        await service.verify("hello-world", user)


async def test_invalid_rules_only_means_open_access(session, service) -> None:
    user, _ = await seed(session, [("PR_COUNT", "-1"), ("COMMIT_COUNT", "")])

    decision = await service.verify("hello-world", user)

    assert decision.reason_code == ReasonCode.OPEN_ACCESS
    assert decision.can_join is True


async def test_join_writes_membership_when_eligible(github, session, service) -> None:
    user, loop = await seed(session, [("COMMIT_COUNT", "3")])
    github.commits["alice"] = 3

    outcome = await service.join("hello-world", user)

    assert outcome.joined is True
    assert outcome.already_member is False
    [membership] = await memberships(session)
    assert (membership.user_id, membership.loop_id) == (user.id, loop.id)
    assert membership.role == "contributor"


async def test_join_refused_when_requirements_unmet(github, session, service) -> None:
    user, _ = await seed(session, [("COMMIT_COUNT", "3")])
    github.commits["alice"] = 1

    outcome = await service.join("hello-world", user)

    assert outcome.joined is False
    assert outcome.decision.reason_code == ReasonCode.REQUIREMENTS_NOT_MET
    assert await memberships(session) == []


async def test_join_refused_when_repository_unresolvable(github, session, service) -> None:
    user, _ = await seed(session)
    del github.repositories[REPO_ID]

    outcome = await service.join("hello-world", user)

    assert outcome.joined is False
    assert outcome.decision.reason_code == ReasonCode.REPOSITORY_UNRESOLVABLE
    assert await memberships(session) == []


async def test_join_loads_the_loop_once(github, session, service) -> None:
    user, _ = await seed(session, [("COMMIT_COUNT", "1")])
    github.commits["alice"] = 1
    loop_selects = []

    def record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT") and "FROM loops" in statement:
            loop_selects.append(statement)

    engine = session.bind.sync_engine
    event.listen(engine, "before_cursor_execute", record)
    try:
        outcome = await service.join("hello-world", user)
    finally:
        event.remove(engine, "before_cursor_execute", record)

    assert outcome.joined is True
    assert len(loop_selects) == 1


async def test_join_is_idempotent(session, service) -> None:
    user, _ = await seed(session)

    first = await service.join("hello-world", user)
    second = await service.join("hello-world", user)

    assert first.joined is True
    assert second.joined is False
    assert second.already_member is True
    assert len(await memberships(session)) == 1


async def test_duplicate_insert_counts_as_already_member(session, service) -> None:
    user, loop = await seed(session)

    assert await service._add_membership(user.id, loop.id) is True
    assert await service._add_membership(user.id, loop.id) is False
    assert len(await memberships(session)) == 1
