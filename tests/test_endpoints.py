import httpx
import jwt
import pytest
from sqlmodel import select

from fakes import REPO_ID

from app.core.config import settings
from app.db.models import Loop, LoopRule, Membership, User
from app.dependencies.database import get_db
from app.dependencies.gatekeeper import get_gatekeeper
from app.main import app


@pytest.fixture
async def api(session, gatekeeper):
    async def override_db():
        yield session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_gatekeeper] = lambda: gatekeeper

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def alice(session):
    user = User(github_id=583231, username="alice", access_token="gho_test")
    loop = Loop(github_repo_id=REPO_ID, name="hello-world")
    session.add_all([user, loop])
    session.add(LoopRule(loop_id=loop.id, criteria_type="PR_COUNT", threshold="3"))
    await session.commit()
    return user


def auth_headers(user: User) -> dict:
    token = jwt.encode(
        {"user_id": str(user.id)}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    return {"Authorization": f"Bearer {token}"}


async def test_health(api) -> None:
    response = await api.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_verify_access_returns_decision(api, github, alice) -> None:
    github.merged_prs["alice"] = 5

    response = await api.post(
        "/api/v1/loops/verify-access",
        json={"loop_name": "hello-world"},
        headers=auth_headers(alice),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["can_join"] is True
    assert body["is_member"] is False
    assert body["reason_code"] == "REQUIREMENTS_MET"
    assert body["results"] == [
        {
            "criteria_type": "PR_COUNT",
            "required": 3,
            "actual": 3,
            "passed": True,
            "message": "✓ You have 3 merged pull requests (required: 3)",
            "error": None,
        }
    ]


async def test_verify_access_requires_auth(api, alice) -> None:
    response = await api.post(
        "/api/v1/loops/verify-access", json={"loop_name": "hello-world"}
    )

    assert response.status_code == 401


async def test_verify_access_rejects_bad_token(api, alice) -> None:
    response = await api.post(
        "/api/v1/loops/verify-access",
        json={"loop_name": "hello-world"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


async def test_verify_access_unknown_loop(api, alice) -> None:
    response = await api.post(
        "/api/v1/loops/verify-access",
        json={"loop_name": "missing"},
        headers=auth_headers(alice),
    )

    assert response.status_code == 404


async def test_verify_access_without_github_token(api, session, alice) -> None:
    alice.access_token = None
    session.add(alice)
    await session.commit()

    response = await api.post(
        "/api/v1/loops/verify-access",
        json={"loop_name": "hello-world"},
        headers=auth_headers(alice),
    )

    assert response.status_code == 401


async def test_join_forbidden_until_requirements_met(api, github, session, alice) -> None:
    github.merged_prs["alice"] = 1

    response = await api.post("/api/v1/loops/hello-world/join", headers=auth_headers(alice))

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["decision"]["reason_code"] == "REQUIREMENTS_NOT_MET"

    github.merged_prs["alice"] = 3
    response = await api.post("/api/v1/loops/hello-world/join", headers=auth_headers(alice))

    assert response.status_code == 200
    assert response.json() == {
        "message": "Successfully joined the loop!",
        "loop": "hello-world",
        "already_member": False,
    }
    result = await session.execute(select(Membership))
    assert len(result.scalars().all()) == 1

    response = await api.post("/api/v1/loops/hello-world/join", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["already_member"] is True
