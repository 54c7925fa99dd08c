from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from app.dependencies.auth import CurrentUserDep
from app.dependencies.gatekeeper import AccessServiceDep
from app.services.gatekeeper import AccessDecision, MissingCredential
from app.services.loops.access import LoopNotFound

router = APIRouter()


class VerifyAccessRequest(BaseModel):
    loop_name: str


class JoinResponse(BaseModel):
    message: str
    loop: str
    already_member: bool = False


def _http_error(error: Exception) -> HTTPException:
    if isinstance(error, LoopNotFound):
        return HTTPException(status_code=404, detail="loop not found")
    return HTTPException(
        status_code=401, detail="GitHub access token missing or rejected"
    )


@router.post("/verify-access", response_model=AccessDecision)
async def verify_access(
    body: VerifyAccessRequest, user: CurrentUserDep, service: AccessServiceDep
):
    """
    Check whether the caller meets a loop's contribution requirements.

    Read-only: never creates a membership.
    """
    try:
        return await service.verify(body.loop_name, user)
    except (LoopNotFound, MissingCredential) as e:
        raise _http_error(e) from e


@router.post("/{name}/join", response_model=JoinResponse)
async def join_loop(name: str, user: CurrentUserDep, service: AccessServiceDep):
    """
    Join a loop after a fresh verification.

    Returns 403 with the decision when requirements are not met.
    """
    try:
        outcome = await service.join(name, user)
    except (LoopNotFound, MissingCredential) as e:
        raise _http_error(e) from e

    if outcome.already_member:
        return JoinResponse(
            message="You are already a member!", loop=name, already_member=True
        )
    if not outcome.joined:
        raise HTTPException(
            status_code=403,
            detail={
                "error": "contribution requirements not met",
                "decision": outcome.decision.model_dump(mode="json"),
            },
        )
    return JoinResponse(message="Successfully joined the loop!", loop=name)
