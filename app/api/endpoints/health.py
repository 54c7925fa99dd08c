from fastapi import APIRouter
from sqlalchemy import text

from app.dependencies.database import SessionDep

router = APIRouter()


@router.get("")
async def health_check(session: SessionDep):
    """
    Check the health of the API and its database connection.
    """
    await session.execute(text("SELECT 1"))
    return {"status": "ok"}
