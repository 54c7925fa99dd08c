"""
Database models package.

Import all table models here so Alembic and create_all can discover them.
"""

from app.db.models.user import User
from app.db.models.loop import Loop
from app.db.models.rule import LoopRule
from app.db.models.membership import Membership

__all__ = [
    "User",
    "Loop",
    "LoopRule",
    "Membership",
]
