"""
Membership Model

Written only after a fresh verification returns can_join=True.
Composite key: (user_id, loop_id)
"""

import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime


class Membership(SQLModel, table=True):
    """
    Memberships table.
    """

    __tablename__ = "memberships"

    user_id: uuid.UUID = Field(
        foreign_key="users.id", ondelete="CASCADE", primary_key=True
    )
    loop_id: uuid.UUID = Field(
        foreign_key="loops.id", ondelete="CASCADE", primary_key=True
    )
    role: str = Field(default="contributor")
    joined_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
