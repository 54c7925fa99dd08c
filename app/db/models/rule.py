"""
Loop Rule Model

Owner-authored contribution requirement. The threshold is stored as text and
decoded by the gatekeeper's threshold codec at read time.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime

if TYPE_CHECKING:
    from app.db.models.loop import Loop


class LoopRule(SQLModel, table=True):
    """
    Rules table.
    """

    __tablename__ = "rules"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
        nullable=False,
    )
    loop_id: uuid.UUID = Field(
        foreign_key="loops.id", ondelete="CASCADE", index=True, nullable=False
    )
    criteria_type: str = Field(description="PR_COUNT, COMMIT_COUNT or ISSUE_COUNT")
    threshold: str = Field(description="Base-10 integer, stored as text")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    loop: Optional["Loop"] = Relationship(back_populates="rules")
