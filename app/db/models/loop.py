"""
Loop Model

A gated collaboration space tied to one GitHub repository.
The repository is referenced by its durable numeric ID only; owner/name are
resolved at verification time.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, List, TYPE_CHECKING

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import BigInteger, Column, DateTime

if TYPE_CHECKING:
    from app.db.models.rule import LoopRule


class Loop(SQLModel, table=True):
    """
    Loops table.
    """

    __tablename__ = "loops"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
        nullable=False,
    )
    github_repo_id: int = Field(
        sa_column=Column(BigInteger, unique=True, nullable=False),
        description="Durable GitHub repository ID",
    )
    name: str = Field(unique=True, index=True, description="Display name")
    owner_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    rules: List["LoopRule"] = Relationship(back_populates="loop")
