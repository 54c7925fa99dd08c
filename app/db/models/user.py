"""
User Model

GitHub identity of a signed-in user plus the OAuth token used for
contribution checks. Key: github_id (unique)
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import BigInteger, Column, DateTime


class User(SQLModel, table=True):
    """
    Users table.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
        nullable=False,
    )
    github_id: int = Field(sa_column=Column(BigInteger, unique=True, nullable=False))
    username: str = Field(unique=True, index=True, description="GitHub login")
    access_token: Optional[str] = Field(
        default=None, description="GitHub OAuth token used for verification calls."
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
