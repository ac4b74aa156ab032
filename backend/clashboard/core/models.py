"""Declarative base and shared column types for ORM models."""

from datetime import datetime
from typing import Annotated, Optional

from sqlalchemy import DateTime as SQLDateTime, String
from sqlalchemy.orm import DeclarativeBase, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# Reusable column annotations
UserIDField = Annotated[
    str,
    mapped_column(String(64), nullable=False, index=True, comment="Owning user id"),
]
PlayerTagField = Annotated[
    str,
    mapped_column(
        String(20), nullable=False, comment="Normalized player tag (#UPPERCASE)"
    ),
]
CreatedAt = Annotated[
    datetime,
    mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="When this record was created in our database",
    ),
]
OptionalDateTime = Annotated[
    Optional[datetime], mapped_column(SQLDateTime(timezone=True), nullable=True)
]
