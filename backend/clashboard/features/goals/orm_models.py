"""SQLAlchemy 2.0 ORM models for the goals feature."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime as SQLDateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from clashboard.core.enums import GoalType
from clashboard.core.models import Base, CreatedAt, OptionalDateTime, UserIDField


class GoalORM(Base):
    """User-declared goal (Rich Domain Model pattern)."""

    __tablename__ = "goals"
    __table_args__ = (
        Index("idx_goals_user_completed", "user_id", "completed"),
        {"schema": "core"},
    )

    # ========================================================================
    # DATABASE FIELDS
    # ========================================================================

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[UserIDField]

    type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="Goal type: trophies, streak, winrate or custom",
    )

    title: Mapped[Optional[str]] = mapped_column(
        String(120), nullable=True, comment="Optional label shown to the user"
    )

    target_value: Mapped[float] = mapped_column(Float, nullable=False)

    current_value: Mapped[Optional[float]] = mapped_column(
        Float, nullable=True, default=0
    )

    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    completed_at: Mapped[OptionalDateTime]

    created_at: Mapped[CreatedAt]

    updated_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # ========================================================================
    # RICH DOMAIN MODEL - Business Logic Methods
    # ========================================================================

    @property
    def goal_type(self) -> Optional[GoalType]:
        try:
            return GoalType(self.type)
        except ValueError:
            return None

    def mark_progress(
        self, current_value: float, completed: bool, now: Optional[datetime] = None
    ) -> None:
        """Apply an evaluated delta; a completed goal stays completed."""
        self.current_value = current_value
        if completed and not self.completed:
            self.completed = True
            self.completed_at = now or datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return (
            f"<GoalORM(id={self.id}, user_id='{self.user_id}', type='{self.type}', "
            f"current={self.current_value}/{self.target_value}, "
            f"completed={self.completed})>"
        )
