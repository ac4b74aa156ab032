"""SQLAlchemy 2.0 ORM models for the battles feature.

A stored battle is identified by its content-addressed key, so the primary
key doubles as the idempotency boundary for ingestion.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime as SQLDateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from clashboard.core.models import Base, CreatedAt, PlayerTagField, UserIDField
from clashboard.features.battles.normalizer import is_loss, is_win


class BattleORM(Base):
    """Stored battle (Rich Domain Model pattern)."""

    __tablename__ = "battles"
    __table_args__ = (
        Index("idx_battles_user_tag_time", "user_id", "player_tag", "battle_time"),
        {"schema": "core"},
    )

    # ========================================================================
    # DATABASE FIELDS
    # ========================================================================

    battle_key: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="SHA-256 content hash of (user, tag, battle)",
    )

    user_id: Mapped[UserIDField]
    player_tag: Mapped[PlayerTagField]

    battle_time: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        comment="When the battle was played (UTC)",
    )

    battle_json: Mapped[Dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        comment="Raw battle payload as returned by the game API",
    )

    created_at: Mapped[CreatedAt]

    # ========================================================================
    # RICH DOMAIN MODEL - Business Logic Methods
    # ========================================================================

    def is_win(self) -> bool:
        """Whether the player's side won this battle."""
        return is_win(self.battle_json)

    def is_loss(self) -> bool:
        """Whether the player's side lost this battle."""
        return is_loss(self.battle_json)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<BattleORM(battle_key='{self.battle_key[:12]}...', "
            f"user_id='{self.user_id}', player_tag='{self.player_tag}', "
            f"battle_time={self.battle_time.isoformat() if self.battle_time else None})>"
        )
