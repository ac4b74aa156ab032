"""Repository pattern implementation for the battles feature.

This module provides data access abstraction following Martin Fowler's Repository pattern,
encapsulating all database operations and providing a collection-like interface.
Every query is scoped to one (user, normalized player tag) pair.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import and_, delete, desc, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from .orm_models import BattleORM
from .retention import StoredBattleRef

logger = structlog.get_logger(__name__)


class BattleRepositoryInterface(ABC):
    """Interface for battle repository following Repository pattern."""

    @abstractmethod
    async def insert_if_absent(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Insert battle rows, ignoring keys that already exist.

        Args:
            rows: Column mappings for BattleORM

        Returns:
            Number of rows actually inserted
        """
        pass

    @abstractmethod
    async def list_battle_refs(
        self, user_id: str, player_tag: str
    ) -> List[StoredBattleRef]:
        """List (battle_key, battle_time) pairs stored for a user and tag."""
        pass

    @abstractmethod
    async def delete_except(
        self, user_id: str, player_tag: str, keep_keys: Sequence[str]
    ) -> int:
        """Delete every battle of (user, tag) whose key is not in keep_keys.

        Returns:
            Number of deleted rows
        """
        pass

    @abstractmethod
    async def delete_before(
        self, user_id: str, player_tag: str, cutoff: datetime
    ) -> int:
        """Delete battles of (user, tag) played before cutoff.

        Returns:
            Number of deleted rows
        """
        pass

    @abstractmethod
    async def find_history(
        self,
        user_id: str,
        player_tag: str,
        limit: int,
        since: Optional[datetime] = None,
    ) -> List[BattleORM]:
        """Find stored battles, newest first.

        Args:
            user_id: Owning user
            player_tag: Normalized player tag
            limit: Maximum number of battles
            since: Optional lower bound on battle time

        Returns:
            Battles ordered by battle_time descending
        """
        pass


class SQLAlchemyBattleRepository(BattleRepositoryInterface):
    """SQLAlchemy implementation of battle repository."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy async session
        """
        self.db = db

    @staticmethod
    def _scope(user_id: str, player_tag: str):
        return and_(BattleORM.user_id == user_id, BattleORM.player_tag == player_tag)

    async def insert_if_absent(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Insert battle rows with ON CONFLICT DO NOTHING on the battle key."""
        if not rows:
            return 0

        stmt = (
            pg_insert(BattleORM)
            .values(list(rows))
            .on_conflict_do_nothing(index_elements=[BattleORM.battle_key])
            .returning(BattleORM.battle_key)
        )
        result = await self.db.execute(stmt)
        inserted = len(result.scalars().all())
        await self.db.commit()

        logger.debug(
            "battles_inserted",
            received=len(rows),
            inserted=inserted,
            duplicates=len(rows) - inserted,
        )

        return inserted

    async def list_battle_refs(
        self, user_id: str, player_tag: str
    ) -> List[StoredBattleRef]:
        """List (battle_key, battle_time) pairs for a user and tag."""
        stmt = (
            select(BattleORM.battle_key, BattleORM.battle_time)
            .where(self._scope(user_id, player_tag))
            .order_by(desc(BattleORM.battle_time))
        )
        result = await self.db.execute(stmt)
        return [(key, battle_time) for key, battle_time in result.all()]

    async def delete_except(
        self, user_id: str, player_tag: str, keep_keys: Sequence[str]
    ) -> int:
        """Delete battles of (user, tag) outside the keep allow-list."""
        stmt = delete(BattleORM).where(self._scope(user_id, player_tag))
        if keep_keys:
            stmt = stmt.where(BattleORM.battle_key.not_in(list(keep_keys)))

        result = await self.db.execute(stmt)
        await self.db.commit()
        deleted = result.rowcount or 0

        logger.debug(
            "battles_pruned_to_allow_list",
            user_id=user_id,
            player_tag=player_tag,
            kept=len(keep_keys),
            deleted=deleted,
        )

        return deleted

    async def delete_before(
        self, user_id: str, player_tag: str, cutoff: datetime
    ) -> int:
        """Delete battles of (user, tag) older than cutoff."""
        stmt = delete(BattleORM).where(
            self._scope(user_id, player_tag), BattleORM.battle_time < cutoff
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        deleted = result.rowcount or 0

        logger.debug(
            "battles_pruned_by_age",
            user_id=user_id,
            player_tag=player_tag,
            cutoff=cutoff.isoformat(),
            deleted=deleted,
        )

        return deleted

    async def find_history(
        self,
        user_id: str,
        player_tag: str,
        limit: int,
        since: Optional[datetime] = None,
    ) -> List[BattleORM]:
        """Find stored battles, newest first."""
        stmt = (
            select(BattleORM)
            .where(self._scope(user_id, player_tag))
            .order_by(desc(BattleORM.battle_time))
            .limit(limit)
        )
        if since is not None:
            stmt = stmt.where(BattleORM.battle_time >= since)

        result = await self.db.execute(stmt)
        battles = list(result.scalars().all())

        logger.debug(
            "battle_history_found",
            user_id=user_id,
            player_tag=player_tag,
            count=len(battles),
        )

        return battles
