"""Battle history service.

Thin orchestration over the pure normalizer and retention policy:
- Normalizes the player tag and refuses unscoped operations
- Keys and stores raw battles idempotently via the repository
- Applies the tier retention plan after every ingestion
- Serves tier-limited history queries
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import structlog

from clashboard.core.decorators import input_validation, service_error_handler
from clashboard.core.enums import SubscriptionTier
from clashboard.core.exceptions import InvalidPlayerTagError
from clashboard.core.logging import player_log_context

from .normalizer import extract_battle_time, normalize_player_tag
from .repository import BattleRepositoryInterface
from .retention import (
    RetentionConfig,
    build_retention_plan,
    clamp_history_days,
    clamp_history_limit,
    pro_history_cutoff,
    select_battles_to_store,
)
from .schemas import BattleHistoryResponse, IngestResult
from .transformers import BattleTransformer

logger = structlog.get_logger(__name__)


def require_player_tag(player_tag: Any, operation: str) -> str:
    """Normalize a tag or refuse the operation."""
    normalized = normalize_player_tag(player_tag)
    if normalized is None:
        raise InvalidPlayerTagError(player_tag, operation=operation)
    return normalized


class BattleHistoryService:
    """Service for storing and reading a player's battle history."""

    def __init__(
        self,
        repository: BattleRepositoryInterface,
        config: Optional[RetentionConfig] = None,
        transformer: Optional[BattleTransformer] = None,
    ):
        """
        Initialize battle history service.

        :param repository: Battle repository instance
        :param config: Retention limits, defaults to the standard tiers
        :param transformer: Data mapper between raw battles and rows
        """
        self.repository = repository
        self.config = config or RetentionConfig()
        self.transformer = transformer or BattleTransformer()

    @service_error_handler("BattleHistoryService")
    @input_validation(validate_non_empty=["user_id"])
    async def ingest(
        self,
        user_id: str,
        player_tag: Any,
        battles: Sequence[Dict[str, Any]],
        tier: SubscriptionTier = SubscriptionTier.FREE,
        now: Optional[datetime] = None,
    ) -> IngestResult:
        """
        Store raw battles and apply the retention policy.

        Re-ingesting the same battles never adds rows: keys that already exist
        are ignored by the store.

        Battles without a parseable time are skipped. Free users only store
        the ``free_battle_limit`` most recent battles of the payload.

        :param user_id: Owning user
        :param player_tag: Player tag the battles belong to
        :param battles: Raw battle payloads in any order
        :param tier: Subscription tier of the user
        :param now: Reference instant for retention (defaults to utcnow)
        :returns: Counts of received, skipped, inserted and pruned battles
        """
        tag = require_player_tag(player_tag, "ingest")
        now = now or datetime.now(timezone.utc)

        battles = list(battles)
        skipped = sum(1 for battle in battles if extract_battle_time(battle) is None)
        selected = select_battles_to_store(battles, tier, self.config)

        with player_log_context(user_id, tag, tier=tier.value):
            rows, _ = self.transformer.raw_to_rows(user_id, tag, selected)
            inserted = await self.repository.insert_if_absent(rows)
            pruned = await self.apply_retention(user_id, tag, tier, now)

            logger.info(
                "battles_ingested",
                received=len(battles),
                skipped=skipped,
                inserted=inserted,
                pruned=pruned,
            )

        return IngestResult(
            player_tag=tag,
            received=len(battles),
            skipped=skipped,
            inserted=inserted,
            duplicates=len(rows) - inserted,
            pruned=pruned,
        )

    async def apply_retention(
        self,
        user_id: str,
        player_tag: str,
        tier: SubscriptionTier,
        now: datetime,
    ) -> int:
        """
        Prune stored battles of (user, tag) according to the tier.

        :returns: Number of deleted rows
        """
        tag = require_player_tag(player_tag, "apply_retention")

        if tier == SubscriptionTier.PRO:
            deleted = await self.repository.delete_before(
                user_id, tag, pro_history_cutoff(now, self.config)
            )
        else:
            stored = await self.repository.list_battle_refs(user_id, tag)
            plan = build_retention_plan(stored, tier, now, self.config)
            if not plan.select_deletions(stored):
                return 0
            deleted = await self.repository.delete_except(
                user_id, tag, plan.keep_keys or ()
            )

        logger.info(
            "retention_applied",
            user_id=user_id,
            player_tag=tag,
            tier=tier.value,
            deleted=deleted,
        )
        return deleted

    @service_error_handler("BattleHistoryService")
    @input_validation(validate_non_empty=["user_id"])
    async def get_history(
        self,
        user_id: str,
        player_tag: Any,
        tier: SubscriptionTier = SubscriptionTier.FREE,
        days: Any = None,
        limit: Any = None,
        now: Optional[datetime] = None,
    ) -> BattleHistoryResponse:
        """
        Get stored battles within the tier limits.

        Free tier always gets the latest ``free_battle_limit`` battles; pro
        tier gets a clamped day window and row limit.

        :param user_id: Owning user
        :param player_tag: Player tag to read
        :param tier: Subscription tier of the user
        :param days: Requested window in days (pro only, clamped)
        :param limit: Requested row limit (pro only, clamped)
        :param now: Reference instant (defaults to utcnow)
        :returns: History response, newest battle first
        """
        tag = require_player_tag(player_tag, "get_history")
        orms = await self._load_history(user_id, tag, tier, days, limit, now)

        if tier == SubscriptionTier.PRO:
            applied_days: Optional[int] = clamp_history_days(days, self.config)
            applied_limit = clamp_history_limit(limit, self.config)
        else:
            applied_days = None
            applied_limit = self.config.free_battle_limit

        return BattleHistoryResponse(
            player_tag=tag,
            tier=tier,
            days=applied_days,
            limit=applied_limit,
            battles=[self.transformer.orm_to_response(orm) for orm in orms],
        )

    @service_error_handler("BattleHistoryService")
    async def get_raw_battles(
        self,
        user_id: str,
        player_tag: Any,
        tier: SubscriptionTier = SubscriptionTier.FREE,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Stored battles as raw payloads, newest first, for the engines."""
        tag = require_player_tag(player_tag, "get_raw_battles")
        orms = await self._load_history(user_id, tag, tier, None, None, now)
        return self.transformer.orm_to_raw(orms)

    async def _load_history(
        self,
        user_id: str,
        tag: str,
        tier: SubscriptionTier,
        days: Any,
        limit: Any,
        now: Optional[datetime],
    ):
        if tier != SubscriptionTier.PRO:
            return await self.repository.find_history(
                user_id, tag, limit=self.config.free_battle_limit
            )

        now = now or datetime.now(timezone.utc)
        since = pro_history_cutoff(
            now, self.config, days=clamp_history_days(days, self.config)
        )
        return await self.repository.find_history(
            user_id,
            tag,
            limit=clamp_history_limit(limit, self.config),
            since=since,
        )
