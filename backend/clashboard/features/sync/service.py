"""Player sync service.

One sync stores the supplied battle log, recomputes analytics and advances
goals. Storage and goal failures degrade the sync to ``partial`` instead of
failing it; analytics always come from the supplied battles, ordered
newest first and limited the same way storage limits them.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog

from clashboard.core.decorators import input_validation, service_error_handler
from clashboard.core.exceptions import ServiceException
from clashboard.core.logging import player_log_context
from clashboard.features.analytics.service import AnalyticsService
from clashboard.features.battles.retention import select_battles_to_store
from clashboard.features.battles.schemas import IngestResult
from clashboard.features.battles.service import (
    BattleHistoryService,
    require_player_tag,
)
from clashboard.features.goals.evaluator import GoalProgressContext
from clashboard.features.goals.schemas import GoalResponse, GoalSyncResult
from clashboard.features.goals.service import GoalService
from clashboard.features.sessions.summary import compute_battle_stats

from .schemas import SyncError, SyncRequest, SyncResponse, SyncStatus

logger = structlog.get_logger(__name__)


class PlayerSyncService:
    """Orchestrates ingestion, analytics and goal progress for one player."""

    def __init__(
        self,
        battle_service: BattleHistoryService,
        goal_service: GoalService,
        analytics_service: AnalyticsService,
    ):
        self.battle_service = battle_service
        self.goal_service = goal_service
        self.analytics_service = analytics_service

    @service_error_handler("PlayerSyncService")
    @input_validation(validate_non_empty=["user_id"])
    async def sync(
        self,
        user_id: str,
        request: SyncRequest,
        now: Optional[datetime] = None,
    ) -> SyncResponse:
        """
        Run a full sync for one player tag.

        :param user_id: Owning user
        :param request: Tag, tier, current trophies and raw battle log
        :param now: Reference instant (defaults to utcnow)
        :returns: SyncResponse with status ``ok`` or ``partial``
        :raises ValidationError: When the player tag is invalid
        """
        tag = require_player_tag(request.player_tag, "sync")
        now = now or datetime.now(timezone.utc)

        with player_log_context(user_id, tag, operation="sync"):
            return await self._sync_player(user_id, tag, request, now)

    async def _sync_player(
        self, user_id: str, tag: str, request: SyncRequest, now: datetime
    ) -> SyncResponse:
        errors: List[SyncError] = []

        # Analytics see exactly what storage keeps: timed battles, newest first
        battles = select_battles_to_store(
            request.battles, request.tier, self.battle_service.config
        )

        ingest: Optional[IngestResult] = None
        if request.battles:
            try:
                ingest = await self.battle_service.ingest(
                    user_id, tag, request.battles, tier=request.tier, now=now
                )
            except ServiceException as e:
                logger.warning("sync_battle_history_failed", error=str(e))
                errors.append(
                    SyncError(
                        source="battlelog",
                        code="BATTLE_HISTORY_PERSIST_FAILED",
                        message="Battle history could not be persisted",
                    )
                )

        analytics = self.analytics_service.build_report(
            battles, now, player_tag=tag, current_trophies=request.trophies
        )

        stats = compute_battle_stats(battles)
        context = GoalProgressContext(
            player_trophies=request.trophies or 0,
            win_rate=stats.win_rate,
            streak=stats.streak,
        )

        goal_sync: Optional[GoalSyncResult] = None
        goals: List[GoalResponse] = []
        try:
            goal_sync = await self.goal_service.sync_progress(user_id, context, now)
            goals = await self.goal_service.list_goals(user_id)
        except ServiceException as e:
            logger.warning("sync_goals_failed", error=str(e))
            errors.append(
                SyncError(
                    source="goals",
                    code="GOAL_SYNC_PARTIAL_FAILURE",
                    message="Goals could not be fully synchronized",
                )
            )

        status = SyncStatus.PARTIAL if errors else SyncStatus.OK

        logger.info(
            "player_synced",
            tier=request.tier.value,
            status=status.value,
            battles=len(battles),
            tilt_level=analytics.tilt.state.level.value,
        )

        return SyncResponse(
            status=status,
            partial=status != SyncStatus.OK,
            player_tag=tag,
            ingest=ingest,
            analytics=analytics,
            goal_sync=goal_sync,
            goals=goals,
            errors=errors,
        )
