"""Analytics service.

Runs the pure session and tilt engines over supplied or stored battles.
Engine parameters come from explicit config objects, never from settings
read inside the engines.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

import structlog

from clashboard.core.decorators import service_error_handler
from clashboard.core.enums import HistoryRange, SubscriptionTier
from clashboard.features.battles.service import (
    BattleHistoryService,
    require_player_tag,
)
from clashboard.features.sessions.clustering import (
    SessionConfig,
    cluster_push_sessions,
    compute_consecutive_losses,
)
from clashboard.features.sessions.schemas import SessionsResponse
from clashboard.features.sessions.summary import (
    build_trophy_progression,
    compute_battle_stats,
    compute_daily_summary,
    filter_battles_by_range,
)
from clashboard.features.sessions.transformers import SessionTransformer
from clashboard.features.tilt.detection import detect_tilt, detect_tilt_history
from clashboard.features.tilt.engine import TiltConfig, compute_tilt_state
from clashboard.features.tilt.schemas import TiltResponse
from clashboard.features.tilt.transformers import TiltTransformer

from .schemas import AnalyticsReport

logger = structlog.get_logger(__name__)


class AnalyticsService:
    """Service computing sessions, stats and tilt for a battle list."""

    def __init__(
        self,
        battle_service: Optional[BattleHistoryService] = None,
        session_config: Optional[SessionConfig] = None,
        tilt_config: Optional[TiltConfig] = None,
    ):
        """
        Initialize analytics service.

        :param battle_service: Source of stored battles (stored analytics only)
        :param session_config: Clustering parameters
        :param tilt_config: Tilt parameters
        """
        self.battle_service = battle_service
        self.session_config = session_config or SessionConfig()
        self.tilt_config = tilt_config or TiltConfig()

    @service_error_handler("AnalyticsService")
    async def cluster_sessions(
        self,
        battles: Sequence[Dict[str, Any]],
        max_gap_minutes: Optional[int] = None,
        min_battles: Optional[int] = None,
    ) -> SessionsResponse:
        """Cluster battles into push sessions, with optional overrides."""
        defaults = self.session_config
        config = SessionConfig(
            max_gap_minutes=(
                defaults.max_gap_minutes if max_gap_minutes is None else max_gap_minutes
            ),
            min_battles=defaults.min_battles if min_battles is None else min_battles,
        )
        sessions = cluster_push_sessions(battles, config)
        return SessionsResponse(
            sessions=SessionTransformer.sessions_to_response(sessions),
            consecutive_losses=compute_consecutive_losses(battles),
        )

    @service_error_handler("AnalyticsService")
    async def evaluate_tilt(
        self,
        battles: Sequence[Dict[str, Any]],
        now: Optional[datetime] = None,
    ) -> TiltResponse:
        """Decayed tilt state, current loss streak and past tilt runs."""
        return self._tilt(battles, now or datetime.now(timezone.utc))

    def _tilt(self, battles: Sequence[Dict[str, Any]], now: datetime) -> TiltResponse:
        return TiltTransformer.to_response(
            compute_tilt_state(battles, now, self.tilt_config),
            detect_tilt(battles),
            detect_tilt_history(battles),
        )

    def build_report(
        self,
        battles: Sequence[Dict[str, Any]],
        now: datetime,
        player_tag: Optional[str] = None,
        current_trophies: Optional[float] = None,
        history_range: HistoryRange = HistoryRange.WEEK,
    ) -> AnalyticsReport:
        """
        Compute the full analytics report for a newest-first battle list.

        :param battles: Raw battles, newest first
        :param now: Reference instant for tilt decay and "today"
        :param player_tag: Normalized tag echoed in the report
        :param current_trophies: Enables the trophy progression when known
        :param history_range: Range of the trophy progression
        :returns: AnalyticsReport
        """
        progression = []
        if current_trophies is not None:
            progression = build_trophy_progression(
                filter_battles_by_range(battles, history_range, now),
                current_trophies,
                self.session_config,
            )

        report = AnalyticsReport(
            player_tag=player_tag,
            battles=len(battles),
            push_sessions=SessionTransformer.sessions_to_response(
                cluster_push_sessions(battles, self.session_config)
            ),
            consecutive_losses=compute_consecutive_losses(battles),
            stats=SessionTransformer.stats_to_response(compute_battle_stats(battles)),
            tilt=self._tilt(battles, now),
            daily_summary=SessionTransformer.daily_to_response(
                compute_daily_summary(battles, now, self.session_config)
            ),
            history_range=history_range,
            trophy_progression=SessionTransformer.progression_to_response(
                progression
            ),
        )

        logger.debug(
            "analytics_report_built",
            player_tag=player_tag,
            battles=len(battles),
            sessions=len(report.push_sessions),
            tilt_level=report.tilt.state.level.value,
        )
        return report

    @service_error_handler("AnalyticsService")
    async def get_player_analytics(
        self,
        user_id: str,
        player_tag: Any,
        tier: SubscriptionTier = SubscriptionTier.FREE,
        current_trophies: Optional[float] = None,
        history_range: HistoryRange = HistoryRange.WEEK,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """
        Compute analytics from a player's stored battles.

        :param user_id: Owning user
        :param player_tag: Player tag to read
        :param tier: Subscription tier, bounds the stored history read
        :param current_trophies: Enables the trophy progression when known
        :param history_range: Range of the trophy progression
        :param now: Reference instant (defaults to utcnow)
        :returns: AnalyticsReport
        """
        if self.battle_service is None:
            raise RuntimeError("Stored analytics need a battle history service")

        tag = require_player_tag(player_tag, "get_player_analytics")
        now = now or datetime.now(timezone.utc)
        battles = await self.battle_service.get_raw_battles(
            user_id, tag, tier=tier, now=now
        )
        return self.build_report(
            battles,
            now,
            player_tag=tag,
            current_trophies=current_trophies,
            history_range=history_range,
        )
