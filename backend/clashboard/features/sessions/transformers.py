"""Data transformation utilities for the sessions feature.

Maps engine dataclasses onto API response schemas.
"""

from typing import List, Sequence

from .clustering import PushSession
from .schemas import (
    BattleStatsResponse,
    DailySummaryResponse,
    PushSessionResponse,
    StreakResponse,
    TrophyProgressionPointResponse,
)
from .summary import BattleStats, DailySummary, Streak, TrophyProgressionPoint


class SessionTransformer:
    """Data mapper for the sessions feature."""

    @staticmethod
    def session_to_response(session: PushSession) -> PushSessionResponse:
        """Transform a push session, replacing battles with their count."""
        return PushSessionResponse(
            start_time=session.start_time,
            end_time=session.end_time,
            battles=session.size,
            wins=session.wins,
            losses=session.losses,
            draws=session.draws,
            win_rate=session.win_rate,
            net_trophies=session.net_trophies,
        )

    @staticmethod
    def sessions_to_response(
        sessions: Sequence[PushSession],
    ) -> List[PushSessionResponse]:
        return [SessionTransformer.session_to_response(s) for s in sessions]

    @staticmethod
    def streak_to_response(streak: Streak) -> StreakResponse:
        return StreakResponse(type=streak.type, count=streak.count)

    @staticmethod
    def stats_to_response(stats: BattleStats) -> BattleStatsResponse:
        """Transform overall battle stats."""
        return BattleStatsResponse(
            total=stats.total,
            wins=stats.wins,
            losses=stats.losses,
            win_rate=stats.win_rate,
            streak=SessionTransformer.streak_to_response(stats.streak),
            last_battle_at=stats.last_battle_at,
        )

    @staticmethod
    def daily_to_response(summary: DailySummary) -> DailySummaryResponse:
        """Transform a daily summary."""
        return DailySummaryResponse(
            date=summary.date,
            battles=summary.battles,
            wins=summary.wins,
            losses=summary.losses,
            trophy_delta=summary.trophy_delta,
            win_rate=summary.win_rate,
            streak=SessionTransformer.streak_to_response(summary.streak),
            sessions=SessionTransformer.sessions_to_response(summary.sessions),
        )

    @staticmethod
    def progression_to_response(
        points: Sequence[TrophyProgressionPoint],
    ) -> List[TrophyProgressionPointResponse]:
        return [
            TrophyProgressionPointResponse(
                time=point.time,
                trophies=point.trophies,
                session_index=point.session_index,
                trophy_delta=point.trophy_delta,
                wins=point.wins,
                losses=point.losses,
            )
            for point in points
        ]
