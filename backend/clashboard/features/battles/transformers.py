"""Data transformation utilities for the battles feature.

Converts raw game API battles into storage rows and stored rows back into
API responses.
"""

from typing import Any, Dict, List, Sequence, Tuple

import structlog

from .normalizer import build_battle_key, extract_battle_time
from .orm_models import BattleORM
from .schemas import BattleResponse

logger = structlog.get_logger(__name__)


class BattleTransformer:
    """Data mapper for the battles feature."""

    @staticmethod
    def raw_to_rows(
        user_id: str, player_tag: str, battles: Sequence[Any]
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Build storage rows for raw battles.

        Battles without a parseable time are skipped; they cannot be keyed or
        ordered. Duplicates within the same payload collapse onto one row.

        Args:
            user_id: Owning user
            player_tag: Normalized player tag
            battles: Raw battle payloads

        Returns:
            Tuple of (rows, skipped_count)
        """
        rows: Dict[str, Dict[str, Any]] = {}
        skipped = 0

        for battle in battles:
            battle_time = extract_battle_time(battle)
            if battle_time is None:
                skipped += 1
                continue

            key = build_battle_key(user_id, player_tag, battle)
            rows.setdefault(
                key,
                {
                    "battle_key": key,
                    "user_id": user_id,
                    "player_tag": player_tag,
                    "battle_time": battle_time,
                    "battle_json": dict(battle),
                },
            )

        if skipped:
            logger.warning(
                "battles_skipped_without_time",
                user_id=user_id,
                player_tag=player_tag,
                skipped=skipped,
            )

        return list(rows.values()), skipped

    @staticmethod
    def orm_to_response(orm: BattleORM) -> BattleResponse:
        """Transform a stored battle into an API response."""
        return BattleResponse(
            battle_key=orm.battle_key,
            player_tag=orm.player_tag,
            battle_time=orm.battle_time,
            battle=orm.battle_json,
        )

    @staticmethod
    def orm_to_raw(orms: Sequence[BattleORM]) -> List[Dict[str, Any]]:
        """Unwrap stored battles into raw payloads for the analytics engines."""
        return [orm.battle_json for orm in orms]
