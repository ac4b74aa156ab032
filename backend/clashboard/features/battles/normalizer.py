"""
Battle normalization and content-addressed key building.

Raw battles arrive from the game API as opaque JSON-like dicts. This module
turns them into stable identities and typed values without ever raising on
malformed input: a bad field degrades to ``None``/``0``/``[]``.
"""

import hashlib
import json
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)

_COMPACT_BATTLE_TIME = re.compile(
    r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})\.(\d{3})Z$"
)


def normalize_player_tag(tag: Any) -> Optional[str]:
    """Normalize a player tag to ``#UPPERCASE`` form.

    :param tag: Raw tag, with or without the leading ``#``
    :returns: Normalized tag, or None when nothing remains after stripping
    """
    if not isinstance(tag, str):
        return None
    stripped = tag.strip()
    if stripped.startswith("#"):
        stripped = stripped[1:]
    stripped = stripped.upper()
    return f"#{stripped}" if stripped else None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def extract_card_ids(cards: Any) -> List[float]:
    """Extract sorted numeric card ids from a side's card list.

    :param cards: Raw ``cards`` value (list of dicts with an ``id``)
    :returns: Finite numeric ids sorted ascending, empty when absent
    """
    if not isinstance(cards, list):
        return []
    ids = [
        card.get("id")
        for card in cards
        if isinstance(card, Mapping) and _is_number(card.get("id"))
    ]
    return sorted(ids)


def parse_battle_time(value: Any) -> Optional[datetime]:
    """Parse a battle timestamp into an aware UTC datetime.

    Accepts the compact API form (``20260208T123000.000Z``) and ISO-8601.
    Naive ISO values are treated as UTC.

    :param value: Raw ``battleTime`` value
    :returns: Parsed datetime, or None when missing or unparseable
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    compact = _COMPACT_BATTLE_TIME.match(text)
    if compact:
        year, month, day, hour, minute, second, millis = (
            int(part) for part in compact.groups()
        )
        try:
            return datetime(
                year, month, day, hour, minute, second, millis * 1000,
                tzinfo=timezone.utc,
            )
        except ValueError:
            return None

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def extract_battle_time(battle: Any) -> Optional[datetime]:
    """Parse the ``battleTime`` field of a raw battle."""
    if not isinstance(battle, Mapping):
        return None
    return parse_battle_time(battle.get("battleTime"))


def _first_side(battle: Any, side: str) -> Mapping[str, Any]:
    if not isinstance(battle, Mapping):
        return {}
    entries = battle.get(side)
    if isinstance(entries, list) and entries and isinstance(entries[0], Mapping):
        return entries[0]
    return {}


def get_crowns(battle: Any, side: str = "team") -> float:
    """Crowns scored by ``team`` or ``opponent``; missing values count as 0."""
    crowns = _first_side(battle, side).get("crowns")
    return crowns if _is_number(crowns) else 0


def is_win(battle: Any) -> bool:
    """True when the player's side scored more crowns."""
    return get_crowns(battle, "team") > get_crowns(battle, "opponent")


def is_loss(battle: Any) -> bool:
    """True when the opponent scored more crowns."""
    return get_crowns(battle, "team") < get_crowns(battle, "opponent")


def get_trophy_change(battle: Any) -> float:
    """Signed trophy change of the player's side, 0 when absent."""
    change = _first_side(battle, "team").get("trophyChange")
    return change if _is_number(change) else 0


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _number_or_none(value: Any) -> Optional[float]:
    return value if _is_number(value) else None


def build_canonical_payload(
    user_id: str, player_tag: Any, battle: Any
) -> Dict[str, Any]:
    """Build the ordered mapping hashed into a battle key.

    Key order is part of the contract: changing it changes every stored key.
    """
    battle = battle if isinstance(battle, Mapping) else {}
    team = _first_side(battle, "team")
    opponent = _first_side(battle, "opponent")
    game_mode = battle.get("gameMode")
    game_mode = game_mode if isinstance(game_mode, Mapping) else {}
    mode = game_mode.get("id")
    if mode is None:
        mode = game_mode.get("name")

    return {
        "u": user_id,
        "p": normalize_player_tag(player_tag),
        "t": _string_or_none(battle.get("battleTime")),
        "type": _string_or_none(battle.get("type")),
        "mode": mode,
        "teamTag": _string_or_none(team.get("tag")),
        "oppTag": _string_or_none(opponent.get("tag")),
        "teamCrowns": _number_or_none(team.get("crowns")),
        "oppCrowns": _number_or_none(opponent.get("crowns")),
        "trophyChange": _number_or_none(team.get("trophyChange")),
        "teamCards": extract_card_ids(team.get("cards")),
        "oppCards": extract_card_ids(opponent.get("cards")),
    }


def build_battle_key(user_id: str, player_tag: Any, battle: Any) -> str:
    """Derive the content-addressed key of a (user, battle) pair.

    Identical battle content under the same user always yields the same key;
    card order inside a side does not matter.

    :param user_id: Owning user id
    :param player_tag: Player tag, normalized before hashing
    :param battle: Raw battle payload
    :returns: SHA-256 hex digest
    """
    canonical = build_canonical_payload(user_id, player_tag, battle)
    payload = json.dumps(canonical, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def order_newest_first(battles: Any) -> List[Dict[str, Any]]:
    """Battles with a parseable time, newest first.

    Input order is irrelevant; battles played at the same instant keep their
    relative order.

    :param battles: Raw battle payloads in any order
    :returns: Timed battles sorted by ``battleTime`` descending
    """
    if not isinstance(battles, (list, tuple)):
        return []
    timed = [
        (battle_time, battle)
        for battle_time, battle in ((extract_battle_time(b), b) for b in battles)
        if battle_time is not None
    ]
    timed.sort(key=lambda entry: entry[0], reverse=True)
    return [battle for _, battle in timed]
