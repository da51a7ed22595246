"""
Select which players to crawl from ``player_reports``.

Player spids encode their season: the season number (the last three
digits of a season code) times 1,000,000 plus a per-season index.  A
season filter is therefore an id range.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from config.settings import PLAYER_TABLE
from models import PlayerTarget

logger = logging.getLogger(__name__)

SEASON_ID_SPAN = 1_000_000
DEFAULT_LIMIT = 10_000

# OVR filters at or below this are treated as "no filter".
_MIN_OVR_FLOOR = 10


def season_id_range(season: int | str) -> tuple[int, int]:
    """Inclusive spid range of a season code (e.g. ``830`` or ``"2012830"``)."""
    number = int(str(season)[-3:])
    start = number * SEASON_ID_SPAN
    return start, start + SEASON_ID_SPAN - 1


def _base_query(db: Any, *, name: str, min_ovr: int) -> Any:
    query = db.table(PLAYER_TABLE).select("id")
    if name:
        query = query.ilike("name", f"%{name}%")
    if min_ovr and min_ovr > _MIN_OVR_FLOOR:
        query = query.gte("max_ovr", int(min_ovr))
    return query


def search_players(
    db: Any,
    seasons: Iterable[int | str] | int | str | None = None,
    *,
    min_ovr: int = 0,
    name: str = "",
    limit: int = DEFAULT_LIMIT,
) -> list[PlayerTarget]:
    """Return players to crawl, strongest first within each season.

    One query per season; results are concatenated in season order with
    repeats dropped.  Without seasons a single unscoped query is issued.
    """
    if seasons is None or seasons == "":
        season_list: list[int | str] = []
    elif isinstance(seasons, (int, str)):
        season_list = [seasons]
    else:
        season_list = list(seasons)

    batches: list[list[dict[str, Any]]] = []
    if season_list:
        for season in season_list:
            low, high = season_id_range(season)
            query = _base_query(db, name=name, min_ovr=min_ovr).gte("id", low).lte("id", high)
            rows = (
                query.order("position_max_ovr", desc=True)
                .limit(limit)
                .execute()
                .data
                or []
            )
            logger.info("Season %s: %d players (ids %d–%d)", season, len(rows), low, high)
            batches.append(rows)
    else:
        rows = (
            _base_query(db, name=name, min_ovr=min_ovr)
            .order("position_max_ovr", desc=True)
            .limit(limit)
            .execute()
            .data
            or []
        )
        logger.info("All seasons: %d players", len(rows))
        batches.append(rows)

    players: list[PlayerTarget] = []
    seen: set[int] = set()
    for rows in batches:
        for row in rows:
            player_id = int(row["id"])
            if player_id in seen:
                continue
            seen.add(player_id)
            players.append(PlayerTarget(id=player_id))
    return players
