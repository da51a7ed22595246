"""
Persist crawled prices into the ``prices`` table.

One row per (player_id, grade).  The whole run is written with a single
bulk upsert keyed on that pair: an existing grade row gets its price
replaced, a missing one is inserted.  A failed write is logged and not
retried — whatever the database applied stays applied.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from config.settings import PRICE_TABLE
from models import PriceResult

logger = logging.getLogger(__name__)

PRICE_CONFLICT_KEY = "player_id,grade"


def build_price_rows(results: Sequence[PriceResult]) -> list[dict[str, Any]]:
    """Map results to upsert rows.

    ``player_id`` is stored as text.  If a (player, grade) pair appears
    twice the later price wins; PostgreSQL rejects a single
    ``INSERT … ON CONFLICT`` that touches the same key twice.
    """
    now_iso = datetime.now(timezone.utc).isoformat()
    rows: dict[tuple[str, int], dict[str, Any]] = {}
    for r in results:
        key = (str(r.player_id), r.grade)
        rows[key] = {
            "player_id": key[0],
            "grade": r.grade,
            "price": r.price,
            "updated_at": now_iso,
        }
    return list(rows.values())


def save_prices(
    db: Any,
    results: Sequence[PriceResult],
    *,
    dry_run: bool = False,
) -> int:
    """Upsert *results* and return the number of rows sent (0 on failure)."""
    rows = build_price_rows(results)
    if not rows:
        logger.info("No prices to save")
        return 0

    if dry_run:
        logger.info("[DRY RUN] Would upsert %d price rows", len(rows))
        return 0

    try:
        db.table(PRICE_TABLE).upsert(rows, on_conflict=PRICE_CONFLICT_KEY).execute()
    except Exception as exc:
        logger.error("Price upsert failed (%d rows): %s", len(rows), exc)
        return 0

    logger.info("Upserted %d price rows into %s", len(rows), PRICE_TABLE)
    return len(rows)
