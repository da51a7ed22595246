"""
FC Online price crawler.

Selects players from Supabase (``player_reports``), opens each player's
DataCenter page in a headless browser, reads the displayed price for every
requested enhancement grade, then upserts the prices into ``prices``.
Every run is tracked in ``crawl_runs``.

Usage:
    python main.py                          # season 830, grades 1-8
    python main.py --season 830 --season 831 --grades 1 5 8
    python main.py --min-ovr 110 --dry-run

Environment variables:
    SUPABASE_URL, SUPABASE_SERVICE_KEY   # required (players are read even in dry runs)
    DRY_RUN=true                         # crawl only, skip all DB writes
    CRAWLER_ENV=production               # use system Chrome
    CHROME_EXECUTABLE_PATH=...           # override system Chrome path
    RESTRICTIONS_PATH=...                # alternate exclusion list
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Callable

from supabase import create_client, Client

from config.restrictions import load_restrictions
from config.settings import (
    DEFAULT_GRADES, DEFAULT_SEASONS, DRY_RUN, RUN_TABLE,
    SUPABASE_KEY, SUPABASE_URL,
)
from crawler import SessionManager, crawl_prices
from models import CrawlStats, normalize_grades
from player_search import search_players
from price_store import save_prices

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("orchestrator")


def get_db() -> Client:
    """Create the Supabase client from the environment."""
    if not SUPABASE_URL or not SUPABASE_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
    return create_client(SUPABASE_URL, SUPABASE_KEY)


# ---------------------------------------------------------------------------
# Run tracking
# ---------------------------------------------------------------------------


def _create_run(
    db: Any,
    *,
    seasons: list[int | str],
    grades: list[int],
    dry_run: bool,
) -> str | None:
    """Insert a ``crawl_runs`` row and return its id (``None`` if skipped)."""
    if dry_run:
        logger.info("[DRY RUN] Would create crawl_runs entry")
        return None
    try:
        row = db.table(RUN_TABLE).insert(
            {
                "status": "running",
                "seasons": [str(s) for s in seasons],
                "grades": grades,
            }
        ).execute()
        run_id: str = row.data[0]["id"]
    except Exception as exc:
        logger.warning("Could not create crawl_runs entry: %s", exc)
        return None
    logger.info("Crawl run started: %s", run_id)
    return run_id


def _complete_run(
    db: Any,
    run_id: str | None,
    *,
    status: str,
    stats: CrawlStats,
    prices_saved: int,
    runtime_seconds: int,
) -> None:
    if run_id is None:
        return
    try:
        db.table(RUN_TABLE).update(
            {
                "status": status,
                "completed_at": datetime.now(timezone.utc).isoformat(),
                "players_crawled": stats.players_crawled,
                "players_failed": stats.failed_players,
                "prices_found": stats.grades_ok,
                "prices_saved": prices_saved,
                "runtime_seconds": runtime_seconds,
                "stats": stats.as_dict(),
            }
        ).eq("id", run_id).execute()
    except Exception as exc:
        logger.warning("Could not update crawl run %s: %s", run_id, exc)
        return
    logger.info("Run %s finished — status=%s", run_id, status)


def _run_status(stats: CrawlStats, found: int, saved: int, dry_run: bool) -> str:
    if not dry_run and found and not saved:
        return "completed_with_errors"
    if stats.players_failed or stats.grades_failed:
        return "completed_with_errors"
    return "completed"


# ---------------------------------------------------------------------------
# Main pipeline
# ---------------------------------------------------------------------------


async def run(
    seasons: list[int | str] | None = None,
    *,
    grades: list[int] | None = None,
    min_ovr: int = 0,
    name: str = "",
    dry_run: bool = DRY_RUN,
    db: Any = None,
    session_factory: Callable[[], SessionManager] = SessionManager,
) -> CrawlStats:
    """Run the full crawl: select players, crawl grades, save prices.

    An empty player selection returns before any browser session is opened,
    so there is no session to tear down on that path.
    """
    start = time.time()
    seasons = list(DEFAULT_SEASONS if seasons is None else seasons)
    grades = normalize_grades(DEFAULT_GRADES if grades is None else grades)

    logger.info("=" * 60)
    logger.info("FC Online Price Crawler Starting")
    logger.info("  DRY_RUN:  %s", dry_run)
    logger.info("  SEASONS:  %s", ", ".join(str(s) for s in seasons) or "(all)")
    logger.info("  GRADES:   %s", grades)
    logger.info("  MIN_OVR:  %s", min_ovr or "-")
    logger.info("=" * 60)

    if db is None:
        db = get_db()

    restrictions = load_restrictions()
    players = search_players(db, seasons, min_ovr=min_ovr, name=name)
    stats = CrawlStats()
    run_id = _create_run(db, seasons=seasons, grades=grades, dry_run=dry_run)

    if not players:
        logger.warning("No players matched — nothing to crawl")
        save_prices(db, [], dry_run=dry_run)
        _complete_run(db, run_id, status="completed", stats=stats,
                      prices_saved=0, runtime_seconds=int(time.time() - start))
        return stats

    try:
        async with session_factory() as session:
            results = await crawl_prices(
                session, players, grades,
                restrictions=restrictions,
                stats=stats,
            )
    except Exception:
        _complete_run(db, run_id, status="failed", stats=stats,
                      prices_saved=0, runtime_seconds=int(time.time() - start))
        raise

    saved = save_prices(db, results, dry_run=dry_run)
    elapsed = time.time() - start
    status = _run_status(stats, len(results), saved, dry_run)
    _complete_run(db, run_id, status=status, stats=stats,
                  prices_saved=saved, runtime_seconds=int(elapsed))

    logger.info("=" * 60)
    logger.info("CRAWL COMPLETE")
    logger.info("  Status:     %s", status)
    logger.info("  Players:    %d crawled / %d requested", stats.players_crawled, stats.players_requested)
    logger.info("  Excluded:   %d", stats.players_excluded)
    logger.info("  Prices:     %d found, %d saved", len(results), saved)
    logger.info("  Grades:     %d empty, %d failed", stats.grades_empty, stats.grades_failed)
    logger.info("  Duration:   %.1f min", elapsed / 60)
    if stats.failed_players:
        logger.info("  Failed players: %s", ", ".join(str(p) for p in stats.failed_players[:20]))
    logger.info("=" * 60)
    return stats


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl FC Online DataCenter prices per enhancement grade")
    parser.add_argument(
        "--season", dest="seasons", action="append", default=None,
        help="Season code to crawl (repeatable, default: %s)" % DEFAULT_SEASONS,
    )
    parser.add_argument(
        "--grades", nargs="+", type=int, default=None,
        help="Enhancement grades to read (default: 1-8)",
    )
    parser.add_argument("--min-ovr", type=int, default=0, help="Minimum best OVR (ignored if <= 10)")
    parser.add_argument("--name", default="", help="Only players whose name contains this text")
    parser.add_argument("--dry-run", action="store_true", help="Crawl without writing to the database")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(
            run(
                args.seasons,
                grades=args.grades,
                min_ovr=args.min_ovr,
                name=args.name,
                dry_run=args.dry_run or DRY_RUN,
            )
        )
    except Exception as exc:
        logger.error("Error in crawler: %s", exc, exc_info=True)
        return 1
    logger.info("Crawling process completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
