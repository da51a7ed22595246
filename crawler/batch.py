"""
Batch crawl over players × grades.

Players are processed strictly one after another on a single browser
context: one page per player, closed before the next one opens.  Failures
are contained at the smallest unit of work:

  - a restricted or repeated player is skipped before navigation;
  - a navigation / initial-load failure skips that player;
  - a grade failure (timeout, missing option, empty price) skips that
    grade only.

The returned list is ordered by player, then grade.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from playwright.async_api import Page

from config.settings import GOTO_TIMEOUT_MS, WAIT_UNTIL, player_url
from models import CrawlStats, PlayerTarget, PriceResult, normalize_grades
from .grade_extractor import extract_grade, wait_until_loaded

logger = logging.getLogger(__name__)


class PageSource(Protocol):
    async def new_page(self) -> Page: ...


async def _crawl_player(
    session: PageSource,
    player_id: int,
    grades: list[int],
    stats: CrawlStats,
) -> list[PriceResult] | None:
    """Crawl every grade of one player.  ``None`` means the player failed."""
    results: list[PriceResult] = []
    page: Page | None = None
    try:
        page = await session.new_page()
        url = player_url(player_id)
        logger.info("[%s] Navigating to %s", player_id, url)
        await page.goto(url, wait_until=WAIT_UNTIL, timeout=GOTO_TIMEOUT_MS)
        await wait_until_loaded(page)
    except Exception as exc:
        logger.error("[%s] Page did not load, skipping grades %s: %s", player_id, grades, exc)
        await _close_page(page, player_id)
        return None

    try:
        for grade in grades:
            outcome = await extract_grade(page, player_id, grade)
            stats.record(outcome)
            if outcome.result is not None:
                results.append(outcome.result)
    finally:
        await _close_page(page, player_id)
    return results


async def _close_page(page: Page | None, player_id: int) -> None:
    if page is None:
        return
    try:
        await page.close()
    except Exception as exc:
        logger.warning("[%s] Error closing page: %s", player_id, exc)


async def crawl_prices(
    session: PageSource,
    players: Iterable[PlayerTarget],
    grades: int | list[int],
    *,
    restrictions: frozenset[int] | set[int] = frozenset(),
    stats: CrawlStats | None = None,
) -> list[PriceResult]:
    """Crawl the price of each requested grade for every allowed player.

    *session* only needs ``new_page()``; a started ``SessionManager`` is
    the normal argument.  *restrictions* holds player ids that must never
    be visited.  Pass a ``CrawlStats`` to collect counters for the run.
    """
    grades = normalize_grades(grades)
    stats = stats if stats is not None else CrawlStats()
    results: list[PriceResult] = []
    seen: set[int] = set()

    for player in players:
        player_id = int(player.id)
        stats.players_requested += 1

        if player_id in restrictions:
            logger.debug("[%s] Restricted player — skipped", player_id)
            stats.players_excluded += 1
            continue
        if player_id in seen:
            logger.debug("[%s] Already crawled this run — skipped", player_id)
            stats.players_duplicate += 1
            continue
        seen.add(player_id)

        player_results = await _crawl_player(session, player_id, grades, stats)
        if player_results is None:
            stats.players_failed += 1
            stats.failed_players.append(player_id)
            continue
        stats.players_crawled += 1
        results.extend(player_results)

    logger.info(
        "Crawl finished: %d prices from %d players (%d excluded, %d failed)",
        len(results), stats.players_crawled, stats.players_excluded, stats.players_failed,
    )
    return results
