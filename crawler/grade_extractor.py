"""
Per-grade price extraction from a DataCenter player page.

The page shows the price for one enhancement grade at a time.  Switching
grade is a UI sequence:

  1. open the grade selector (``.en_selector_wrap .en_wrap``);
  2. wait for the requested grade's option to be visible, let the list
     finish rendering, click the first *visible* copy of that option;
  3. let the price panel refresh, wait for non-empty text, read it.

Every step has a bounded wait.  ``extract_grade`` never raises: timeouts
and other errors come back as a ``failed`` outcome so the caller can move
on to the next grade.
"""

from __future__ import annotations

import logging

from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from config.settings import (
    BASELINE_TIMEOUT_MS,
    GRADE_OPTION_TIMEOUT_MS,
    GRADE_WRAPPER_SELECTOR,
    OPTION_SETTLE_SEC,
    PANEL_SETTLE_SEC,
    POLL_INTERVAL_MS,
    PRICE_SELECTOR,
    PRICE_TIMEOUT_MS,
    SUMMARY_SELECTOR,
    grade_option_selector,
)
from handlers import click_first_visible, settle
from models import GradeOutcome, PriceResult

logger = logging.getLogger(__name__)

# True once the summary element carries the player name in its title.
_JS_SUMMARY_READY = """
(selector) => {
    const el = document.querySelector(selector);
    const title = el && el.getAttribute('title');
    return !!(title && title.trim() !== '');
}
"""

_JS_TEXT_PRESENT = """
(selector) => {
    const el = document.querySelector(selector);
    return !!(el && el.textContent.trim() !== '');
}
"""

_JS_READ_TEXT = """
(selector) => {
    const el = document.querySelector(selector);
    return el ? el.textContent : null;
}
"""


async def wait_until_loaded(page: Page) -> None:
    """Block until the player summary has finished its initial data load.

    Raises Playwright's ``TimeoutError`` if it has not within
    ``BASELINE_TIMEOUT_MS``; without it no grade can be read.
    """
    await page.wait_for_function(
        _JS_SUMMARY_READY,
        arg=SUMMARY_SELECTOR,
        timeout=BASELINE_TIMEOUT_MS,
        polling=POLL_INTERVAL_MS,
    )


async def _select_grade(page: Page, grade: int) -> None:
    option = grade_option_selector(grade)

    await page.wait_for_selector(GRADE_WRAPPER_SELECTOR, timeout=GRADE_OPTION_TIMEOUT_MS)
    await page.click(GRADE_WRAPPER_SELECTOR)
    # Hidden duplicates may precede the shown option; match visible nodes only.
    await page.wait_for_selector(
        f"{option}:visible", state="visible", timeout=GRADE_OPTION_TIMEOUT_MS,
    )

    await settle(OPTION_SETTLE_SEC)
    # Hidden duplicates of the option may be in the DOM; click a visible one.
    await click_first_visible(
        page,
        option,
        timeout_sec=GRADE_OPTION_TIMEOUT_MS / 1000,
        interval_sec=POLL_INTERVAL_MS / 1000,
    )
    await settle(PANEL_SETTLE_SEC)


async def _read_price(page: Page) -> str:
    await page.wait_for_function(
        _JS_TEXT_PRESENT,
        arg=PRICE_SELECTOR,
        timeout=PRICE_TIMEOUT_MS,
        polling=POLL_INTERVAL_MS,
    )
    text = await page.evaluate(_JS_READ_TEXT, PRICE_SELECTOR)
    return (text or "").strip()


async def extract_grade(page: Page, player_id: int, grade: int) -> GradeOutcome:
    """Select *grade* on an already-loaded player page and read its price."""
    try:
        await _select_grade(page, grade)
        price = await _read_price(page)
    except PlaywrightTimeout as exc:
        logger.warning("[%s] Grade %d timed out — skipped (%s)", player_id, grade, exc)
        return GradeOutcome.failed(f"timeout: {exc}")
    except Exception as exc:
        logger.warning("[%s] Grade %d failed — skipped (%s)", player_id, grade, exc)
        return GradeOutcome.failed(str(exc))

    if not price:
        logger.info("[%s] Grade %d → no price text (skipped)", player_id, grade)
        return GradeOutcome.empty()

    logger.info("[%s] Grade %d → %s", player_id, grade, price)
    return GradeOutcome.ok(PriceResult(player_id=player_id, grade=grade, price=price))
