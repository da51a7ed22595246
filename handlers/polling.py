"""
Wait helpers for asynchronous DOM updates.

``poll_until`` is the generic primitive: it re-evaluates an async predicate
until it returns something truthy or the window closes.  The grade
selector can hold several nodes for the same option, some of them
hidden, so ``click_first_visible`` polls for the first node that is
actually on screen.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

logger = logging.getLogger(__name__)


async def poll_until(
    predicate: Callable[[], Awaitable[Any]],
    *,
    timeout_sec: float,
    interval_sec: float = 0.1,
    description: str = "condition",
) -> Any:
    """Await *predicate* until it returns a truthy value and return that value.

    The predicate is always evaluated at least once.  Raises Playwright's
    ``TimeoutError`` once *timeout_sec* has elapsed without success so
    callers can treat it exactly like a timed-out ``wait_for_*`` call.
    """
    deadline = time.monotonic() + timeout_sec
    while True:
        value = await predicate()
        if value:
            return value
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise PlaywrightTimeout(
                f"Timeout {timeout_sec * 1000:.0f}ms exceeded waiting for {description}"
            )
        await asyncio.sleep(min(interval_sec, remaining))


async def settle(seconds: float) -> None:
    """Unconditional pause for UI transitions that expose no readiness signal."""
    if seconds > 0:
        await asyncio.sleep(seconds)


async def click_first_visible(
    page: Page,
    selector: str,
    *,
    timeout_sec: float,
    interval_sec: float = 0.1,
) -> int:
    """Click the first node matching *selector* that is currently visible.

    Returns the index of the clicked node among all matches.  Raises
    Playwright's ``TimeoutError`` if no match becomes visible in time.
    """

    async def _find_visible():
        elements = await page.query_selector_all(selector)
        for index, element in enumerate(elements):
            if await element.is_visible():
                return index, element
        return None

    index, element = await poll_until(
        _find_visible,
        timeout_sec=timeout_sec,
        interval_sec=interval_sec,
        description=f"visible {selector}",
    )
    await element.click()
    if index:
        logger.debug("Clicked %s at index %d (earlier copies hidden)", selector, index)
    return index
