"""
Browser session lifetime.

One ``SessionManager`` owns exactly one Playwright driver, one Chromium
process and one isolated browsing context.  Pages are handed out one at a
time by ``new_page()`` with the resource filter already installed.

Usage::

    async with SessionManager() as session:
        page = await session.new_page()
        ...

``stop()`` runs on every exit path of the ``async with`` block.  Teardown
problems are logged and swallowed; launch problems raise
``SessionStartError`` because nothing can be crawled without a browser.
"""

from __future__ import annotations

import logging

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from config.settings import BROWSER_ARGS, get_executable_path
from handlers import install_resource_filter

logger = logging.getLogger(__name__)


class SessionStartError(RuntimeError):
    """The browser or its context could not be started."""


class SessionManager:
    """Owns the browser + context used for a whole crawl run."""

    def __init__(
        self,
        *,
        headless: bool = True,
        executable_path: str | None = None,
        extra_args: list[str] | None = None,
    ) -> None:
        self.headless = headless
        self.executable_path = executable_path or get_executable_path()
        self.args = BROWSER_ARGS + (extra_args or [])

        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    @property
    def active(self) -> bool:
        return self._context is not None

    # ------------------------------------------------------------------
    # Async context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "SessionManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Launch a fresh browser and context, replacing any previous session."""
        if self._pw or self._browser or self._context:
            logger.info("Previous browser session still open — closing it first")
            await self.stop()

        try:
            self._pw = await async_playwright().start()
            self._browser = await self._pw.chromium.launch(
                headless=self.headless,
                executable_path=self.executable_path,
                args=self.args,
            )
            self._context = await self._browser.new_context(ignore_https_errors=True)
        except Exception as exc:
            logger.error("Browser session failed to start: %s", exc)
            await self.stop()
            raise SessionStartError(f"could not start browser session: {exc}") from exc

        logger.info(
            "Browser session started (headless=%s, executable=%s)",
            self.headless, self.executable_path or "bundled chromium",
        )

    async def new_page(self) -> Page:
        """Open a page in the current context with request filtering installed."""
        if self._context is None:
            raise RuntimeError("SessionManager.new_page() called before start()")
        page = await self._context.new_page()
        await install_resource_filter(page)
        return page

    async def stop(self) -> None:
        """Close context, browser and driver.  Never raises."""
        context, browser, pw = self._context, self._browser, self._pw
        self._context = self._browser = self._pw = None

        for label, obj in (("context", context), ("browser", browser)):
            if obj is None:
                continue
            try:
                await obj.close()
            except Exception as exc:
                logger.warning("Error closing %s: %s", label, exc)
        if pw is not None:
            try:
                await pw.stop()
            except Exception as exc:
                logger.warning("Error stopping playwright: %s", exc)

        if context or browser:
            logger.info("Browser session closed")
