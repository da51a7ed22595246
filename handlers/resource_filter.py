"""
Request filtering for DataCenter pages.

Images, fonts and media are never needed to read a price, and the
analytics beacons only slow the page down.  Blocked requests are aborted
outright; the page renders fine without them.
"""

import logging
from urllib.parse import urlparse

from playwright.async_api import Page, Route

from config.settings import BLOCKED_DOMAINS, BLOCKED_RESOURCE_TYPES

logger = logging.getLogger(__name__)


def _host_is_blocked(host: str, domains) -> bool:
    host = host.lower().rstrip(".")
    return any(host == d or host.endswith("." + d) for d in domains)


def should_block(
    resource_type: str,
    url: str,
    *,
    blocked_types=BLOCKED_RESOURCE_TYPES,
    blocked_domains=BLOCKED_DOMAINS,
) -> bool:
    """Return ``True`` if a request of *resource_type* to *url* should be aborted."""
    if resource_type in blocked_types:
        return True
    host = urlparse(url).hostname or ""
    return _host_is_blocked(host, blocked_domains)


async def _handle_route(route: Route) -> None:
    request = route.request
    if should_block(request.resource_type, request.url):
        await route.abort()
    else:
        await route.continue_()


async def install_resource_filter(page: Page) -> None:
    """Intercept every request issued by *page* and drop the blocked ones."""
    await page.route("**/*", _handle_route)
    logger.debug(
        "Resource filter installed (types=%s, domains=%s)",
        sorted(BLOCKED_RESOURCE_TYPES), ", ".join(BLOCKED_DOMAINS),
    )
