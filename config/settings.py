"""
Crawler configuration — environment, browser launch options, page selectors
and wait windows for the FC Online DataCenter player page.

Everything the crawl touches on the remote page is addressed through the
selectors below, so a site redesign should only need edits here.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")

CRAWLER_ENV = os.getenv("CRAWLER_ENV", "development").lower()
DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"

RESTRICTIONS_PATH = Path(
    os.getenv(
        "RESTRICTIONS_PATH",
        str(Path(__file__).resolve().parent / "player_restrictions.json"),
    )
)

# Tables
PLAYER_TABLE = "player_reports"
PRICE_TABLE = "prices"
RUN_TABLE = "crawl_runs"

# ---------------------------------------------------------------------------
# Browser / Playwright defaults
# ---------------------------------------------------------------------------

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-gpu",
    "--no-zygote",
]

DEFAULT_CHROME_PATH = "/usr/bin/google-chrome-stable"


def get_executable_path() -> str | None:
    """Chrome binary to launch, or ``None`` for Playwright's bundled Chromium.

    Production hosts ship a system Chrome; local runs use whatever
    ``playwright install chromium`` put in place.
    """
    if CRAWLER_ENV == "production":
        return os.getenv("CHROME_EXECUTABLE_PATH") or DEFAULT_CHROME_PATH
    return None


# Request filtering — these never affect the price panel.
BLOCKED_RESOURCE_TYPES = frozenset({"image", "font", "media"})
BLOCKED_DOMAINS = (
    "google-analytics.com",
    "doubleclick.net",
)

# 'domcontentloaded' — blocked images/fonts mean 'load' would add nothing.
WAIT_UNTIL = "domcontentloaded"
GOTO_TIMEOUT_MS = 30_000

# ---------------------------------------------------------------------------
# DataCenter player page
# ---------------------------------------------------------------------------

PLAYER_URL_TEMPLATE = (
    "https://fconline.nexon.com/DataCenter/PlayerInfo?spid={spid}&n1Strong=1"
)

# The summary <strong> carries the player name in its title attribute once
# the initial data load is done; its text is the price for the selected grade.
SUMMARY_SELECTOR = ".txt strong"
PRICE_SELECTOR = ".txt strong"
GRADE_WRAPPER_SELECTOR = ".en_selector_wrap .en_wrap"
GRADE_OPTION_SELECTOR = ".selector_item.en_level{grade}"

MIN_GRADE = 1
MAX_GRADE = 13
DEFAULT_GRADES = [1, 2, 3, 4, 5, 6, 7, 8]
DEFAULT_SEASONS = [830]

# Wait windows
BASELINE_TIMEOUT_MS = 5_000
GRADE_OPTION_TIMEOUT_MS = 5_000
PRICE_TIMEOUT_MS = 5_000
POLL_INTERVAL_MS = 100

# Fixed settle delays after opening the option list / picking a grade.
# The site gives no readiness signal for either transition.
OPTION_SETTLE_SEC = 0.3
PANEL_SETTLE_SEC = 0.45


def grade_option_selector(grade: int) -> str:
    """Selector for the option node(s) of one enhancement grade."""
    return GRADE_OPTION_SELECTOR.format(grade=grade)


def player_url(spid: int) -> str:
    return PLAYER_URL_TEMPLATE.format(spid=spid)
