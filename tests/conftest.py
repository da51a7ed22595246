"""Shared fixtures for the price crawler test suite.

Playwright is never launched: ``FakePage`` mimics the handful of page
calls the crawler makes against a DataCenter player page, and
``FakeDB`` records Supabase query-builder calls.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

# Ensure the crawler modules are importable from tests/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from playwright.async_api import TimeoutError as PlaywrightTimeout

from crawler import grade_extractor

_RE_SPID = re.compile(r"spid=(\d+)")
_RE_LEVEL = re.compile(r"en_level(\d+)")


class FakeElement:
    def __init__(self, page: "FakePage", grade: int, visible: bool) -> None:
        self.page = page
        self.grade = grade
        self.visible = visible

    async def is_visible(self) -> bool:
        return self.visible

    async def click(self) -> None:
        self.page.option_clicks.append((self.grade, self.visible))
        self.page.selected_grade = self.grade


class FakePage:
    """A player page whose behaviour is driven by ``configure()``.

    prices:          grade -> price text read from the panel
    loaded:          whether the summary title ever appears
    goto_error:      exception raised from ``goto``
    missing_grades:  grades whose option never becomes visible
    hidden_copies:   hidden duplicates rendered before the visible option
    """

    def __init__(self, configs: dict[int, dict[str, Any]] | None = None) -> None:
        self.configs = configs or {}
        self.prices: dict[int, str] = {}
        self.loaded = True
        self.goto_error: Exception | None = None
        self.close_error: Exception | None = None
        self.missing_grades: set[int] = set()
        self.hidden_copies = 0

        self.url: str | None = None
        self.goto_calls: list[tuple[str, str | None]] = []
        self.routes: list[tuple[str, Any]] = []
        self.clicks: list[str] = []
        self.option_clicks: list[tuple[int, bool]] = []
        self.selected_grade: int | None = None
        self.closed = False

    def configure(self, **config: Any) -> "FakePage":
        for key, value in config.items():
            setattr(self, key, value)
        return self

    async def route(self, pattern: str, handler: Any) -> None:
        self.routes.append((pattern, handler))

    async def goto(self, url: str, wait_until: str | None = None, timeout: float | None = None) -> None:
        self.url = url
        self.goto_calls.append((url, wait_until))
        match = _RE_SPID.search(url)
        if match:
            self.configure(**self.configs.get(int(match.group(1)), {}))
        if self.goto_error:
            raise self.goto_error

    async def wait_for_function(self, expression, arg=None, timeout=None, polling=None):
        if expression == grade_extractor._JS_SUMMARY_READY:
            if not self.loaded:
                raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")
            return True
        if self.prices.get(self.selected_grade) is None:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")
        return True

    async def wait_for_selector(self, selector: str, state: str = "visible", timeout: float | None = None):
        """Like Playwright: the state is checked on the first match only.

        A trailing ``:visible`` narrows the matches to visible nodes first.
        """
        if not _RE_LEVEL.search(selector):
            return object()
        only_visible = selector.endswith(":visible")
        elements = await self.query_selector_all(selector.removesuffix(":visible"))
        if only_visible:
            elements = [el for el in elements if el.visible]
        if not elements or (state == "visible" and not elements[0].visible):
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")
        return elements[0]

    async def click(self, selector: str) -> None:
        self.clicks.append(selector)

    async def query_selector_all(self, selector: str) -> list[FakeElement]:
        grade = int(_RE_LEVEL.search(selector).group(1))
        if grade in self.missing_grades:
            return []
        hidden = [FakeElement(self, grade, False) for _ in range(self.hidden_copies)]
        return hidden + [FakeElement(self, grade, True), FakeElement(self, grade, True)]

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return self.prices.get(self.selected_grade)

    async def close(self) -> None:
        self.closed = True
        if self.close_error:
            raise self.close_error


class FakeSession:
    """Stands in for a started ``SessionManager``; records every page it opens."""

    def __init__(self, configs: dict[int, dict[str, Any]] | None = None) -> None:
        self.configs = configs or {}
        self.pages: list[FakePage] = []
        self.started = 0
        self.stopped = 0

    async def new_page(self) -> FakePage:
        page = FakePage(self.configs)
        self.pages.append(page)
        return page

    async def __aenter__(self) -> "FakeSession":
        self.started += 1
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stopped += 1

    @property
    def visited(self) -> list[int]:
        return [int(_RE_SPID.search(p.url).group(1)) for p in self.pages if p.url]


class FakeQuery:
    """Chainable stand-in for a Supabase/PostgREST query builder."""

    def __init__(self, db: "FakeDB", table: str) -> None:
        self.db = db
        self.table = table
        self.calls: list[tuple[str, tuple, dict]] = []
        db.queries.append(self)

    def __getattr__(self, name: str):
        def _method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return _method

    def execute(self):
        error = self.db.errors.get(self.table)
        if error:
            raise error
        responder = self.db.responders.get(self.table)
        data = responder(self) if responder else []
        return SimpleNamespace(data=data)

    def call(self, name: str) -> tuple[tuple, dict] | None:
        for call_name, args, kwargs in self.calls:
            if call_name == name:
                return args, kwargs
        return None

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeDB:
    def __init__(self) -> None:
        self.queries: list[FakeQuery] = []
        self.responders: dict[str, Any] = {}
        self.errors: dict[str, Exception] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def queries_for(self, table: str, method: str | None = None) -> list[FakeQuery]:
        return [
            q for q in self.queries
            if q.table == table and (method is None or method in q.names())
        ]


@pytest.fixture(autouse=True)
def no_settle_delays(monkeypatch):
    """Fixed settle delays are real sleeps; tests don't need them."""
    monkeypatch.setattr(grade_extractor, "OPTION_SETTLE_SEC", 0)
    monkeypatch.setattr(grade_extractor, "PANEL_SETTLE_SEC", 0)
    monkeypatch.setattr(grade_extractor, "GRADE_OPTION_TIMEOUT_MS", 200)


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def make_session():
    def _make(configs: dict[int, dict[str, Any]] | None = None) -> FakeSession:
        return FakeSession(configs)
    return _make


@pytest.fixture
def fake_db():
    return FakeDB()
