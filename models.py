"""Value types passed between player selection, the crawler and the price store."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Literal

from config.settings import MAX_GRADE, MIN_GRADE

GradeStatus = Literal["ok", "empty", "failed"]


@dataclass(frozen=True)
class PlayerTarget:
    """One player (spid) to crawl."""

    id: int


@dataclass(frozen=True)
class PriceResult:
    """Displayed price of one player at one enhancement grade."""

    player_id: int
    grade: int
    price: str


@dataclass(frozen=True)
class GradeOutcome:
    """Result-or-skip value for a single (player, grade) attempt.

    ``ok`` carries a ``result``; ``empty`` means the panel rendered but had
    no price; ``failed`` carries the error text of whatever timed out or
    raised.
    """

    status: GradeStatus
    result: PriceResult | None = None
    error: str | None = None

    @classmethod
    def ok(cls, result: PriceResult) -> "GradeOutcome":
        return cls("ok", result=result)

    @classmethod
    def empty(cls) -> "GradeOutcome":
        return cls("empty")

    @classmethod
    def failed(cls, error: str) -> "GradeOutcome":
        return cls("failed", error=error)


@dataclass
class CrawlStats:
    """Counters for one crawl run, reported at the end and stored on the run row."""

    players_requested: int = 0
    players_excluded: int = 0
    players_duplicate: int = 0
    players_crawled: int = 0
    players_failed: int = 0
    grades_ok: int = 0
    grades_empty: int = 0
    grades_failed: int = 0
    failed_players: list[int] = field(default_factory=list)

    def record(self, outcome: GradeOutcome) -> None:
        if outcome.status == "ok":
            self.grades_ok += 1
        elif outcome.status == "empty":
            self.grades_empty += 1
        else:
            self.grades_failed += 1

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def normalize_grades(grades: int | list[int] | tuple[int, ...]) -> list[int]:
    """Accept one grade or many; drop repeats, keep order, validate range."""
    if isinstance(grades, int):
        grades = [grades]
    seen: list[int] = []
    for grade in grades:
        grade = int(grade)
        if not MIN_GRADE <= grade <= MAX_GRADE:
            raise ValueError(
                f"grade {grade} outside {MIN_GRADE}..{MAX_GRADE}"
            )
        if grade not in seen:
            seen.append(grade)
    return seen
