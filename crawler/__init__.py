from .batch import crawl_prices
from .grade_extractor import extract_grade, wait_until_loaded
from .session import SessionManager, SessionStartError

__all__ = [
    "SessionManager",
    "SessionStartError",
    "crawl_prices",
    "extract_grade",
    "wait_until_loaded",
]
