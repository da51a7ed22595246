"""
Players that must never be crawled.

The list ships as ``player_restrictions.json`` next to this module (a flat
JSON array of spids) and is loaded once per run.  ``RESTRICTIONS_PATH``
points the crawler at a different file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from config.settings import RESTRICTIONS_PATH

logger = logging.getLogger(__name__)


def load_restrictions(path: Path | str = RESTRICTIONS_PATH) -> frozenset[int]:
    """Read the exclusion list into a frozen set of player ids.

    Entries may be numbers or numeric strings.  A missing file yields an
    empty set; anything that is not a list of ids raises ``ValueError``.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Restrictions file %s not found — no players excluded", path)
        return frozenset()

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON array of player ids")

    ids: set[int] = set()
    for entry in raw:
        if isinstance(entry, bool):
            raise ValueError(f"{path}: invalid player id {entry!r}")
        try:
            ids.add(int(entry))
        except (TypeError, ValueError):
            raise ValueError(f"{path}: invalid player id {entry!r}") from None

    logger.info("Loaded %d restricted players from %s", len(ids), path.name)
    return frozenset(ids)
