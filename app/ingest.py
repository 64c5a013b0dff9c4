"""Startup load of the in-memory character dataset.

The dataset is fetched once (see `api.fetch_characters`) and then held for the life
of the process. Everything downstream (query routes, filter options, detail lookups)
reads from here and never mutates it.
"""

import time
import logging
from typing import Dict, Iterable, List, Optional

from . import api, metrics
from .page_cache import page_cache
from .schemas import Character

log = logging.getLogger(__name__)

_characters: List[Character] = []
_by_id: Dict[int, Character] = {}
_last_load_ts: float | None = None


def characters() -> List[Character]:
    """Return the full loaded character list (upstream order)."""
    return _characters


def get_character(character_id: int) -> Optional[Character]:
    """Look up one loaded character by id."""
    return _by_id.get(character_id)


def last_load_age() -> float | None:
    """Return seconds since the dataset was loaded.

    Returns:
        Rounded seconds since the last load, or ``None`` if nothing has been loaded.
    """
    if _last_load_ts is None:
        return None
    return round(time.time() - _last_load_ts, 2)


def set_dataset(items: Iterable[Character]) -> int:
    """Replace the in-memory dataset and drop cached query results.

    Args:
        items: Characters to hold.

    Returns:
        Number of characters now loaded.
    """
    global _characters, _by_id, _last_load_ts
    _characters = list(items)
    _by_id = {c.id: c for c in _characters}
    _last_load_ts = time.time()

    # Cached pages were computed against the previous list
    page_cache.invalidate_all()
    metrics.observe_dataset(len(_characters))
    return len(_characters)


async def load_dataset() -> int:
    """Fetch characters from upstream and install them as the dataset.

    A failed fetch still installs whatever was collected, possibly nothing; the app
    then serves an empty list rather than failing to start.

    Returns:
        Number of characters loaded.
    """
    log.info("dataset.load starting")
    fetched = await api.fetch_characters()
    n = set_dataset(fetched)
    log.info("dataset.loaded characters=%d", n)
    return n
