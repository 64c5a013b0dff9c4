"""In-memory query pipeline: filter -> sort -> paginate.

`run_query` is a pure function of the full character list and a `QueryState`.
Stages always run in the same order:

1. name substring filter (case-insensitive; empty search matches everything)
2. status filter
3. gender filter
4. species filter
5. stable sort on the selected key
6. pagination

An empty filter set means "no filtering" for that field. The pipeline never clamps
``page``; callers keep it within ``[1, total_pages]`` (see `clamp_page`).
"""

from __future__ import annotations

import math
from typing import (
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Literal,
    NamedTuple,
    Optional,
    Sequence,
)

import icu
from pydantic import BaseModel, ConfigDict, Field

from .schemas import Character

SortKey = Literal["name", "status", "gender"]
SortOrder = Literal["asc", "desc"]
PageSize = Literal[10, 20, 50]

PAGE_SIZES = (10, 20, 50)

# Explicit accessor per sort key; no attribute lookup by name.
SORT_KEYS: Dict[str, Callable[[Character], Optional[str]]] = {
    "name": lambda c: c.name,
    "status": lambda c: c.status,
    "gender": lambda c: c.gender,
}


class QueryState(BaseModel):
    """Every user-controllable parameter deciding which characters are visible.

    Frozen and hashable, so it doubles as a result cache key, and JSON-serializable,
    so the browser can hold it and send it back unchanged.
    """

    model_config = ConfigDict(frozen=True)

    search: str = ""
    status: FrozenSet[str] = frozenset()
    gender: FrozenSet[str] = frozenset()
    species: FrozenSet[str] = frozenset()
    sort: SortKey = "name"
    order: SortOrder = "asc"
    page: int = Field(1, ge=1)
    page_size: PageSize = 20


class QueryResult(NamedTuple):
    """Visible slice plus the totals the pager needs."""

    results: List[Character]
    total_count: int
    total_pages: int


def total_pages_for(count: int, page_size: int) -> int:
    """Number of pages for ``count`` rows; 0 when there are no rows."""
    return math.ceil(count / page_size) if count else 0


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp a 1-based page index into ``[1, max(1, total_pages)]``."""
    return max(1, min(page, max(1, total_pages)))


def _member_or_all(value: Optional[str], allowed: FrozenSet[str]) -> bool:
    return not allowed or value in allowed


def filter_characters(
    characters: Iterable[Character], state: QueryState
) -> List[Character]:
    """Apply the name, status, gender and species filters (in that order)."""
    needle = state.search.lower()
    out = [c for c in characters if needle in c.name.lower()]
    out = [c for c in out if _member_or_all(c.status, state.status)]
    out = [c for c in out if _member_or_all(c.gender, state.gender)]
    out = [c for c in out if _member_or_all(c.species, state.species)]
    return out


_COLLATOR = icu.Collator.createInstance(icu.Locale.getRoot())


def _collation_key(value: Optional[str]) -> bytes:
    # missing values sort as the empty string, ahead of every real key;
    # NUL carries no collation weight, so drop it before building the key
    text = str(value or "").replace("\x00", "").lower()
    if not text:
        return b""
    return _COLLATOR.getSortKey(text)


def sort_characters(
    characters: Iterable[Character], sort: str, order: str
) -> List[Character]:
    """Stable sort by the lower-cased value of ``sort``, locale-collated.

    ``desc`` reverses the comparison; characters with equal keys keep their input
    order in both directions.
    """
    accessor = SORT_KEYS[sort]
    return sorted(
        characters,
        key=lambda c: _collation_key(accessor(c)),
        reverse=(order == "desc"),
    )


def paginate(rows: Sequence[Character], page: int, page_size: int) -> List[Character]:
    """Return the 1-based ``page`` of ``rows``, clipped to what exists."""
    start = (page - 1) * page_size
    return list(rows[start : start + page_size])


def run_query(characters: Sequence[Character], state: QueryState) -> QueryResult:
    """Run the full pipeline and return the visible slice with its totals.

    Args:
        characters: The full, unfiltered character list.
        state: Search text, filters, sort and page parameters.

    Returns:
        `QueryResult` whose ``results`` holds at most ``state.page_size`` characters.
        ``total_pages`` is 0 when nothing matches.
    """
    matched = sort_characters(filter_characters(characters, state), state.sort, state.order)
    return QueryResult(
        results=paginate(matched, state.page, state.page_size),
        total_count=len(matched),
        total_pages=total_pages_for(len(matched), state.page_size),
    )
