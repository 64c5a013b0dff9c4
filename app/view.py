"""Browser view logic: state transitions and render models.

The page keeps a `ViewState` (query parameters plus the selected character id) and
sends it back with every user action. `apply_action` computes the next state, and
`render` turns a state into everything the page draws, including post-render
effects such as scrolling the detail panel into view.

Rules enforced here:

* search, filter toggles and page-size changes reset the page to 1;
* the page always ends up within ``[1, max(1, total_pages)]``;
* closing the detail panel clears the selection and nothing else;
* filter options come from the full character list, never the filtered slice.
"""

from __future__ import annotations

from typing import Annotated, FrozenSet, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from .query import PageSize, QueryState, SortKey, clamp_page, run_query
from .schemas import GENDERS, STATUSES, Character, FilterOptions

DETAILS_ANCHOR = "character-details"

# only explicit paging moves the viewport; resets from search or filters do not
_PAGING_ACTIONS = frozenset({"next_page", "prev_page"})


class UnknownCharacterError(KeyError):
    """Raised when an action selects an id that is not in the loaded dataset."""


# ---------------------------------------------------------------------
# State and actions
# ---------------------------------------------------------------------


class ViewState(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: QueryState = Field(default_factory=QueryState)
    selected: Optional[int] = None


class SearchAction(BaseModel):
    type: Literal["search"]
    value: str


class ToggleFilterAction(BaseModel):
    type: Literal["toggle_status", "toggle_gender", "toggle_species"]
    value: str


class SortAction(BaseModel):
    type: Literal["sort"]
    value: SortKey


class PageSizeAction(BaseModel):
    type: Literal["page_size"]
    value: PageSize


class SelectAction(BaseModel):
    type: Literal["select"]
    value: int


class PlainAction(BaseModel):
    type: Literal["toggle_order", "next_page", "prev_page", "close"]


Action = Annotated[
    Union[
        SearchAction,
        ToggleFilterAction,
        SortAction,
        PageSizeAction,
        SelectAction,
        PlainAction,
    ],
    Field(discriminator="type"),
]


class ViewModel(BaseModel):
    """Everything the page needs to draw one frame."""

    query: QueryState
    results: List[Character]
    total_count: int
    total_pages: int
    has_prev: bool
    has_next: bool
    empty: bool
    pager_label: str
    selected: Optional[Character] = None
    options: FilterOptions
    effects: List[str] = []


class ViewUpdateIn(BaseModel):
    view: ViewState = Field(default_factory=ViewState)
    action: Action


class ViewUpdateOut(BaseModel):
    view: ViewState
    model: ViewModel


# ---------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------


def _toggled(current: FrozenSet[str], value: str) -> FrozenSet[str]:
    return current - {value} if value in current else current | {value}


def _next_query(
    q: QueryState, action: BaseModel, total_pages: int
) -> QueryState:
    if isinstance(action, SearchAction):
        return q.model_copy(update={"search": action.value, "page": 1})
    if isinstance(action, ToggleFilterAction):
        if action.type == "toggle_status":
            return q.model_copy(update={"status": _toggled(q.status, action.value), "page": 1})
        if action.type == "toggle_gender":
            return q.model_copy(update={"gender": _toggled(q.gender, action.value), "page": 1})
        return q.model_copy(update={"species": _toggled(q.species, action.value), "page": 1})
    if isinstance(action, SortAction):
        return q.model_copy(update={"sort": action.value})
    if isinstance(action, PageSizeAction):
        return q.model_copy(update={"page_size": action.value, "page": 1})
    if isinstance(action, PlainAction):
        if action.type == "toggle_order":
            return q.model_copy(update={"order": "desc" if q.order == "asc" else "asc"})
        if action.type == "next_page":
            return q.model_copy(update={"page": clamp_page(q.page + 1, total_pages)})
        if action.type == "prev_page":
            return q.model_copy(update={"page": max(1, q.page - 1)})
    return q


def apply_action(
    view: ViewState, action: BaseModel, characters: Sequence[Character]
) -> ViewState:
    """Return the state that follows ``action``.

    Args:
        view: Current state as held by the browser.
        action: One of the `Action` variants.
        characters: Full loaded dataset.

    Returns:
        The next `ViewState`, with its page clamped to the new result set.

    Raises:
        UnknownCharacterError: ``select`` names an id that is not loaded.
    """
    selected = view.selected
    if isinstance(action, SelectAction):
        if not any(c.id == action.value for c in characters):
            raise UnknownCharacterError(action.value)
        selected = action.value
    elif isinstance(action, PlainAction) and action.type == "close":
        selected = None

    before = run_query(characters, view.query)
    query = _next_query(view.query, action, before.total_pages)

    after = run_query(characters, query)
    page = clamp_page(query.page, after.total_pages)
    if page != query.page:
        query = query.model_copy(update={"page": page})

    return ViewState(query=query, selected=selected)


# ---------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------


def filter_options(characters: Sequence[Character]) -> FilterOptions:
    """Options for the checkbox groups.

    Status and gender use the fixed value sets; species are the distinct species of
    the full list in first-seen order.
    """
    species: List[str] = []
    seen = set()
    for c in characters:
        if c.species is not None and c.species not in seen:
            seen.add(c.species)
            species.append(c.species)
    return FilterOptions(status=list(STATUSES), gender=list(GENDERS), species=species)


def _effects(
    view: ViewState, previous: Optional[ViewState], action: Optional[Action]
) -> List[str]:
    if previous is None:
        return []
    effects: List[str] = []
    paged = action is not None and action.type in _PAGING_ACTIONS
    if paged and view.query.page != previous.query.page:
        effects.append("scroll_to:top")
    if view.selected is not None and view.selected != previous.selected:
        effects.append(f"scroll_to:{DETAILS_ANCHOR}")
    return effects


def render(
    view: ViewState,
    characters: Sequence[Character],
    previous: Optional[ViewState] = None,
    action: Optional[Action] = None,
) -> ViewModel:
    """Build the `ViewModel` for ``view``.

    Args:
        view: State to draw.
        characters: Full loaded dataset.
        previous: State before the last action, used to derive scroll effects.
        action: The action that led from ``previous`` to ``view``. Only
            ``next_page`` and ``prev_page`` produce ``scroll_to:top``.

    Returns:
        The render model; ``empty`` is True when no character matches, so the page
        shows a "no results" message instead of an empty table.
    """
    q = view.query
    res = run_query(characters, q)
    selected = None
    if view.selected is not None:
        selected = next((c for c in characters if c.id == view.selected), None)

    return ViewModel(
        query=q,
        results=res.results,
        total_count=res.total_count,
        total_pages=res.total_pages,
        has_prev=q.page > 1,
        has_next=q.page < res.total_pages,
        empty=not res.results,
        pager_label=f"Page {q.page} / {res.total_pages}",
        selected=selected,
        options=filter_options(characters),
        effects=_effects(view, previous, action),
    )
