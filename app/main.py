"""FastAPI app, lifespan bootstrap, and HTTP routes.

Defines the application instance, startup sequence (one-shot dataset load) and the
public endpoints:

- GET  /                  -> the character browser page
- GET  /healthz           -> liveness
- GET  /healthcheck       -> deep health (upstream probe and loaded dataset)
- GET  /characters        -> filtered/sorted/paginated characters (in memory)
- GET  /characters/{id}   -> one character
- GET  /filters           -> checkbox options derived from the full dataset
- GET  /view              -> initial browser state and its render model
- POST /view              -> apply one browser action to a state
"""

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse

from . import api, ingest, metrics
from .logging_config import configure_logging
from .page_cache import page_cache
from .query import PAGE_SIZES, QueryState, run_query
from .schemas import Character, CharactersPage, FilterOptions, HealthcheckOut, ProblemDetail
from .view import (
    UnknownCharacterError,
    ViewState,
    ViewUpdateIn,
    ViewUpdateOut,
    apply_action,
    filter_options,
    render,
)
from .viewer_html import VIEWER_HTML

configure_logging()
log = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# App
# ---------------------------------------------------------------------

app = FastAPI(title="Rick & Morty Character Browser", version="0.1.0")
metrics.install(app)


_STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _problem(
    status: int,
    title: str | None = None,
    detail: str | None = None,
    instance: str | None = None,
) -> JSONResponse:
    """Return an RFC7807 problem+json response."""
    body = {
        "type": "about:blank",
        "title": title or _STATUS_TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    return JSONResponse(
        status_code=status, content=body, media_type="application/problem+json"
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(req: Request, exc: HTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else None
    return _problem(
        status=exc.status_code,
        title=_STATUS_TITLES.get(exc.status_code),
        detail=detail,
        instance=req.url.path,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(req: Request, exc: RequestValidationError):
    msg = exc.errors()[0]["msg"] if exc.errors() else "Validation error"
    return _problem(
        status=422, title=_STATUS_TITLES[422], detail=msg, instance=req.url.path
    )


# ---------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: load the dataset once before serving."""
    n = await ingest.load_dataset()
    log.info("startup.dataset_loaded characters=%d", n)
    yield


app.router.lifespan_context = lifespan

_problem_resp = {
    "application/problem+json": {"schema": ProblemDetail.model_json_schema()},
}

# ---------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------


@app.get("/", include_in_schema=False, response_class=HTMLResponse)
async def root():
    """Serve the single-page character browser."""
    return HTMLResponse(VIEWER_HTML)


@app.get("/healthz", include_in_schema=False)
async def healthz():
    """Lightweight, in-process health endpoint.

    Always returns 200 if the app can serve requests.
    Safe for liveness/readiness probes without hitting the network.
    """
    return {"status": "ok"}


@app.get("/healthcheck", response_model=HealthcheckOut)
async def healthcheck():
    """Deep health check: upstream reachability and loaded dataset size."""
    upstream_ok = await api.quick_upstream_probe()
    total = len(ingest.characters())
    age = ingest.last_load_age()

    status = "ok" if (upstream_ok and total > 0) else "degraded"
    metrics.observe_health(upstream_ok, age)
    log.info(
        "route.healthcheck status=%s upstream_ok=%s character_count=%d",
        status,
        upstream_ok,
        total,
    )

    return {
        "status": status,
        "upstream_ok": upstream_ok,
        "character_count": total,
        "last_load_age": age,
    }


@app.get(
    "/characters",
    response_model=CharactersPage,
    responses={422: {"content": _problem_resp, "model": ProblemDetail}},
)
async def characters(
    search: str = Query(""),
    status: List[str] = Query(default=[]),
    gender: List[str] = Query(default=[]),
    species: List[str] = Query(default=[]),
    sort: str = Query("name", pattern=r"^(name|status|gender)$"),
    order: str = Query("asc", pattern=r"^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20),
):
    """Return filtered, sorted, paginated characters from memory (LRU cached).

    Args:
        search: Case-insensitive name substring.
        status: Allowed statuses (repeat the parameter); empty means all.
        gender: Allowed genders (repeat the parameter); empty means all.
        species: Allowed species (repeat the parameter); empty means all.
        sort: Sort field, one of {"name","status","gender"}.
        order: Sort order, one of {"asc","desc"}.
        page: 1-based page number.
        page_size: Items per page, one of 10, 20 or 50.

    Returns:
        CharactersPage JSON object. A page past the end comes back empty with
        ``out_of_range`` set.
    """
    if page_size not in PAGE_SIZES:
        raise HTTPException(
            status_code=422,
            detail=f"page_size must be one of {', '.join(map(str, PAGE_SIZES))}",
        )

    state = QueryState(
        search=search,
        status=frozenset(status),
        gender=frozenset(gender),
        species=frozenset(species),
        sort=sort,
        order=order,
        page=page,
        page_size=page_size,
    )

    res = page_cache.get(state)
    if res is None:
        res = run_query(ingest.characters(), state)
        page_cache.put(state, res)
    else:
        log.debug("route.characters cache_hit")

    total_pages = res.total_pages
    out_of_range = (total_pages > 0 and page > total_pages) or (
        total_pages == 0 and page > 1
    )

    log.info(
        "route.characters search=%r sort=%s order=%s page=%d page_size=%d returned=%d total=%d pages=%d out_of_range=%s",
        search,
        sort,
        order,
        page,
        page_size,
        len(res.results),
        res.total_count,
        total_pages,
        out_of_range,
    )

    return {
        "page": page,
        "page_size": page_size,
        "total_count": res.total_count,
        "total_pages": total_pages,
        "has_prev": (page > 1) and not out_of_range,
        "has_next": (page < total_pages),
        "out_of_range": out_of_range,
        "results": [] if out_of_range else res.results,
    }


@app.get(
    "/characters/{character_id}",
    response_model=Character,
    responses={404: {"content": _problem_resp, "model": ProblemDetail}},
)
async def character_detail(character_id: int):
    """Return one loaded character by id."""
    c = ingest.get_character(character_id)
    if c is None:
        raise HTTPException(status_code=404, detail=f"Character {character_id} not found")
    return c


@app.get("/filters", response_model=FilterOptions)
async def filters():
    """Checkbox options, always derived from the full dataset."""
    return filter_options(ingest.characters())


@app.get("/view", response_model=ViewUpdateOut)
async def view_initial():
    """Default browser state and its render model."""
    state = ViewState()
    return ViewUpdateOut(view=state, model=render(state, ingest.characters()))


@app.post(
    "/view",
    response_model=ViewUpdateOut,
    responses={
        404: {"content": _problem_resp, "model": ProblemDetail},
        422: {"content": _problem_resp, "model": ProblemDetail},
    },
)
async def view_update(body: ViewUpdateIn):
    """Apply one browser action and return the next state with its render model."""
    chars = ingest.characters()
    try:
        nxt = apply_action(body.view, body.action, chars)
    except UnknownCharacterError as exc:
        raise HTTPException(
            status_code=404, detail=f"Character {exc.args[0]} not found"
        ) from exc

    log.debug(
        "route.view action=%s page=%d selected=%s",
        body.action.type,
        nxt.query.page,
        nxt.selected,
    )
    model = render(nxt, chars, previous=body.view, action=body.action)
    return ViewUpdateOut(view=nxt, model=model)
