"""External Rick & Morty API client.

This module encapsulates all interactions with the public Rick & Morty REST API:
walking the paginated character collection up to a fixed cap, and a quick upstream
probe used by the application's health check.

The fetch is deliberately simple: one request at a time, no retries, the transport's
default timeout. Any failure ends the walk and whatever was collected so far is kept.
"""

import logging
from typing import Any, Iterable, List

import httpx
from pydantic import ValidationError

from . import metrics
from .schemas import Character
from .settings import settings

log = logging.getLogger(__name__)


def _parse_batch(batch: Iterable[Any]) -> List[Character]:
    """Validate one page of raw character dicts.

    Records that fail validation (e.g. no ``id``) are skipped with a warning so a single
    malformed entry doesn't cost the whole page.

    Args:
        batch: The ``results`` array of an upstream page.

    Returns:
        The valid characters, in upstream order.
    """
    out: List[Character] = []
    for raw in batch:
        try:
            out.append(Character.model_validate(raw))
        except ValidationError as exc:
            log.warning(
                "upstream.record_skipped id=%r errors=%d",
                raw.get("id") if isinstance(raw, dict) else None,
                exc.error_count(),
            )
    return out


# ---------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------


async def fetch_characters(
    url: str | None = None, cap: int | None = None
) -> List[Character]:
    """Fetch characters from the upstream API, following ``info.next`` links.

    Pages are requested strictly one after another. The walk stops when a page has
    no ``info.next`` pointer or once ``cap`` characters have been collected; the
    result is truncated to exactly ``cap``.

    A transport error, non-2xx status, undecodable body or unexpected payload shape
    ends the walk. The failure is logged and counted, and the partial (possibly empty)
    list is returned; this function never raises for upstream problems.

    Args:
        url: First page URL. Defaults to ``settings.UPSTREAM_URL``.
        cap: Maximum number of characters. Defaults to ``settings.FETCH_CAP``.

    Returns:
        Up to ``cap`` characters in upstream order.
    """
    next_url: str | None = url or settings.UPSTREAM_URL
    cap = settings.FETCH_CAP if cap is None else cap

    results: List[Character] = []
    pages = 0
    async with httpx.AsyncClient() as client:
        while next_url and len(results) < cap:
            current = next_url
            try:
                r = await client.get(current)
                r.raise_for_status()
                data = r.json()
                batch = _parse_batch(data["results"])
                next_url = (data.get("info") or {}).get("next")
            except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as exc:
                log.error(
                    "upstream.failed url=%s pages=%d collected=%d err=%r",
                    current,
                    pages,
                    len(results),
                    exc,
                )
                metrics.record_fetch_failure()
                break

            results.extend(batch)
            pages += 1
            log.debug(
                "upstream.page url=%s batch=%d collected=%d next=%s",
                current,
                len(batch),
                len(results),
                next_url,
            )

    if len(results) > cap:
        log.debug("upstream.truncated collected=%d cap=%d", len(results), cap)
        results = results[:cap]

    log.info("upstream.done pages=%d characters=%d cap=%d", pages, len(results), cap)
    return results


async def quick_upstream_probe() -> bool:
    """Perform a lightweight upstream health probe.

    Returns:
        True if the upstream root API endpoint returns HTTP 200,
        otherwise False (including transport errors).
    """
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            r = await client.get(settings.UPSTREAM_PROBE_URL)
            return r.status_code == 200
    except httpx.HTTPError as exc:
        log.debug("upstream.probe_failed err=%r", exc)
        return False
