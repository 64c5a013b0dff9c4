import time
from typing import Optional
from fastapi import FastAPI, Request, Response
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# --- Metric objects ---
REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["path", "method", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "Request latency seconds",
    labelnames=["path", "method"],
)
CACHE_HITS = Counter(
    "result_cache_hits_total", "Characters query result cache hits", labelnames=["path"]
)
CACHE_MISSES = Counter(
    "result_cache_misses_total",
    "Characters query result cache misses",
    labelnames=["path"],
)
FETCH_FAILURES = Counter(
    "upstream_fetch_failures_total", "Upstream fetches aborted by an error"
)

CHARACTERS_LOADED_G = Gauge("characters_loaded", "Characters held in memory")
UPSTREAM_OK_G = Gauge("upstream_ok", "Upstream availability (1 ok, 0 down)")
LAST_LOAD_AGE_G = Gauge("last_load_age_seconds", "Seconds since the dataset was loaded")


# --- Public helpers your routes can call ---
def record_cache_hit(path="/characters"):
    CACHE_HITS.labels(path=path).inc()


def record_cache_miss(path="/characters"):
    CACHE_MISSES.labels(path=path).inc()


def record_fetch_failure() -> None:
    FETCH_FAILURES.inc()


def observe_dataset(count: int) -> None:
    CHARACTERS_LOADED_G.set(count)


def observe_health(upstream_ok: bool, age: Optional[float]) -> None:
    UPSTREAM_OK_G.set(1 if upstream_ok else 0)
    if age is not None:
        LAST_LOAD_AGE_G.set(age)


# --- Installation: middleware + /metrics endpoint ---
def install(app: FastAPI) -> None:
    @app.middleware("http")
    async def _metrics_mw(request: Request, call_next):
        t0 = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            dur = time.perf_counter() - t0
            REQUEST_LATENCY.labels(
                path=request.url.path, method=request.method
            ).observe(dur)
            REQUESTS.labels(
                path=request.url.path,
                method=request.method,
                status=str(status),
            ).inc()

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
