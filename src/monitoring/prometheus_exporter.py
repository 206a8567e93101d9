from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Registry privato del client: non si mescola con il registry globale del processo.
_REGISTRY = CollectorRegistry()

UPSTREAM_REQUESTS_TOTAL = Counter(
    "fpl_upstream_requests_total",
    "Richieste HTTP verso l'upstream per path ed esito",
    ["path", "outcome"],
    registry=_REGISTRY,
)
UPSTREAM_LATENCY_SECONDS = Histogram(
    "fpl_upstream_latency_seconds",
    "Latenza delle richieste HTTP verso l'upstream",
    ["path"],
    registry=_REGISTRY,
)
RETRIES_TOTAL = Counter(
    "fpl_retries_total",
    "Retry eseguiti dalla RetryPolicy",
    ["operation"],
    registry=_REGISTRY,
)
CACHE_REQUESTS_TOTAL = Counter(
    "fpl_cache_requests_total",
    "Letture della cache per risorsa (hit, miss, join di un fetch in corso)",
    ["resource", "result"],
    registry=_REGISTRY,
)


def record_upstream_request(path: str, outcome: str, elapsed_s: float) -> None:
    UPSTREAM_REQUESTS_TOTAL.labels(path=path, outcome=outcome).inc()
    UPSTREAM_LATENCY_SECONDS.labels(path=path).observe(max(0.0, elapsed_s))


def record_retry(operation: str) -> None:
    RETRIES_TOTAL.labels(operation=operation or "unknown").inc()


def record_cache_lookup(resource: str, result: str) -> None:
    CACHE_REQUESTS_TOTAL.labels(resource=resource, result=result).inc()


def generate_prometheus_text() -> bytes:
    return generate_latest(_REGISTRY)


__all__ = [
    "record_upstream_request",
    "record_retry",
    "record_cache_lookup",
    "generate_prometheus_text",
    "_REGISTRY",
]
