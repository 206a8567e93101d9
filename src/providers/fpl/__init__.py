"""
Client FPL (Fantasy Premier League).

Contiene:
- http_client: singola GET + mappatura errori
- retry: RetryPolicy con backoff esponenziale
- cache: ResourceCache (TTL + single-flight + invalidazione)
- bootstrap / fixtures_provider: le due risorse
- client: FplClient, composizione delle parti sopra
"""
from .client import FplClient  # noqa: F401
from .exceptions import (  # noqa: F401
    DecodeError,
    FetchCancelledError,
    FplClientError,
    NetworkError,
    RetryExhaustedError,
    TeamNotFoundError,
    UpstreamError,
)
