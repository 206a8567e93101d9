from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from core.config import BOOTSTRAP_TTL_SECONDS
from core.logging import get_logger
from core.models import BootstrapData
from .cache import CacheState, ResourceCache
from .http_client import FplHttpClient
from .retry import RetryPolicy
from .schema import parse_bootstrap

log = get_logger(__name__)

BOOTSTRAP_PATH = "/bootstrap-static/"


class BootstrapResource:
    """
    Dataset bootstrap (squadre, giocatori) con cache TTL condivisa.

    Unica fonte della risoluzione nome squadra -> id usata da FixtureResource.
    """

    def __init__(
        self,
        http: FplHttpClient,
        retry: RetryPolicy,
        *,
        ttl_seconds: float = BOOTSTRAP_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http
        self._retry = retry
        self._cache: ResourceCache[BootstrapData] = ResourceCache(
            self._fetch, ttl_seconds, name="bootstrap", clock=clock
        )

    @property
    def cache_state(self) -> CacheState:
        return self._cache.state

    def _fetch(self, cancelled: threading.Event) -> BootstrapData:
        payload = self._retry.execute(
            lambda: self._http.get_json(BOOTSTRAP_PATH),
            description="bootstrap",
            cancel_event=cancelled,
        )
        # La validazione resta fuori dal retry: un payload invalido non cambia ritentando.
        data = parse_bootstrap(payload)
        log.info(
            "bootstrap fetched teams=%s elements=%s",
            len(data.teams),
            len(data.elements),
            extra={"resource": "bootstrap", "count": len(data.teams)},
        )
        return data

    def get_bootstrap(self, force_refresh: bool, *, timeout: Optional[float] = None) -> BootstrapData:
        if force_refresh:
            self._cache.invalidate()
        return self._cache.read(timeout=timeout)

    def invalidate(self) -> None:
        self._cache.invalidate()

    def cancel(self, reason: str = "cancelled by caller") -> bool:
        return self._cache.cancel(reason)

    def close(self) -> None:
        self._cache.close()


__all__ = ["BootstrapResource", "BOOTSTRAP_PATH"]
