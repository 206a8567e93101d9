from __future__ import annotations

import time
from typing import Callable, List, Optional

import requests

from core.config import BOOTSTRAP_TTL_SECONDS, Settings, get_settings
from core.models import BootstrapData, Fixture
from .bootstrap import BootstrapResource
from .fixtures_provider import FixtureResource
from .http_client import FplHttpClient
from .retry import RetryPolicy


class FplClient:
    """
    Punto di composizione: costruisce UNA volta client HTTP, retry policy e le
    due risorse, passando il BootstrapResource al FixtureResource.
    Pensato per vivere quanto il processo.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        ttl_seconds: float = BOOTSTRAP_TTL_SECONDS,
    ) -> None:
        self.settings = settings or get_settings()
        self.http = FplHttpClient(self.settings, session=session)
        self.retry = RetryPolicy.from_settings(self.settings)
        self.bootstrap = BootstrapResource(self.http, self.retry, ttl_seconds=ttl_seconds, clock=clock)
        self.fixtures = FixtureResource(self.http, self.retry, self.bootstrap)

    def get_bootstrap(self, force_refresh: bool, *, timeout: Optional[float] = None) -> BootstrapData:
        return self.bootstrap.get_bootstrap(force_refresh, timeout=timeout)

    def get_fixtures(
        self,
        team: Optional[str] = None,
        limit: Optional[int] = None,
        refresh: bool = False,
        *,
        timeout: Optional[float] = None,
    ) -> List[Fixture]:
        return self.fixtures.get_fixtures(team=team, limit=limit, refresh=refresh, timeout=timeout)

    def close(self) -> None:
        self.bootstrap.close()
        self.http.close()

    def __enter__(self) -> "FplClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["FplClient"]
