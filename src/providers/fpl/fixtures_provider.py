from __future__ import annotations

import time
from typing import List, Optional

from core.logging import get_logger
from core.models import Fixture
from core.selection import build_team_index, filter_by_team, normalize_team_name, take_first
from .bootstrap import BootstrapResource
from .exceptions import FetchCancelledError, TeamNotFoundError
from .http_client import FplHttpClient
from .retry import RetryPolicy
from .schema import parse_fixtures

log = get_logger(__name__)

FIXTURES_PATH = "/fixtures/"


class FixtureResource:
    """
    Fixtures future dell'API FPL, filtrate per squadra e troncate.

    Il nome squadra viene risolto tramite il BootstrapResource ricevuto nel
    costruttore (nessun fetch bootstrap duplicato qui).
    """

    def __init__(self, http: FplHttpClient, retry: RetryPolicy, bootstrap: BootstrapResource) -> None:
        self._http = http
        self._retry = retry
        self._bootstrap = bootstrap

    def fetch_fixtures(self, *, deadline: Optional[float] = None) -> List[Fixture]:
        payload = self._retry.execute(
            lambda: self._http.get_json(FIXTURES_PATH, params={"future": 1}),
            description="fixtures",
            deadline=deadline,
        )
        return parse_fixtures(payload)

    def get_fixtures(
        self,
        team: Optional[str] = None,
        limit: Optional[int] = None,
        refresh: bool = False,
        *,
        timeout: Optional[float] = None,
    ) -> List[Fixture]:
        deadline = time.monotonic() + timeout if timeout is not None else None

        fixtures = self.fetch_fixtures(deadline=deadline)

        remaining: Optional[float] = None
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise FetchCancelledError(f"fixtures request timed out after {timeout}s")
        bootstrap = self._bootstrap.get_bootstrap(force_refresh=refresh, timeout=remaining)

        index, collisions = build_team_index(bootstrap.teams)
        if collisions:
            log.warning("team names collide, last one wins: %s", sorted(set(collisions)))

        team_id: Optional[int] = None
        if team is not None:
            team_id = index.get(normalize_team_name(team))
            if team_id is None:
                raise TeamNotFoundError(team)

        selected = take_first(filter_by_team(fixtures, team_id), limit)
        log.info(
            "fixtures selected %s/%s",
            len(selected),
            len(fixtures),
            extra={"team": team, "count": len(selected)},
        )
        return selected


__all__ = ["FixtureResource", "FIXTURES_PATH"]
