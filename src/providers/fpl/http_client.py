from __future__ import annotations

import time
from typing import Any, Dict, Optional

import requests

from core.config import Settings, get_settings
from core.logging import get_logger
from monitoring.prometheus_exporter import record_upstream_request
from .exceptions import DecodeError, NetworkError, UpstreamError

log = get_logger(__name__)


def _parse_retry_after(resp: Any) -> Optional[float]:
    headers = getattr(resp, "headers", None) or {}
    raw = headers.get("Retry-After")
    if not raw:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


class FplHttpClient:
    """
    Client HTTP per l'API Fantasy Premier League (versione requests).
    Esegue UN solo tentativo per chiamata: il retry è compito della RetryPolicy.

    Mappa gli esiti sulla tassonomia degli errori:
      - timeout / connessione -> NetworkError
      - status fuori da 2xx   -> UpstreamError(status, reason)
      - body non JSON         -> DecodeError

    Telemetria minima dell'ultima chiamata (get_stats):
      - _last_attempts, _last_latency_ms, _last_status
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": self._settings.user_agent,
                "Accept": "application/json",
            }
        )
        self._base = self._settings.base_url.rstrip("/")
        self._timeout = self._settings.timeout

        self._last_attempts: int = 0
        self._last_latency_ms: float = 0.0
        self._last_status: Optional[int] = None

    def url_for(self, path: str) -> str:
        return f"{self._base}/{path.lstrip('/')}"

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = self.url_for(path)
        log.debug("fpl GET %s params=%s", url, params)
        start = time.perf_counter()
        self._last_attempts += 1
        self._last_status = None

        try:
            resp = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            elapsed = time.perf_counter() - start
            self._last_latency_ms = elapsed * 1000
            record_upstream_request(path, "network_error", elapsed)
            log.error("Errore rete %s dopo %.1fms: %s", url, self._last_latency_ms, e)
            raise NetworkError(f"Network error: {e.__class__.__name__}: {e}") from e

        elapsed = time.perf_counter() - start
        self._last_latency_ms = elapsed * 1000
        self._last_status = resp.status_code

        if not 200 <= resp.status_code < 300:
            record_upstream_request(path, f"http_{resp.status_code}", elapsed)
            log.error(
                "Status %s %s (%.1fms) body=%s",
                resp.status_code,
                url,
                self._last_latency_ms,
                (resp.text or "")[:300],
            )
            raise UpstreamError(
                resp.status_code,
                getattr(resp, "reason", "") or "",
                retry_after=_parse_retry_after(resp),
            )

        try:
            data = resp.json()
        except ValueError as e:
            record_upstream_request(path, "decode_error", elapsed)
            raise DecodeError(f"invalid JSON body from {path} (status={resp.status_code})") from e

        record_upstream_request(path, "ok", elapsed)
        log.debug("OK %s %s %.1fms", url, resp.status_code, self._last_latency_ms)
        return data

    def get_stats(self) -> Dict[str, Any]:
        """
        Ritorna telemetria delle chiamate:
          attempts: richieste HTTP effettuate da questo client
          latency_ms: durata dell'ultima richiesta
          last_status: ultimo status code visto (None se nessuna risposta)
        """
        return {
            "attempts": self._last_attempts,
            "latency_ms": round(self._last_latency_ms, 2),
            "last_status": self._last_status,
        }

    def close(self) -> None:
        self._session.close()


__all__ = ["FplHttpClient"]
