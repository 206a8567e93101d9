import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

DEFAULT_BASE_URL = "https://fantasy.premierleague.com/api"
DEFAULT_USER_AGENT = "fpl-client/0.0.1"

# TTL del dataset bootstrap: fisso, non configurabile da env.
BOOTSTRAP_TTL_SECONDS = 15 * 60


@dataclass(frozen=True)
class Settings:
    base_url: str
    timeout: float
    user_agent: str
    log_level: str

    max_attempts: int
    backoff_base: float
    backoff_factor: float
    backoff_jitter: float

    request_timeout_total: Optional[float]

    @classmethod
    def from_env(cls) -> "Settings":
        def _int(name: str, default: int) -> int:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un intero (valore: {raw!r})") from e

        def _float(name: str, default: float) -> float:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return float(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un numero (valore: {raw!r})") from e

        def _opt_float(name: str) -> Optional[float]:
            raw = os.getenv(name)
            if not raw:
                return None
            try:
                value = float(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un numero (valore: {raw!r})") from e
            return value if value > 0 else None

        base_url = (os.getenv("FPL_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        user_agent = os.getenv("FPL_USER_AGENT") or DEFAULT_USER_AGENT
        log_level = os.getenv("FPL_LOG_LEVEL", "WARNING").upper()
        timeout = _float("FPL_TIMEOUT", 10.0)

        max_attempts = max(1, _int("FPL_MAX_ATTEMPTS", 4))
        backoff_base = _float("FPL_BACKOFF_BASE", 0.5)
        if backoff_base <= 0:
            raise ValueError(f"Variabile FPL_BACKOFF_BASE deve essere > 0 (valore: {backoff_base!r})")
        # factor > 1 e jitter < factor - 1: i ritardi restano strettamente crescenti
        backoff_factor = max(1.1, _float("FPL_BACKOFF_FACTOR", 2.0))
        backoff_jitter = _float("FPL_BACKOFF_JITTER", 0.0)
        backoff_jitter = max(0.0, min(backoff_jitter, (backoff_factor - 1) * 0.99))

        request_timeout_total = _opt_float("FPL_REQUEST_TIMEOUT_TOTAL")

        return cls(
            base_url=base_url,
            timeout=timeout,
            user_agent=user_agent,
            log_level=log_level,
            max_attempts=max_attempts,
            backoff_base=backoff_base,
            backoff_factor=backoff_factor,
            backoff_jitter=backoff_jitter,
            request_timeout_total=request_timeout_total,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def _reset_settings_cache_for_tests() -> None:
    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "_reset_settings_cache_for_tests", "BOOTSTRAP_TTL_SECONDS"]
