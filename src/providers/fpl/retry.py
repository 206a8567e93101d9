from __future__ import annotations

import random
import threading
import time
from typing import Callable, Optional, TypeVar

from core.config import Settings
from core.logging import get_logger
from monitoring.prometheus_exporter import record_retry
from .exceptions import (
    FetchCancelledError,
    FplClientError,
    RetryExhaustedError,
    TRANSIENT_ERRORS,
)

log = get_logger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """
    Retry con backoff esponenziale per una singola chiamata remota.

    Ritenta solo gli errori transitori (NetworkError, UpstreamError); qualsiasi
    altra eccezione (es. DecodeError) esce subito al primo tentativo.
    """

    def __init__(
        self,
        max_attempts: int = 4,
        backoff_base: float = 0.5,
        backoff_factor: float = 2.0,
        jitter: float = 0.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts deve essere >= 1")
        if backoff_base <= 0:
            raise ValueError("backoff_base deve essere > 0")
        if backoff_factor <= 1:
            raise ValueError("backoff_factor deve essere > 1")
        if not 0 <= jitter < backoff_factor - 1:
            raise ValueError("jitter deve essere in [0, backoff_factor - 1)")
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.backoff_factor = backoff_factor
        self.jitter = jitter

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.max_attempts,
            backoff_base=settings.backoff_base,
            backoff_factor=settings.backoff_factor,
            jitter=settings.backoff_jitter,
        )

    def compute_delay(self, attempt: int) -> float:
        # attempt parte da 1; il jitter può solo allungare l'attesa
        delay = self.backoff_base * (self.backoff_factor ** (attempt - 1))
        if self.jitter > 0:
            delay *= random.uniform(1.0, 1.0 + self.jitter)
        return delay

    def execute(
        self,
        operation: Callable[[], T],
        *,
        description: str = "",
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> T:
        last_error: Optional[FplClientError] = None
        prev_wait = 0.0
        for attempt in range(1, self.max_attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise FetchCancelledError(f"{description or 'operation'} cancelled before attempt {attempt}")
            try:
                return operation()
            except TRANSIENT_ERRORS as e:
                last_error = e
                if attempt == self.max_attempts:
                    raise RetryExhaustedError(e, attempt) from e

                # Retry-After fa da minimo; ogni attesa resta più lunga della precedente
                retry_after = getattr(e, "retry_after", None) or 0.0
                wait = max(self.compute_delay(attempt), retry_after, prev_wait * self.backoff_factor)
                prev_wait = wait

                if deadline is not None and time.monotonic() + wait > deadline:
                    raise FetchCancelledError(
                        f"{description or 'operation'} deadline exceeded after {attempt} attempts"
                    ) from e

                log.warning(
                    "retry attempt=%s wait=%.2fs reason=%s",
                    attempt,
                    wait,
                    e,
                    extra={"resource": description, "attempt": attempt},
                )
                record_retry(description)
                if cancel_event is not None:
                    if cancel_event.wait(wait):
                        raise FetchCancelledError(
                            f"{description or 'operation'} cancelled during backoff"
                        ) from e
                else:
                    time.sleep(wait)

        # Non dovrebbe mai arrivare qui
        raise RuntimeError(f"Fallimento imprevisto operation={description} last_error={last_error}")


__all__ = ["RetryPolicy"]
