from __future__ import annotations

from typing import Optional, Sequence, Tuple


class FplClientError(Exception):
    """Base di tutti gli errori del client FPL."""

    retryable = False


class NetworkError(FplClientError):
    """Errore di trasporto (timeout, connessione) verso l'upstream."""

    retryable = True


class UpstreamError(FplClientError):
    """Risposta HTTP con status fuori dal range 2xx."""

    retryable = True

    def __init__(self, status: int, reason: str = "", retry_after: Optional[float] = None) -> None:
        self.status = status
        self.reason = reason
        self.retry_after = retry_after
        super().__init__(f"Upstream error: {status} {reason}".rstrip())


class DecodeError(FplClientError):
    """
    Payload ricevuto ma non valido (JSON malformato o schema non rispettato).
    Non viene ritentato: la stessa risposta darebbe lo stesso errore.
    """

    def __init__(self, detail: str, fields: Sequence[str] = ()) -> None:
        self.detail = detail
        self.fields: Tuple[str, ...] = tuple(fields)
        super().__init__(f"Decode error: {detail}")


class TeamNotFoundError(FplClientError):
    def __init__(self, team: str) -> None:
        self.input = team
        super().__init__(
            f"Team {team!r} not in this season's Premier League "
            "(check the spelling or retry with --refresh)"
        )


class RetryExhaustedError(FplClientError):
    """Sollevata quando un errore transitorio persiste oltre i tentativi massimi."""

    def __init__(self, last_error: FplClientError, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Upstream failure after {attempts} attempts: {last_error}")


class FetchCancelledError(FplClientError):
    """Fetch annullato dal chiamante (timeout o cancellazione esplicita)."""

    def __init__(self, reason: str = "cancelled") -> None:
        self.reason = reason
        super().__init__(f"Fetch cancelled: {reason}")


TRANSIENT_ERRORS = (NetworkError, UpstreamError)


__all__ = [
    "FplClientError",
    "NetworkError",
    "UpstreamError",
    "DecodeError",
    "TeamNotFoundError",
    "RetryExhaustedError",
    "FetchCancelledError",
    "TRANSIENT_ERRORS",
]
