from __future__ import annotations

import enum
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

from core.config import BOOTSTRAP_TTL_SECONDS
from core.logging import get_logger
from monitoring.prometheus_exporter import record_cache_lookup
from .exceptions import FetchCancelledError

log = get_logger(__name__)

T = TypeVar("T")


class CacheState(enum.Enum):
    EMPTY = "empty"
    FETCHING = "fetching"
    VALID = "valid"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at: float  # secondi monotonic

    def age(self, now: float) -> float:
        return now - self.fetched_at


@dataclass
class _Inflight(Generic[T]):
    future: "Future[T]" = field(default_factory=Future)
    cancelled: threading.Event = field(default_factory=threading.Event)


class ResourceCache(Generic[T]):
    """
    Memoizer TTL con single-flight e invalidazione forzata.

    - read(): valore in cache se più giovane del TTL, altrimenti UN solo fetch
      condiviso da tutti i chiamanti concorrenti (nessun thundering herd).
    - invalidate(): svuota la cache senza fetch; il read successivo rifà il fetch.
    - cancel(): annulla il fetch in corso; tutti i chiamanti in attesa
      ricevono FetchCancelledError.

    Un fetch fallito non tocca il valore eventualmente già in cache.

    La funzione di fetch riceve l'Event di cancellazione del proprio fetch e
    gira su un worker dedicato, così anche chi lo ha avviato può attenderlo
    con timeout.
    """

    def __init__(
        self,
        fetch: Callable[[threading.Event], T],
        ttl_seconds: float = BOOTSTRAP_TTL_SECONDS,
        *,
        name: str = "resource",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._ttl = ttl_seconds
        self._name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: Optional[CacheEntry[T]] = None
        self._inflight: Optional[_Inflight[T]] = None
        # Un fetch staccato da invalidate() può essere ancora in corso: non deve
        # bloccare il successivo. Il single-flight è garantito da _inflight.
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix=f"{name}-fetch")

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CacheState:
        with self._lock:
            if self._inflight is not None:
                return CacheState.FETCHING
            if self._entry is not None:
                return CacheState.VALID
            return CacheState.EMPTY

    def peek(self) -> Optional[CacheEntry[T]]:
        """Entry corrente (anche scaduta) senza avviare fetch."""
        with self._lock:
            return self._entry

    def _is_fresh(self, entry: CacheEntry[T]) -> bool:
        return entry.age(self._clock()) < self._ttl

    def read(self, timeout: Optional[float] = None) -> T:
        with self._lock:
            entry = self._entry
            if entry is not None and self._is_fresh(entry):
                record_cache_lookup(self._name, "hit")
                log.debug("cache hit %s", self._name, extra={"resource": self._name})
                return entry.value

            inflight = self._inflight
            if inflight is None:
                inflight = _Inflight()
                self._inflight = inflight
                record_cache_lookup(self._name, "miss")
                log.info(
                    "cache miss %s: fetch avviato (stale=%s)",
                    self._name,
                    entry is not None,
                    extra={"resource": self._name},
                )
                try:
                    self._executor.submit(self._run, inflight)
                except RuntimeError as e:
                    # executor già chiuso: nessun fetch partirà mai per questo handle
                    self._inflight = None
                    raise FetchCancelledError(f"{self._name}: cache closed") from e
            else:
                record_cache_lookup(self._name, "join")
                log.info("cache %s: join fetch in corso", self._name, extra={"resource": self._name})

        return self._wait(inflight, timeout)

    def invalidate(self) -> None:
        with self._lock:
            had_value = self._entry is not None
            self._entry = None
            # Il fetch in corso resta valido per chi lo sta già attendendo,
            # ma il suo risultato non verrà memorizzato.
            self._inflight = None
        log.info("cache %s invalidata (had_value=%s)", self._name, had_value, extra={"resource": self._name})

    def cancel(self, reason: str = "cancelled by caller") -> bool:
        """Annulla il fetch in corso, se presente. Ritorna True se c'era qualcosa da annullare."""
        with self._lock:
            inflight = self._inflight
        if inflight is None:
            return False
        self._abort(inflight, reason)
        return True

    def close(self) -> None:
        self.cancel("cache closed")
        self._executor.shutdown(wait=False)

    def _run(self, inflight: _Inflight[T]) -> None:
        try:
            value = self._fetch(inflight.cancelled)
        except Exception as e:
            with self._lock:
                if self._inflight is inflight:
                    self._inflight = None
                if not inflight.future.done():
                    inflight.future.set_exception(e)
            log.warning("fetch %s fallito: %s", self._name, e, extra={"resource": self._name})
            return

        with self._lock:
            if self._inflight is inflight:
                self._inflight = None
                self._entry = CacheEntry(value=value, fetched_at=self._clock())
            if not inflight.future.done():
                inflight.future.set_result(value)

    def _wait(self, inflight: _Inflight[T], timeout: Optional[float]) -> T:
        try:
            return inflight.future.result(timeout=timeout)
        except FutureTimeoutError:
            self._abort(inflight, f"timeout after {timeout}s")
            # Se il fetch si è concluso nel frattempo vince il suo esito.
            return inflight.future.result()

    def _abort(self, inflight: _Inflight[T], reason: str) -> None:
        with self._lock:
            if self._inflight is inflight:
                self._inflight = None
            inflight.cancelled.set()
            if not inflight.future.done():
                inflight.future.set_exception(FetchCancelledError(f"{self._name}: {reason}"))
        log.warning("fetch %s annullato: %s", self._name, reason, extra={"resource": self._name})


__all__ = ["ResourceCache", "CacheEntry", "CacheState"]
