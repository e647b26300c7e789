from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from threading import Lock

DEFAULT_LIMIT = 30
DEFAULT_WINDOW_SECONDS = 60


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int


class RateLimiterService(ABC):
    @abstractmethod
    def check(self, *, identity: str, endpoint: str) -> RateLimitDecision:
        """Valida se a escrita da identidade no endpoint de chat deve prosseguir."""


class InMemoryRateLimiterService(RateLimiterService):
    """Janela deslizante em memória por identidade (``user:<id>`` ou ``ip:<host>``).

    No máximo uma vez por janela, as chaves sem hit dentro da janela são
    descartadas; o mapa acompanha só quem escreveu recentemente.
    """

    def __init__(self, *, limit: int = DEFAULT_LIMIT, window_seconds: int = DEFAULT_WINDOW_SECONDS) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._buckets: dict[tuple[str, str], deque[float]] = {}
        self._next_sweep_at = 0.0
        self._lock = Lock()

    @property
    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _prune(self, bucket: deque[float], cutoff: float) -> None:
        while bucket and bucket[0] <= cutoff:
            bucket.popleft()

    def _sweep(self, now: float, cutoff: float) -> None:
        if now < self._next_sweep_at:
            return
        stale = [key for key, bucket in self._buckets.items() if not bucket or bucket[-1] <= cutoff]
        for key in stale:
            del self._buckets[key]
        self._next_sweep_at = now + self.window_seconds

    def check(self, *, identity: str, endpoint: str) -> RateLimitDecision:
        now = time.monotonic()
        cutoff = now - self.window_seconds
        key = (identity, endpoint)

        with self._lock:
            self._sweep(now, cutoff)

            bucket = self._buckets.get(key)
            if bucket is not None:
                self._prune(bucket, cutoff)

            if bucket and len(bucket) >= self.limit:
                retry_after = max(1, int(self.window_seconds - (now - bucket[0])))
                return RateLimitDecision(
                    allowed=False,
                    limit=self.limit,
                    remaining=0,
                    retry_after_seconds=retry_after,
                )

            if bucket is None:
                bucket = self._buckets[key] = deque()
            bucket.append(now)
            return RateLimitDecision(
                allowed=True,
                limit=self.limit,
                remaining=max(0, self.limit - len(bucket)),
                retry_after_seconds=0,
            )
