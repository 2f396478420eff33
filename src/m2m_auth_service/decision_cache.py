"""
Process-local memoization of authorization outcomes.

Keys are token fingerprints, values are the resolved decision plus the
instant after which the entry must no longer be served. Expiry is evaluated
lazily against an injected clock; nothing runs in the background.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class CachedDecision:
    effect: str
    principal_id: str
    context: Dict[str, str] = field(default_factory=dict)
    # Latest instant the decision may be served, e.g. the token's exp
    not_after: Optional[float] = None


@dataclass(frozen=True)
class _Entry:
    decision: CachedDecision
    expires_at: float


class DecisionCache:
    def __init__(self, ttl_seconds: float = 300, max_entries: int = 10_000, clock: Clock = time.time):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _lookup(self, fingerprint: str) -> Optional[CachedDecision]:
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[fingerprint]
            return None
        return entry.decision

    def _store(self, fingerprint: str, decision: CachedDecision) -> None:
        # Overwrites re-insert at the end so eviction order follows population time.
        self._entries.pop(fingerprint, None)
        if len(self._entries) >= self.max_entries:
            self._make_room()
        expires_at = self._clock() + self.ttl_seconds
        if decision.not_after is not None:
            expires_at = min(expires_at, decision.not_after)
        self._entries[fingerprint] = _Entry(decision, expires_at)

    def _make_room(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        while len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)

    async def get_or_compute(
        self,
        fingerprint: str,
        compute: Callable[[], Awaitable[CachedDecision]],
    ) -> CachedDecision:
        """
        Return the live entry for ``fingerprint`` or await ``compute`` and cache
        its result. If ``compute`` raises, nothing is cached.
        """
        cached = self._lookup(fingerprint)
        if cached is not None:
            logger.debug(f"Decision cache hit for {fingerprint[:12]}")
            return cached

        decision = await compute()
        self._store(fingerprint, decision)
        return decision

    def invalidate(self, fingerprint: str) -> None:
        self._entries.pop(fingerprint, None)

    def clear(self) -> None:
        self._entries.clear()
