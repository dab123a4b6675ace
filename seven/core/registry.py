from __future__ import annotations

import logging
import random
import threading
import uuid
from typing import Callable, List, Optional

from .entry import PeerEntry, parse_identity
from .errors import EMPTY_ADDRESS, MALFORMED_IDENTITY, ValidationError
from .proto import PeerForm, now_ms
from .sampler import RandomSource, pick_some
from .store import LRUStore

log = logging.getLogger("seven.registry")

NowFn = Callable[[], int]

DEFAULT_CAPACITY = 1024
FANOUT = 16


class PeerRegistry:
    """Bounded directory of peers handing out random introductions.

    One instance is created at start-up and shared by every request
    handler. A single lock guards the store; sampling works on a copy
    taken under that lock, so two peers registering at the same instant
    may miss each other.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        *,
        fanout: int = FANOUT,
        rng: Optional[RandomSource] = None,
        now: NowFn = now_ms,
    ) -> None:
        self._store = LRUStore(capacity)
        self._lock = threading.Lock()
        self.fanout = fanout
        self.rng = rng if rng is not None else random.Random()
        self.now = now

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, identity_text: str, address: str) -> List[PeerForm]:
        """Store (or refresh) a peer and return a sample of the others.

        The sample is drawn from the entries present before the peer is
        inserted and never contains the registering identity, even when it
        is refreshing an existing entry. Raises ValidationError without
        touching the store when the identity or address is unusable.
        """

        identity = parse_identity(identity_text)
        if not isinstance(address, str) or len(address) < 1:
            raise ValidationError(EMPTY_ADDRESS)

        candidates = [e for e in self.snapshot() if e.identity != identity]
        entries = pick_some(candidates, self.fanout, self.rng)

        log.debug("Registering client %s", identity)
        evicted = self._upsert(identity, address)
        if evicted is not None:
            log.debug("Evicted client %s", evicted.identity)
        return entries

    def _upsert(self, identity: uuid.UUID, address: str) -> Optional[PeerEntry]:
        now = self.now()
        with self._lock:
            existing = self._store.get(identity)
            if existing is not None:
                return self._store.put(identity, existing.refreshed(address, now))
            return self._store.put(identity, PeerEntry(identity=identity, address=address, last_seen_ms=now))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def snapshot(self) -> List[PeerEntry]:
        with self._lock:
            return self._store.values()

    def lookup(self, identity_text: str) -> Optional[PeerEntry]:
        try:
            identity = parse_identity(identity_text)
        except ValidationError:
            return None
        with self._lock:
            return self._store.get(identity)

    @property
    def capacity(self) -> int:
        return self._store.capacity

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._store)

    def __len__(self) -> int:
        return self.count

    def __contains__(self, identity_text: object) -> bool:
        return self.lookup(identity_text) is not None  # type: ignore[arg-type]


__all__ = ["PeerRegistry", "DEFAULT_CAPACITY", "FANOUT", "ValidationError", "MALFORMED_IDENTITY", "EMPTY_ADDRESS"]
