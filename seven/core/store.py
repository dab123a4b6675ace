from __future__ import annotations

import uuid
from collections import OrderedDict
from typing import Iterator, List, Optional

from .entry import PeerEntry


class LRUStore:
    """Fixed-capacity map of identity -> PeerEntry with recency eviction.

    Inserting or overwriting an identity moves it to the most recent
    position. When a new identity arrives at capacity the least recently
    touched entry is dropped. ``last_seen_ms`` plays no part in ordering.

    Not thread-safe; PeerRegistry serialises access.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("must provide a positive capacity")
        self._capacity = capacity
        self._items: "OrderedDict[uuid.UUID, PeerEntry]" = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, identity: uuid.UUID, entry: PeerEntry) -> Optional[PeerEntry]:
        """Insert or overwrite; returns the evicted entry, if any."""
        if identity in self._items:
            self._items[identity] = entry
            self._items.move_to_end(identity)
            return None

        evicted = None
        if len(self._items) >= self._capacity:
            _, evicted = self._items.popitem(last=False)
        self._items[identity] = entry
        return evicted

    def get(self, identity: uuid.UUID) -> Optional[PeerEntry]:
        # lookups do not count as a touch
        return self._items.get(identity)

    def values(self) -> List[PeerEntry]:
        """Entries from least to most recently touched."""
        return list(self._items.values())

    def keys(self) -> List[uuid.UUID]:
        return list(self._items.keys())

    def __contains__(self, identity: object) -> bool:
        return identity in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[uuid.UUID]:
        return iter(self.keys())


__all__ = ["LRUStore"]
