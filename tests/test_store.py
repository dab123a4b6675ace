import uuid

import pytest

from seven.core.entry import PeerEntry
from seven.core.store import LRUStore


def mk_entry(address="addr"):
    return PeerEntry(identity=uuid.uuid4(), address=address, last_seen_ms=0)


def fill(store, n):
    entries = [mk_entry(str(i)) for i in range(n)]
    for e in entries:
        store.put(e.identity, e)
    return entries


@pytest.mark.parametrize("capacity", [0, -1])
def test_rejects_non_positive_capacity(capacity):
    with pytest.raises(ValueError):
        LRUStore(capacity)


def test_len_never_exceeds_capacity():
    store = LRUStore(4)
    for i in range(10):
        e = mk_entry(str(i))
        store.put(e.identity, e)
        assert len(store) <= 4
    assert len(store) == 4


def test_evicts_least_recently_inserted():
    store = LRUStore(3)
    a, b, c = fill(store, 3)
    d = mk_entry("d")

    evicted = store.put(d.identity, d)

    assert evicted is a
    assert a.identity not in store
    assert store.keys() == [b.identity, c.identity, d.identity]


def test_overwrite_moves_to_most_recent_without_eviction():
    store = LRUStore(3)
    a, b, c = fill(store, 3)

    refreshed = PeerEntry(identity=a.identity, address="new", last_seen_ms=5)
    assert store.put(a.identity, refreshed) is None
    assert len(store) == 3
    assert store.get(a.identity).address == "new"

    d = mk_entry("d")
    evicted = store.put(d.identity, d)
    assert evicted is b
    assert a.identity in store


def test_get_does_not_touch():
    store = LRUStore(2)
    a, b = fill(store, 2)
    store.get(a.identity)
    c = mk_entry("c")
    assert store.put(c.identity, c) is a


def test_values_oldest_first():
    store = LRUStore(5)
    entries = fill(store, 3)
    assert store.values() == entries
    assert list(store) == [e.identity for e in entries]
