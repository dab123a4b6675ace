import dataclasses
import random
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from seven.core.errors import EMPTY_ADDRESS, MALFORMED_IDENTITY, ValidationError
from seven.core.registry import DEFAULT_CAPACITY, FANOUT, PeerRegistry


@pytest.fixture
def clock():
    t = {"now": 1_000}
    return t


@pytest.fixture
def registry(cycling_rng, clock):
    return PeerRegistry(capacity=3, rng=cycling_rng, now=lambda: clock["now"])


def ids_of(entries):
    return {e.identity for e in entries}


def test_defaults():
    reg = PeerRegistry()
    assert reg.capacity == DEFAULT_CAPACITY == 1024
    assert reg.fanout == FANOUT == 16
    assert len(reg) == 0


def test_first_registration_gets_empty_sample(registry, make_uuid):
    assert registry.register(make_uuid(), "addr1") == []
    assert registry.count == 1


def test_scenario_capacity_three(registry):
    a, b, c, d = (str(uuid.uuid4()) for _ in range(4))
    registry.register(a, "1")
    registry.register(b, "2")
    registry.register(c, "3")

    sample = registry.register(d, "4")

    assert len(sample) == 3
    assert ids_of(sample) == {a, b, c}
    assert {e.address for e in sample} == {"1", "2", "3"}
    assert a not in registry
    assert all(x in registry for x in (b, c, d))
    assert registry.count == 3


def test_capacity_invariant_holds_after_every_registration(make_uuid):
    reg = PeerRegistry(capacity=8, rng=random.Random(7))
    for i in range(50):
        reg.register(make_uuid(), str(i))
        assert reg.count <= 8
    assert reg.count == 8


def test_eviction_order(make_uuid):
    reg = PeerRegistry(capacity=5, rng=random.Random(1))
    identities = [make_uuid() for _ in range(6)]
    for i, ident in enumerate(identities):
        reg.register(ident, str(i))
    assert identities[0] not in reg
    assert all(ident in reg for ident in identities[1:])


def test_reregistration_refreshes_in_place(registry, clock, make_uuid):
    ident = make_uuid()
    registry.register(ident, "old")
    clock["now"] = 2_000

    registry.register(ident, "new")

    assert registry.count == 1
    entry = registry.lookup(ident)
    assert entry.address == "new"
    assert entry.last_seen_ms == 2_000


def test_reregistration_counts_as_touch(registry, make_uuid):
    a, b, c, d = (make_uuid() for _ in range(4))
    for ident in (a, b, c):
        registry.register(ident, "x")
    registry.register(a, "again")
    registry.register(d, "y")
    assert a in registry
    assert b not in registry


def test_identity_spellings_share_one_entry(registry):
    ident = uuid.uuid4()
    registry.register(str(ident), "1")
    registry.register(str(ident).upper(), "2")
    registry.register("{%s}" % ident, "3")
    assert registry.count == 1
    assert registry.lookup(str(ident)).address == "3"


def test_sample_excludes_registering_identity(make_uuid):
    reg = PeerRegistry(capacity=32, rng=random.Random(3))
    identities = [make_uuid() for _ in range(20)]
    for ident in identities:
        assert ident not in ids_of(reg.register(ident, "a"))
    # refreshing an existing identity must not see itself either
    for ident in identities:
        assert ident not in ids_of(reg.register(ident, "b"))


def test_sample_bound_and_no_duplicates(make_uuid):
    reg = PeerRegistry(capacity=100, rng=random.Random(11))
    for i in range(100):
        sample = reg.register(make_uuid(), str(i))
        ids = [e.identity for e in sample]
        assert len(ids) <= 16
        assert len(ids) == len(set(ids))


def test_sample_of_five(cycling_rng, make_uuid):
    reg = PeerRegistry(rng=cycling_rng)
    for i in range(5):
        reg.register(make_uuid(), str(i))
    assert len(reg.register(make_uuid(), "6")) == 5


def test_malformed_identity_leaves_store_untouched(registry, make_uuid):
    registry.register(make_uuid(), "addr0")
    before = registry.snapshot()

    with pytest.raises(ValidationError) as info:
        registry.register("not-a-uuid", "addr1")

    assert info.value.reason == MALFORMED_IDENTITY
    assert registry.snapshot() == before


def test_empty_address_leaves_store_untouched(registry, make_uuid):
    ident = make_uuid()
    with pytest.raises(ValidationError) as info:
        registry.register(ident, "")
    assert info.value.reason == EMPTY_ADDRESS
    assert ident not in registry
    assert registry.count == 0


def test_validation_error_is_a_value_error(registry):
    with pytest.raises(ValueError):
        registry.register("nope", "a")


def test_lookup_of_malformed_identity_is_none(registry):
    assert registry.lookup("garbage") is None


def test_concurrent_registrations_respect_capacity(make_uuid):
    reg = PeerRegistry(capacity=64)
    identities = [make_uuid() for _ in range(1000)]

    def work(i):
        return reg.register(identities[i], str(i))

    with ThreadPoolExecutor(max_workers=8) as pool:
        samples = list(pool.map(work, range(len(identities))))

    assert reg.count == 64
    for ident, sample in zip(identities, samples):
        ids = [e.identity for e in sample]
        assert len(ids) <= 16
        assert len(ids) == len(set(ids))
        assert ident not in ids


def test_earlier_snapshot_keeps_old_address(registry, clock, make_uuid):
    ident = make_uuid()
    registry.register(ident, "old")
    before = registry.snapshot()
    clock["now"] = 2_000

    registry.register(ident, "new")

    assert [(e.address, e.last_seen_ms) for e in before] == [("old", 1_000)]
    assert registry.lookup(ident).address == "new"


def test_looked_up_entry_cannot_alter_store(registry, make_uuid):
    ident = make_uuid()
    registry.register(ident, "a")
    entry = registry.lookup(ident)
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.address = ""
    assert registry.lookup(ident).address == "a"


def test_empty_address_for_known_identity_changes_nothing(registry, clock, make_uuid):
    x, y, z = (make_uuid() for _ in range(3))
    registry.register(x, "a")
    registry.register(y, "b")
    registry.register(z, "c")
    order = [e.identity for e in registry.snapshot()]
    clock["now"] = 5_000

    with pytest.raises(ValidationError) as info:
        registry.register(x, "")

    assert info.value.reason == EMPTY_ADDRESS
    entry = registry.lookup(x)
    assert entry.address == "a"
    assert entry.last_seen_ms == 1_000
    assert [e.identity for e in registry.snapshot()] == order

    # x is still the oldest, so it is the one evicted next
    registry.register(make_uuid(), "d")
    assert x not in registry
    assert y in registry
