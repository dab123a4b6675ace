from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence, Set

from .entry import PeerEntry
from .proto import PeerForm

MAX_TRIES = 5


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


def good_random(upper: int, bad: Set[int], rng: RandomSource = random) -> Optional[int]:
    """Draw an index in [0, upper) not in ``bad``, giving up after MAX_TRIES."""

    for _ in range(MAX_TRIES):
        candidate = rng.randrange(upper)
        if candidate not in bad:
            return candidate
    return None


def pick_some(values: Sequence[PeerEntry], amount: int, rng: RandomSource = random) -> List[PeerForm]:
    """Pick up to ``amount`` distinct entries at random.

    Stops at the first pick whose retry budget is exhausted, so the result
    can be shorter than ``min(amount, len(values))`` once most candidates
    are already taken. Callers must treat a short result as normal.
    """

    picked: List[PeerForm] = []
    if not values:
        return picked

    chosen: Set[int] = set()
    while amount > 0:
        idx = good_random(len(values), chosen, rng)
        if idx is None:
            break
        chosen.add(idx)
        picked.append(values[idx].to_form())
        amount -= 1
    return picked


__all__ = ["MAX_TRIES", "RandomSource", "good_random", "pick_some"]
