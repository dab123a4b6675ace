import itertools
import uuid

import pytest


class CyclingRandom:
    """randrange() stand-in returning 0, 1, 2, ... modulo the bound."""

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)

    def randrange(self, stop: int) -> int:
        return next(self._counter) % stop


class ConstantRandom:
    def __init__(self, value: int = 0):
        self.value = value

    def randrange(self, stop: int) -> int:
        return self.value % stop


@pytest.fixture
def cycling_rng():
    return CyclingRandom()


@pytest.fixture
def constant_rng():
    return ConstantRandom()


@pytest.fixture
def make_uuid():
    return lambda: str(uuid.uuid4())
