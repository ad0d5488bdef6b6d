import matplotlib
matplotlib.use("Agg")

import pytest

from lfu_ttl.cache.lfu_ttl_cache import LFUTTLCache


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_cache(clock):
    def factory(**kwargs):
        kwargs.setdefault("clock", clock)
        return LFUTTLCache(**kwargs)
    return factory
