"""Shared fixtures: a controllable millisecond clock and small stores."""

import pytest

from services.cache import CacheStore


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class RecordingLogger:
    """Stand-in for a structlog logger that keeps every event."""

    def __init__(self):
        self.events = []

    def _record(self, level, event, **kw):
        self.events.append((level, event, kw))

    def debug(self, event, **kw):
        self._record("debug", event, **kw)

    def info(self, event, **kw):
        self._record("info", event, **kw)

    def warning(self, event, **kw):
        self._record("warning", event, **kw)

    def error(self, event, **kw):
        self._record("error", event, **kw)

    def of_level(self, level):
        return [(event, kw) for lvl, event, kw in self.events if lvl == level]


def payload(size: int) -> str:
    """A string whose JSON form is exactly ``size`` bytes."""
    return "x" * (size - 2)


def assert_accounting(store: CacheStore) -> None:
    total = sum(store.peek(key).size_bytes for key in store.keys())
    assert store.memory_usage == total
    assert store.memory_usage <= store.max_memory_size


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    # 1000 byte budget -> 100 byte admission limit
    return CacheStore(max_memory_size=1000, clock=clock)


@pytest.fixture
def recording_logger():
    return RecordingLogger()
