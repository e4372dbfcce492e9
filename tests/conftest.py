from __future__ import annotations

import itertools
import pathlib
import sys
from collections.abc import Callable, Iterator

import pytest

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from apps.uuid_mcp.config import ServerSettings
from apps.uuid_mcp.identifiers import IdentifierCodec


@pytest.fixture(scope="session")
def repo_root() -> pathlib.Path:
    return REPO_ROOT


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings()


class ManualClock:
    """Millisecond clock advanced explicitly by tests."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, delta_ms: int = 1) -> None:
        self.now_ms += delta_ms


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


def counting_random_source() -> Callable[[int], bytes]:
    """Deterministic byte source: each call returns the next ``n`` counter bytes."""

    counter: Iterator[int] = itertools.count()

    def _source(size: int) -> bytes:
        return bytes(next(counter) % 256 for _ in range(size))

    return _source


@pytest.fixture
def codec() -> IdentifierCodec:
    return IdentifierCodec()


@pytest.fixture
def deterministic_codec(clock: ManualClock) -> IdentifierCodec:
    return IdentifierCodec(random_source=counting_random_source(), clock=clock)
