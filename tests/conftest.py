from __future__ import annotations

import random
from typing import List

import pytest

from thugs_server.ids import IdGenerator
from thugs_server.world import World


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def world(clock: FakeClock) -> World:
    return World(clock=clock, ids=IdGenerator(), rng=random.Random(1234))


def event_types(world: World) -> List[str]:
    return [outgoing.message.type for outgoing in world.drain_events()]
