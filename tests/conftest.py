"""Pytest configuration and fixtures for herd simulation tests."""

from pathlib import Path

import pytest

from herd_sim.sim.catalog import LevelSpec, HerdSpec, DeterrentSpec, DeterrentCatalog
from herd_sim.sim.engine import Simulation
from herd_sim.sim.events import EventBus
from herd_sim.sim.rng import RNG


def level(*herd_sizes, farms=0, houses=0, name="Test Level"):
    """Build a LevelSpec from herd sizes."""
    return LevelSpec(name=name, farms=farms, houses=houses,
                     herds=tuple(HerdSpec(n) for n in herd_sizes))


TEST_DETERRENTS = {
    "thorns": DeterrentSpec(kind="thorns", name="Thorny Bush", cost=20, effectiveness=50,
                            duration=200000, range=50, unlock_level=1),
    "trench": DeterrentSpec(kind="trench", name="Trench", cost=60, effectiveness=100,
                            duration=300000, range=45, size=60, blocking=True, unlock_level=2),
}


class StickyContacts:
    """Contact primitive that reports chosen elephants as standing on every farm."""

    def __init__(self):
        self.on_farm = set()

    def overlaps(self, elephants, farms):
        for e in elephants:
            if e.active and e.uid in self.on_farm:
                for f in farms:
                    yield e, f

    def resolve_solid(self, elephants, deterrents):
        return 0


@pytest.fixture(autouse=True)
def seeded_rng():
    """Reset the shared RNG so every test is deterministic."""
    RNG.seed(42)


@pytest.fixture
def catalog():
    return DeterrentCatalog(TEST_DETERRENTS)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def big_herd_sim(catalog, bus):
    """A playing simulation whose single herd is large enough never to finish during a test."""
    sim = Simulation(levels=[level(50)], catalog=catalog, seed=7, bus=bus)
    sim.continue_level()
    return sim


@pytest.fixture
def repo_root():
    return Path(__file__).resolve().parents[1]
