"""Shared fixtures for the epidemic_grid tests."""

import matplotlib
matplotlib.use("Agg")

import pytest

from epidemic_grid.simulation.model import EpidemicModel


class FixedRandom:
    """Stands in for the model's random.Random; every draw returns `value`."""

    def __init__(self, value):
        self.value = value
        self.draws = 0

    def random(self):
        self.draws += 1
        return self.value


@pytest.fixture
def fixed_random():
    """Install a FixedRandom on a model: `fixed_random(model, 0.3)`."""
    def _install(model, value):
        rng = FixedRandom(value)
        model.random = rng
        return rng
    return _install


@pytest.fixture
def full_grid():
    """Factory for a fully populated grid with patient zero at the center."""
    def _make(**overrides):
        kwargs = dict(width=5, density=1.0, days=20, seed=42)
        kwargs.update(overrides)
        return EpidemicModel(**kwargs)
    return _make
