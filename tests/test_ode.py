"""Tests for epidemic_grid.simulation.ode: the mean-field baseline."""

import numpy as np
import pytest

from epidemic_grid.simulation.config import SimulationParams
from epidemic_grid.simulation.ode import mean_field_curves, mean_field_rates, seird_ode


class TestSeirdOde:
    def test_population_is_conserved(self):
        derivs = seird_ode((90.0, 5.0, 5.0, 0.0, 0.0), 0, 100.0, 0.8, 0.3, 0.2, 0.1)
        assert sum(derivs) == pytest.approx(0.0)

    def test_no_exposed_compartment_without_incubation(self):
        dS, dE, dI, dR, dD = seird_ode((90.0, 0.0, 10.0, 0.0, 0.0), 0, 100.0, 0.5, None, 0.2, 0.0)
        assert dE == 0.0
        assert dI == pytest.approx(-dS - 0.2 * 10.0)

    def test_fatality_splits_resolutions(self):
        _, _, _, dR, dD = seird_ode((0.0, 0.0, 10.0, 0.0, 0.0), 0, 10.0, 0.5, 0.3, 0.5, 0.2)
        assert dR == pytest.approx(4.0)
        assert dD == pytest.approx(1.0)


class TestRates:
    def test_default_rates(self):
        beta, sigma, gamma = mean_field_rates(SimulationParams())
        assert beta == pytest.approx(0.15 * 8 * 0.7)
        assert sigma == pytest.approx(1 / 3)
        assert gamma == pytest.approx(1 / 5)

    def test_von_neumann_has_four_contacts(self):
        beta, _, _ = mean_field_rates(SimulationParams(neighborhood="von_neumann", density=1.0, rate=0.5))
        assert beta == pytest.approx(2.0)

    def test_no_incubation(self):
        _, sigma, _ = mean_field_rates(SimulationParams(incubation=0))
        assert sigma is None


class TestCurves:
    def test_shape_and_conservation(self):
        params = SimulationParams(days=50, width=20)
        data = mean_field_curves(params, population=280)
        assert set(data) == {"t", "S", "E", "I", "R", "D"}
        assert len(data["t"]) == 51
        total = data["S"] + data["E"] + data["I"] + data["R"] + data["D"]
        assert np.allclose(total, 280.0)

    def test_susceptibles_only_decrease(self):
        data = mean_field_curves(SimulationParams(days=100, width=30))
        assert np.all(np.diff(data["S"]) <= 1e-6)
        assert data["D"][-1] >= 0.0

    def test_default_population(self):
        params = SimulationParams(days=10, width=10, density=0.5)
        data = mean_field_curves(params)
        assert data["S"][0] == pytest.approx(49.0)
        assert data["I"][0] == pytest.approx(1.0)

    def test_days_override(self):
        data = mean_field_curves(SimulationParams(days=300), days=20)
        assert data["t"][-1] == 20
