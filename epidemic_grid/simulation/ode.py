# epidemic_grid/simulation/ode.py
"""
This file defines the system of Ordinary Differential Equations (ODEs) for a
well-mixed SEIRD (Susceptible-Exposed-Infected-Recovered-Dead) model.

The ODEs give a deterministic, mean-field view of the epidemic with the same
rates as the grid simulation, as a baseline to compare the lattice runs
against. Interventions and reinfection are not part of it.
"""
import numpy as np
from scipy.integrate import odeint

# Neighbors of an interior cell
MOORE_CONTACTS = 8
VON_NEUMANN_CONTACTS = 4


def seird_ode(y, t, N, beta, sigma, gamma, fatality):
    """
    Defines the differential equations for the SEIRD model.

    This function is designed to be used with an ODE solver like `scipy.integrate.odeint`.

    Args:
        y (tuple): A tuple `(S, E, I, R, D)` with the population in each compartment.
        t (float): The current time (required by the ODE solver, not used directly).
        N (float): The living population at the start of the run.
        beta (float): The transmission rate.
        sigma (float or None): The rate of progression from exposed to infected
            (1 / incubation period). None sends new infections straight to I.
        gamma (float): The resolution rate of infected individuals.
        fatality (float): The share of resolutions that end in death.

    Returns:
        tuple: `(dSdt, dEdt, dIdt, dRdt, dDdt)`.
    """
    S, E, I, R, D = y

    infection = beta * S * I / N if N > 0 else 0.0
    resolution = gamma * I

    if sigma is None:
        progression = infection
        dEdt = 0.0
    else:
        progression = sigma * E
        dEdt = infection - progression

    dSdt = -infection
    dIdt = progression - resolution
    dRdt = resolution * (1.0 - fatality)
    dDdt = resolution * fatality

    return dSdt, dEdt, dIdt, dRdt, dDdt


def mean_field_rates(params):
    """Maps grid parameters to `(beta, sigma, gamma)` of the well-mixed model."""
    contacts = MOORE_CONTACTS if params.moore else VON_NEUMANN_CONTACTS
    beta = params.rate * contacts * params.density
    sigma = 1.0 / params.incubation if params.incubation > 0 else None
    # A cell stays infectious for `duration` days plus the day it resolves
    gamma = 1.0 / (params.duration + 1)
    return beta, sigma, gamma


def mean_field_curves(params, days=None, population=None):
    """
    Integrates the SEIRD system for the given simulation parameters.

    Args:
        params (SimulationParams): The grid simulation parameters.
        days (int, optional): Number of days to integrate. Defaults to `params.days`.
        population (int, optional): Living population. Defaults to the expected
            population `density * width**2`.

    Returns:
        dict: Arrays keyed by "t", "S", "E", "I", "R", "D".
    """
    days = params.days if days is None else days
    N = population if population is not None else params.density * params.width ** 2
    N = max(float(N), 1.0)
    beta, sigma, gamma = mean_field_rates(params)

    t = np.linspace(0, days, max(days, 1) + 1)
    y0 = (N - 1, 0.0, 1.0, 0.0, 0.0)
    ret = odeint(seird_ode, y0, t, args=(N, beta, sigma, gamma, params.fatality))
    return {"t": t, "S": ret[:, 0], "E": ret[:, 1], "I": ret[:, 2], "R": ret[:, 3], "D": ret[:, 4]}
