# epidemic_grid/simulation/constants.py
"""
This file defines global constants used throughout the simulation model.
It includes the disease states a grid cell can be in, the colour scheme used
when drawing the grid, and the default output directory.
"""

import enum

from matplotlib.colors import ListedColormap, to_rgb


class DiseaseState(enum.IntEnum):
    """The disease state of a single grid cell."""
    EMPTY = -1  # Unpopulated position
    SUSCEPTIBLE = 0
    INCUBATING = 1
    INFECTIOUS = 2
    QUARANTINED = 3
    RECOVERED = 4
    DEAD = 5


# States that are never left again once entered
TERMINAL_STATES = (DiseaseState.EMPTY, DiseaseState.DEAD)

# Infected cells, whether they can transmit yet or not
INFECTED_STATES = (DiseaseState.INCUBATING, DiseaseState.INFECTIOUS, DiseaseState.QUARANTINED)

# Cells that a neighbor can (re)infect
EXPOSABLE_STATES = (DiseaseState.SUSCEPTIBLE, DiseaseState.RECOVERED)

# Short labels for cell states, used in plots and charts
SHORT_LABELS = ["Empty", "S", "Inc", "I", "Q", "R", "D"]

# Radius of each drawn cell, in pixels
CELL_SIZE = 10

# Colour per state. Recovered cells keep the susceptible green; only their
# immunity tells them apart.
STATE_COLORS = {
    DiseaseState.EMPTY: "#000000",
    DiseaseState.SUSCEPTIBLE: "#00FF00",
    DiseaseState.INCUBATING: "#FFCC99",
    DiseaseState.INFECTIOUS: "#FF0000",
    DiseaseState.QUARANTINED: "#99CCFF",
    DiseaseState.RECOVERED: "#00FF00",
    DiseaseState.DEAD: "#000000",
}

# Matplotlib Colormap for grid visualization, indexed from EMPTY (-1) to DEAD (5)
GRID_CMAP = ListedColormap([STATE_COLORS[s] for s in DiseaseState])

# Colors for the line charts
CURVE_COLORS = {
    "infected": "tab:red",
    "dead": "black",
    "recovered": "tab:green",
    "ever_infected": "tab:orange",
}

# Directory for saving simulation output data and plots
OUTPUT_DIR = "data"


def state_color(state):
    """
    Returns the RGB colour of a disease state.

    Args:
        state (DiseaseState): The state to colour.

    Returns:
        tuple: An `(r, g, b)` tuple of floats in [0, 1].
    """
    return to_rgb(STATE_COLORS[DiseaseState(state)])
