# epidemic_grid/simulation/plotting.py
"""
This file contains the rendering side of the simulation: turning the grid into
a raster image, and generating and saving plots of the simulation results.
It uses Matplotlib for the single-run report, batch analyses and parameter
sweeps.
"""

import os
import time

import matplotlib.pyplot as plt
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.collections import PatchCollection
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Patch
import numpy as np

from .constants import (
    CELL_SIZE,
    CURVE_COLORS,
    DiseaseState,
    GRID_CMAP,
    OUTPUT_DIR,
    SHORT_LABELS,
    STATE_COLORS,
    state_color,
)


def render_cells(cells, cell_size=CELL_SIZE):
    """
    Draws every cell as a filled circle coloured by its disease state.

    Cell `(x, y)` is centred at `((x + 1) * cell_size, (y + 1) * cell_size)`
    pixels, with a radius of half the cell size, on a black background.

    Args:
        cells (list): Cells with a `pos` and a `state`.
        cell_size (int): Distance in pixels between two cell centres.

    Returns:
        np.ndarray: An `(H, W, 4)` uint8 RGBA image.
    """
    side = max((max(c.pos) for c in cells), default=0) + 1
    pixels = (side + 1) * cell_size
    dpi = 100

    fig = Figure(figsize=(pixels / dpi, pixels / dpi), dpi=dpi, facecolor="black")
    canvas = FigureCanvasAgg(fig)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_facecolor("black")
    ax.set_xlim(0, pixels)
    ax.set_ylim(pixels, 0)
    ax.axis("off")

    circles = [Circle(((c.pos[0] + 1) * cell_size, (c.pos[1] + 1) * cell_size), cell_size / 2)
               for c in cells]
    colors = [state_color(c.state) for c in cells]
    ax.add_collection(PatchCollection(circles, facecolors=colors, edgecolors="none"))

    canvas.draw()
    return np.asarray(canvas.buffer_rgba()).copy()


def save_image(path, image):
    """Saves a raster produced by `render_cells` as a PNG file and returns the path."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    plt.imsave(path, image)
    return path


def state_grid(model):
    """
    Returns a `width x width` array of cell states for `imshow`.

    Row `y`, column `x` holds the cell at `(x, y)`, the same orientation as
    `render_cells`.
    """
    grid = np.full((model.width, model.width), int(DiseaseState.EMPTY))
    for c in model.cells:
        x, y = c.pos
        grid[y, x] = int(c.state)
    return grid


def draw_grid(ax, model):
    ax.imshow(state_grid(model), cmap=GRID_CMAP, vmin=-1, vmax=5, interpolation="nearest")
    ax.axis("off")


def draw_curves(ax, df, ode_data=None):
    """
    Draws the per-day counters of a run, with the mean-field curves dashed if given.

    Args:
        ax (matplotlib.axes.Axes): The axes to draw on.
        df (pd.DataFrame): Counters collected by the model.
        ode_data (dict, optional): Output of `mean_field_curves`.
    """
    if not df.empty:
        for column, color in CURVE_COLORS.items():
            ax.plot(df["day"], df[column], label=column.replace("_", " "), color=color)

    if ode_data is not None:
        ax.plot(ode_data["t"], ode_data["I"], "--", color=CURVE_COLORS["infected"], alpha=0.5,
                label="infected (mean field)")
        ax.plot(ode_data["t"], ode_data["D"], "--", color=CURVE_COLORS["dead"], alpha=0.5,
                label="dead (mean field)")

    ax.set_xlabel("Day")
    ax.set_ylabel("Cells")
    ax.legend(loc="upper right", fontsize="x-small")
    ax.grid(True, alpha=0.3)


def save_run_report(model, output_dir=OUTPUT_DIR, ode_data=None, name=None):
    """
    Generates and saves the report of a single simulation run.

    The report includes two plots:
    1.  Epidemic curves (grid counters, and the mean-field baseline if given).
    2.  The final state of the grid.

    Args:
        model (EpidemicModel): The completed model instance.
        output_dir (str): Directory for the images.
        ode_data (dict, optional): Output of `mean_field_curves`.
        name (str, optional): File name prefix. Defaults to a timestamp.

    Returns:
        tuple: The file paths of the saved plots (curves, map).
    """
    os.makedirs(output_dir, exist_ok=True)
    tag = name or time.strftime("%Y%m%d_%H%M%S")
    df = model.counter_history()

    # --- 1. Epidemic Curves Plot ---
    fig1, ax1 = plt.subplots(figsize=(10, 5))
    draw_curves(ax1, df, ode_data)
    ax1.set_title(f"Run Report ({model.day} days)")
    path_curves = os.path.join(output_dir, f"run_{tag}_curves.png")
    fig1.savefig(path_curves, dpi=150, bbox_inches="tight")
    plt.close(fig1)

    # --- 2. Final State Grid Plot ---
    fig2, ax2 = plt.subplots(figsize=(6, 5))
    draw_grid(ax2, model)
    ax2.set_title("Final Grid State")
    legend_elements = [Patch(facecolor=STATE_COLORS[s], edgecolor="k", label=l)
                       for s, l in zip(DiseaseState, SHORT_LABELS)]
    ax2.legend(handles=legend_elements, loc="upper right", bbox_to_anchor=(1.35, 1), fontsize="x-small")
    path_map = os.path.join(output_dir, f"run_{tag}_map.png")
    fig2.savefig(path_map, dpi=150, bbox_inches="tight")
    plt.close(fig2)

    return path_curves, path_map


def save_batch_results_plot(summary, threshold=None, output_dir=OUTPUT_DIR):
    """
    Saves the outcome of a batch run: how high the epidemic peaked in each run,
    and on which day, with the deaths of the run as the marker shade.

    Args:
        summary (pd.DataFrame): One row per run, as returned by `run_batch`.
        threshold (int, optional): A risk threshold drawn on both panels.
        output_dir (str): Directory for the image.

    Returns:
        str: The file path of the saved plot.
    """
    os.makedirs(output_dir, exist_ok=True)
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    fig, (ax_hist, ax_days) = plt.subplots(1, 2, figsize=(12, 5))

    ax_hist.hist(summary["peak_infected"], bins=15, color=CURVE_COLORS["infected"], alpha=0.7,
                 edgecolor="black")
    ax_hist.set_xlabel("Peak infected cells")
    ax_hist.set_ylabel("Runs")

    points = ax_days.scatter(summary["peak_day"], summary["peak_infected"], c=summary["dead"],
                             cmap="Greys", edgecolors=CURVE_COLORS["infected"])
    fig.colorbar(points, ax=ax_days, label="Deaths")
    ax_days.set_xlabel("Day of the peak")
    ax_days.set_ylabel("Peak infected cells")

    if threshold is not None:
        ax_hist.axvline(threshold, color="k", linestyle="--", label=f"Threshold ({threshold})")
        ax_days.axhline(threshold, color="k", linestyle="--")
        ax_hist.legend()

    for ax in (ax_hist, ax_days):
        ax.grid(alpha=0.3)
    fig.suptitle(f"Batch of {len(summary)} runs")

    path = os.path.join(output_dir, f"batch_{timestamp}_peaks.png")
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path


def save_sweep_results_plot(results, param_name, output_dir=OUTPUT_DIR):
    """
    Saves the mean epidemic peak per swept value, with one standard deviation
    across the runs as error bars.

    Args:
        results (list): `(value, mean_peak, std_peak)` tuples from `run_parameter_sweep`.
        param_name (str): The swept parameter (e.g. 'rate').
        output_dir (str): Directory for the image.

    Returns:
        str: The file path of the saved plot.
    """
    os.makedirs(output_dir, exist_ok=True)
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    values, means, stds = zip(*results)

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.errorbar(values, means, yerr=stds, fmt="-o", capsize=3, color=CURVE_COLORS["infected"])
    ax.set_xlabel(param_name)
    ax.set_ylabel("Peak infected cells (mean)")
    ax.set_title(f"Sweep over {param_name}")
    ax.grid(True, alpha=0.3)

    path = os.path.join(output_dir, f"sweep_{param_name}_{timestamp}.png")
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path
