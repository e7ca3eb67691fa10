# epidemic_grid/simulation/analysis.py
"""
Repeated runs of the grid model with `mesa.batch_run`.

Every run gets its own seed (`base_seed + i`), so a batch is reproducible as a
whole and individual runs can be replayed with `EpidemicModel(seed=...)`.
"""

import logging

import pandas as pd
from mesa.batchrunner import batch_run

from .model import EpidemicModel

logger = logging.getLogger(__name__)


def _batch_frame(params, runs, base_seed, overrides=None):
    if params.days < 1:
        raise ValueError("batch runs need a day budget of at least one day")
    model_params = params.to_dict()
    model_params["seed"] = [base_seed + i for i in range(runs)]
    if overrides:
        model_params.update(overrides)

    results = batch_run(
        EpidemicModel,
        parameters=model_params,
        number_processes=1,
        iterations=1,
        data_collection_period=1,
        max_steps=params.days,
        display_progress=False,
    )
    return pd.DataFrame(results)


def run_batch(params, runs=10, base_seed=0):
    """
    Runs the model `runs` times with the same parameters and different seeds.

    Args:
        params (SimulationParams): Parameters shared by every run (its seed is ignored).
        runs (int): Number of runs.
        base_seed (int): Seed of the first run.

    Returns:
        pd.DataFrame: One row per run with the columns `seed`, `peak_infected`,
        `peak_day`, `dead`, `recovered` and `ever_infected`.
    """
    logger.info("Starting batch of %d runs", runs)
    df = _batch_frame(params, runs, base_seed)

    summaries = []
    for seed, run_df in df.groupby("seed"):
        final = run_df.iloc[-1]
        peak_row = run_df.loc[run_df["infected"].idxmax()]
        summaries.append({
            "seed": seed,
            "peak_infected": int(run_df["infected"].max()),
            "peak_day": int(peak_row["day"]),
            "dead": int(final["dead"]),
            "recovered": int(final["recovered"]),
            "ever_infected": int(final["ever_infected"]),
        })
    return pd.DataFrame(summaries)


def exceedance_probability(peaks, threshold):
    """Share of runs whose peak is strictly above `threshold`."""
    peaks = list(peaks)
    if not peaks:
        return 0.0
    return sum(1 for p in peaks if p > threshold) / len(peaks)


def run_parameter_sweep(params, name, values, runs=10, base_seed=0):
    """
    Varies one parameter and runs `runs` seeds per value.

    Returns:
        list: `(value, mean_peak, std_peak)` tuples in the order of `values`,
        the spread taken over the seeds of each value.
    """
    values = list(values)
    if name not in params.to_dict():
        raise KeyError(f"Unknown parameter: {name}")
    logger.info("Sweeping %s over %d values, %d runs each", name, len(values), runs)

    df = _batch_frame(params, runs, base_seed, overrides={name: values})
    peaks = df.groupby([name, "seed"])["infected"].max()
    by_value = peaks.groupby(level=0)
    means, stds = by_value.mean(), by_value.std(ddof=0)
    return [(value, float(means.loc[value]), float(stds.loc[value])) for value in values]
