# epidemic_grid/simulation/report.py
"""
Persistence of the per-day counters and the end-of-run text summary.

The counters file has one row per simulated day with the columns
`day, infected, deaths, ever_infected`.
"""

import logging
import os

import pandas as pd

from .constants import OUTPUT_DIR

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = ["day", "infected", "deaths", "ever_infected"]


class CounterLog:
    """Accumulates one row of counters per day and writes them out at the end."""

    def __init__(self):
        self.rows = []

    def append_row(self, day, infected, deaths, ever_infected):
        self.rows.append((day, infected, deaths, ever_infected))

    def to_frame(self):
        return pd.DataFrame(self.rows, columns=COUNTER_COLUMNS)

    def flush(self, path):
        """Writes every row collected so far, header included, and returns the path."""
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self.to_frame().to_csv(path, index=False)
        logger.info("Saved %d rows of counters to %s", len(self.rows), path)
        return path


def counters_path(name, output_dir=OUTPUT_DIR):
    return os.path.join(output_dir, f"epidemic-{name}.csv")


def save_counter_history(model, name, output_dir=OUTPUT_DIR):
    """
    Writes the counters collected by the model's DataCollector to a CSV file.

    Args:
        model (EpidemicModel): The model, run or partially run.
        name (str): The data file name, saved as `epidemic-<name>.csv`.
        output_dir (str): Directory of the data file.

    Returns:
        str: The path of the written file.
    """
    log = CounterLog()
    df = model.counter_history()
    for row in df.itertuples(index=False):
        log.append_row(int(row.day), int(row.infected), int(row.dead), int(row.ever_infected))
    return log.flush(counters_path(name, output_dir))


def _pct(part, whole):
    return part * 100.0 / whole if whole else 0.0


def summary_lines(model):
    """Builds the end-of-run summary: outcome totals, then the parameters used."""
    p = model.params
    ever = model.living - model.never_infected
    lines = [
        f"Time      : {model.day}/{p.days} days",
        f"Infected  : {ever} out of {model.living} ({_pct(ever, model.living):2.1f}%)",
        f"Died      : {model.dead} out of {model.living} ({_pct(model.dead, model.living):2.1f}%)",
        f"Recovered : {model.recovered} out of {model.ever_infected} infected "
        f"({_pct(model.recovered, model.ever_infected):2.1f}%)",
        "",
        "PARAMETERS",
        f"Density      : {p.density * 100:2.0f}% populated",
        f"Infection    : {p.rate * 100:2.1f}%",
        f"Re-infection : {(1 - p.immunity) * 100:2.1f}%",
        f"Incubation   : {p.incubation} days",
        f"Infectious   : {p.duration} days",
        f"Fatality     : {p.fatality * 100:2.1f}% fatal",
    ]
    if p.q_introduced is not None and p.q_introduced < p.days:
        lines += [
            "",
            "QUARANTINE",
            f"Quarantine introduced    : day {p.q_introduced}",
            f"Quarantine effectiveness : {p.q_effectiveness * 100:2.1f}% found and quarantined",
        ]
    if p.med_introduced is not None and p.med_introduced < p.days:
        lines += [
            "",
            "MEDICINE",
            f"Med introduced    : day {p.med_introduced}",
            f"Med effectiveness : {p.med_effectiveness * 100:2.1f}% recovery",
        ]
    return lines
