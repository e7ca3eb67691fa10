# epidemic_grid/simulation/main.py
"""
This is the command-line entry point of the grid epidemic simulator.

It supports three modes of operation:
1.  **Single run**: one headless simulation. The per-day counters are saved to
    `<output-dir>/epidemic-<name>.csv`, a report with the epidemic curves and
    the final grid is saved next to it, and a summary is printed at the end.
    Typing `q` + Enter or pressing Ctrl-C stops the run at the end of the
    current day.
2.  **Batch analysis** (`--batch RUNS`): repeats the run with consecutive
    seeds and reports the distribution of epidemic peaks.
3.  **Parameter sweep** (`--sweep PARAM --values V1 V2 ...`): runs a batch for
    every value of one parameter and plots the mean peak against it.

The live animated view is in `epidemic_grid/server.py`.
"""
import argparse
import logging
import os
import signal
import sys
import threading
from dataclasses import replace

import matplotlib

from .analysis import exceedance_probability, run_batch, run_parameter_sweep
from .config import ConfigError, NEIGHBORHOODS, SimulationParams, parse_patient_zero
from .constants import OUTPUT_DIR
from .model import EpidemicModel
from .ode import mean_field_curves
from .plotting import (
    render_cells,
    save_batch_results_plot,
    save_image,
    save_run_report,
    save_sweep_results_plot,
)
from .report import save_counter_history, summary_lines

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Grid-based epidemic spread simulator")

    # Simulation configuration
    parser.add_argument("-t", dest="days", type=int, default=300, help="number of simulation days")
    parser.add_argument("-w", dest="width", type=int, default=60, help="the number of cells on one side of the grid")
    parser.add_argument("--name", default="data", help="file name of data file")
    parser.add_argument("--seed", type=int, default=None, help="random seed, for reproducible runs")

    # Epidemic parameters
    parser.add_argument("-r", dest="rate", type=float, default=0.15, help="how likely infection happens")
    parser.add_argument("-n", dest="incubation", type=int, default=3, help="how long before the cell becomes infectious")
    parser.add_argument("-d", dest="duration", type=int, default=4, help="how long the cell remains infectious")
    parser.add_argument("-f", dest="fatality", type=float, default=0.02, help="probability of fatality")
    parser.add_argument("-i", dest="immunity", type=float, default=0.5,
                        help="how immune the cell is to infection after recovery")
    parser.add_argument("-c", dest="density", type=float, default=0.7,
                        help="percentage of simulation grid that is populated")

    # Preventive measures
    parser.add_argument("-m", dest="med_introduced", type=int, default=None, help="day when medicine is introduced")
    parser.add_argument("-e", dest="med_effectiveness", type=float, default=0.0, help="effectiveness of medicine")
    parser.add_argument("-q", dest="q_introduced", type=int, default=None, help="day when quarantine is introduced")
    parser.add_argument("-g", dest="q_effectiveness", type=float, default=0.0, help="effectiveness of quarantine")

    # Topology and termination
    parser.add_argument("--neighborhood", choices=NEIGHBORHOODS, default="moore",
                        help="8 neighbors (moore) or 4 neighbors (von_neumann)")
    parser.add_argument("--torus", action="store_true", help="wrap the grid around its edges")
    parser.add_argument("--patient-zero", type=parse_patient_zero, default="center",
                        help="'center', 'random' or a grid index")
    parser.add_argument("--stop-when-clear", action="store_true",
                        help="stop as soon as no cell is infected")

    # Output
    parser.add_argument("--output-dir", default=OUTPUT_DIR, help="directory for data files and plots")
    parser.add_argument("--snapshots", action="store_true", help="save a PNG of the grid every day")
    parser.add_argument("--no-report", action="store_true", help="skip the report plots")
    parser.add_argument("--batch", type=int, default=0, metavar="RUNS", help="run a batch analysis instead")
    parser.add_argument("--threshold", type=int, default=None, help="risk threshold for the batch analysis")
    parser.add_argument("--sweep", metavar="PARAM", default=None,
                        help="sweep one parameter over --values, with --batch runs per value")
    parser.add_argument("--values", type=float, nargs="+", default=None, help="values for --sweep")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every simulated day")
    return parser


PARAM_ARGS = (
    "days", "width", "rate", "incubation", "duration", "fatality", "immunity", "density",
    "med_introduced", "med_effectiveness", "q_introduced", "q_effectiveness", "seed",
    "neighborhood", "torus", "patient_zero", "stop_when_clear",
)

# Numeric parameters --sweep can vary. The day budget is left out because it
# also bounds the batch run.
INT_PARAMS = ("width", "incubation", "duration", "med_introduced", "q_introduced")
SWEEP_PARAMS = INT_PARAMS + (
    "rate", "fatality", "immunity", "density", "med_effectiveness", "q_effectiveness",
)


def params_from_args(args):
    params = SimulationParams.from_dict({name: getattr(args, name) for name in PARAM_ARGS})
    params.validate()
    return params


# --- SIMULATION LOGIC ---

def listen_for_quit(cancel_event, stream=None):
    """
    Sets `cancel_event` when a line reading `q` arrives on `stream`.

    Runs in a daemon thread so that the simulation never waits on input.
    """
    stream = stream if stream is not None else sys.stdin

    def _listen():
        for line in stream:
            if line.strip().lower() == "q":
                cancel_event.set()
                return

    thread = threading.Thread(target=_listen, name="quit-listener", daemon=True)
    thread.start()
    return thread


def save_snapshot(model, output_dir, name, day):
    path = os.path.join(output_dir, "snapshots", f"{name}-{day:04d}.png")
    try:
        save_image(path, render_cells(model.cells))
    except (OSError, ValueError) as e:
        logger.warning("Could not save snapshot for day %d: %s", day, e)


def run_single(params, name="data", output_dir=OUTPUT_DIR, snapshots=False, report=True, cancel_event=None):
    """
    Executes one headless simulation run and saves its results.

    Returns:
        EpidemicModel: The model after the run.
    """
    model = EpidemicModel.from_params(params, cancel_event=cancel_event)
    logger.info("Running up to %d days", params.days)

    while model.running:
        day = model.day
        model.step()
        if snapshots and model.day > day:
            save_snapshot(model, output_dir, name, day)

    try:
        save_counter_history(model, name, output_dir)
    except OSError as e:
        logger.warning("Could not save the counters: %s", e)

    if report:
        try:
            ode_data = mean_field_curves(params, population=model.living)
            save_run_report(model, output_dir, ode_data, name=name)
        except (OSError, ValueError) as e:
            logger.warning("Could not save the run report: %s", e)

    return model


def run_batch_analysis(params, runs, threshold=None, output_dir=OUTPUT_DIR):
    base_seed = params.seed if params.seed is not None else 0
    summary = run_batch(params, runs=runs, base_seed=base_seed)
    peaks = summary["peak_infected"].tolist()

    print(summary.to_string(index=False))
    if threshold is not None:
        print(f"\nProbability of exceeding {threshold} infected: "
              f"{exceedance_probability(peaks, threshold) * 100:.1f}%")
    try:
        path = save_batch_results_plot(summary, threshold=threshold, output_dir=output_dir)
        print(f"Batch plot saved: {path}")
    except (OSError, ValueError) as e:
        logger.warning("Could not save the batch plot: %s", e)
    return summary


def sweep_values(params, name, values):
    """Casts the values of a sweep to the parameter type and checks each of them."""
    if name not in SWEEP_PARAMS:
        raise ConfigError(f"cannot sweep {name!r}, choose one of: {', '.join(SWEEP_PARAMS)}")
    if name in INT_PARAMS:
        values = [int(v) for v in values]
    for value in values:
        replace(params, **{name: value}).validate()
    return values


def run_sweep_analysis(params, name, values, runs, output_dir=OUTPUT_DIR):
    base_seed = params.seed if params.seed is not None else 0
    results = run_parameter_sweep(params, name, values, runs=runs, base_seed=base_seed)

    print(f"{name:>12}  mean peak  std")
    for value, mean_peak, std_peak in results:
        print(f"{value:>12}  {mean_peak:9.1f}  {std_peak:.1f}")
    try:
        path = save_sweep_results_plot(results, name, output_dir=output_dir)
        print(f"Sweep plot saved: {path}")
    except (OSError, ValueError) as e:
        logger.warning("Could not save the sweep plot: %s", e)
    return results


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    matplotlib.use("Agg")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        params = params_from_args(args)
    except ConfigError as e:
        parser.error(str(e))

    if args.sweep is not None:
        if not args.values:
            parser.error("--sweep needs --values")
        try:
            values = sweep_values(params, args.sweep, args.values)
        except ConfigError as e:
            parser.error(str(e))
        run_sweep_analysis(params, args.sweep, values, args.batch or 10, args.output_dir)
        return 0

    if args.batch > 0:
        run_batch_analysis(params, args.batch, args.threshold, args.output_dir)
        return 0

    cancel_event = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())
    if sys.stdin is not None and sys.stdin.isatty():
        print("Type q + Enter (or press Ctrl-C) to stop the simulation.")
        listen_for_quit(cancel_event)

    try:
        model = run_single(params, args.name, args.output_dir, args.snapshots,
                           not args.no_report, cancel_event)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    print("\nDATA")
    print("\n".join(summary_lines(model)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
