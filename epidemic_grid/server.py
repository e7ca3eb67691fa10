# epidemic_grid/server.py
"""
Live view of a grid epidemic run.

Shows the grid and the epidemic curves side by side and refreshes them after
every simulated day. Press `q` in the window, close it, or press Ctrl-C in the
terminal to stop the run at the end of the current day. The counters and the
final report are saved when the run ends.

Takes the same options as `epidemic_grid.simulation.main`.
"""
import logging
import signal
import sys
import threading

import matplotlib.pyplot as plt

from epidemic_grid.simulation.config import ConfigError
from epidemic_grid.simulation.main import build_parser, params_from_args, save_snapshot
from epidemic_grid.simulation.model import EpidemicModel
from epidemic_grid.simulation.ode import mean_field_curves
from epidemic_grid.simulation.plotting import draw_curves, draw_grid, save_run_report
from epidemic_grid.simulation.report import save_counter_history, summary_lines

logger = logging.getLogger(__name__)


def draw_viz_live(model, ax_map, ax_curve, ode_data):
    """Lightweight redraw used by the animation."""
    ax_map.clear()
    draw_grid(ax_map, model)
    ax_map.set_title(f"Day {model.day} - infected: {model.current_infected}")

    ax_curve.clear()
    draw_curves(ax_curve, model.counter_history(), ode_data)
    ax_curve.set_title("Live Counters")


def run_live(params, name="data", output_dir="data", snapshots=False, pause=0.001):
    cancel_event = threading.Event()
    model = EpidemicModel.from_params(params, cancel_event=cancel_event)
    ode_data = mean_field_curves(params, population=model.living)

    plt.ion()
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 6))

    def on_key(event):
        if event.key == "q":
            cancel_event.set()

    fig.canvas.mpl_connect("key_press_event", on_key)
    fig.canvas.mpl_connect("close_event", lambda event: cancel_event.set())
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())

    try:
        while model.running:
            day = model.day
            model.step()
            if model.day == day:
                break
            if snapshots:
                save_snapshot(model, output_dir, name, day)
            if plt.fignum_exists(fig.number):
                try:
                    draw_viz_live(model, ax1, ax2, ode_data)
                    plt.pause(pause)
                except ValueError as e:
                    logger.warning("Could not draw day %d: %s", day, e)
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        plt.ioff()
        plt.close(fig)

    try:
        save_counter_history(model, name, output_dir)
        save_run_report(model, output_dir, ode_data, name=name)
    except (OSError, ValueError) as e:
        logger.warning("Could not save the results: %s", e)

    return model


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        params = params_from_args(args)
    except ConfigError as e:
        parser.error(str(e))

    print("Press q in the window (or Ctrl-C here) to stop the simulation.")
    model = run_live(params, args.name, args.output_dir, args.snapshots)

    print("\nDATA")
    print("\n".join(summary_lines(model)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
