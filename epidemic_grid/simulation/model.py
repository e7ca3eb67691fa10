# epidemic_grid/simulation/model.py

import logging
import threading

from mesa import Model
from mesa.space import SingleGrid
from mesa.datacollection import DataCollector

from .agent import CellAgent
from .config import SimulationParams
from .constants import DiseaseState

logger = logging.getLogger(__name__)


class EpidemicModel(Model):
    def __init__(self, cancel_event=None, rng=None, **kwargs):
        # `rng` is handed in by mesa.batch_run; runs are seeded through `seed`
        params = SimulationParams.from_dict(kwargs)
        params.validate()
        super().__init__(seed=params.seed)

        self.params = params
        self.width = params.width
        self.day = 0
        self.stop_reason = None
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()

        # Running totals, only ever incremented by the transitions themselves
        self.living = 0
        self.dead = 0
        self.recovered = 0
        self.ever_infected = 0
        # Recomputed over the whole grid after every tick
        self.never_infected = 0
        self.current_infected = 0

        self.grid = SingleGrid(self.width, self.width, torus=params.torus)
        self.cells = []
        self._populate()

        self.patient_zero = None
        self.seed_patient_zero(params.patient_zero)

        self.never_infected = self.count_never_infected()
        self.current_infected = self.count_infected()

        self.datacollector = DataCollector(
            model_reporters={
                "day": lambda m: m.day,
                "infected": lambda m: m.current_infected,
                "dead": lambda m: m.dead,
                "recovered": lambda m: m.recovered,
                "ever_infected": lambda m: m.ever_infected,
                "never_infected": lambda m: m.never_infected,
            }
        )

        if params.days == 0:
            self._stop("day budget exhausted")

        logger.info(
            "Grid %dx%d populated with %d cells, patient zero at index %d",
            self.width, self.width, self.living, self.patient_zero,
        )

    @classmethod
    def from_params(cls, params, cancel_event=None):
        return cls(cancel_event=cancel_event, **params.to_dict())

    def _populate(self):
        density = self.params.density
        for n in range(self.width * self.width):
            populated = self.random.random() < density
            cell = CellAgent(self, n, populated)
            self.grid.place_agent(cell, divmod(n, self.width))
            self.cells.append(cell)
            if populated:
                self.living += 1

    def center_index(self):
        return self.width * self.width // 2 + self.width // 2

    def seed_patient_zero(self, strategy="center"):
        """Force one cell to be infectious, skipping incubation. Called once."""
        if self.patient_zero is not None:
            raise RuntimeError("patient zero has already been seeded")

        if strategy == "center":
            index = self.center_index()
        elif strategy == "random":
            populated = [c.index for c in self.cells if c.state == DiseaseState.SUSCEPTIBLE]
            if populated:
                index = self.random.choice(populated)
            else:
                index = self.random.randrange(len(self.cells))
        else:
            index = int(strategy)

        cell = self.cells[index]
        if cell.state == DiseaseState.EMPTY:
            self.living += 1
        cell.state = DiseaseState.INFECTIOUS
        cell.incubation_remaining = 0
        cell.infectious_remaining = self.params.duration
        self.ever_infected += 1
        self.patient_zero = index
        return index

    def request_stop(self):
        """Ask the run to stop; honoured at the next tick boundary."""
        self.cancel_event.set()

    def _stop(self, reason):
        self.running = False
        self.stop_reason = reason
        logger.info("Simulation stopped on day %d: %s", self.day, reason)

    def step(self):
        if self.cancel_event.is_set():
            self._stop("cancelled")
            return

        # Cells infected during this sweep wait for the next tick
        for cell in [c for c in self.cells if c.is_infected]:
            cell.step()

        self.never_infected = self.count_never_infected()
        self.current_infected = self.count_infected()
        self.datacollector.collect(self)
        logger.debug(
            "Day %d: infected=%d dead=%d recovered=%d ever_infected=%d",
            self.day, self.current_infected, self.dead, self.recovered, self.ever_infected,
        )

        self.day += 1
        if self.day >= self.params.days:
            self._stop("day budget exhausted")
        elif self.params.stop_when_clear and self.current_infected == 0:
            self._stop("no infected cells left")

    def run(self):
        while self.running:
            self.step()
        return self.counter_history()

    def counter_history(self):
        return self.datacollector.get_model_vars_dataframe().reset_index(drop=True)

    def count_never_infected(self):
        return sum(1 for c in self.cells if c.state == DiseaseState.SUSCEPTIBLE and c.immunity == 0.0)

    def count_infected(self):
        return sum(1 for c in self.cells if c.is_infected)

    def count_state(self, state):
        return sum(1 for c in self.cells if c.state == state)
