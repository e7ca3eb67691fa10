# epidemic_grid/simulation/agent.py
from mesa import Agent

from .constants import (
    DiseaseState,
    EXPOSABLE_STATES,
    INFECTED_STATES,
)


class CellAgent(Agent):
    """
    Represents one position of the simulation grid.

    A cell is either empty or holds one individual, whose disease state,
    countdowns, immunity and intervention flags are tracked here. All the
    per-cell transition rules live on this class; the model only decides
    which cells run them and in which order.
    """
    def __init__(self, model, index, populated):
        """
        Initializes a new CellAgent.

        Args:
            model: The main model instance.
            index (int): Row-major index of the cell in the grid.
            populated (bool): Whether an individual lives in this cell.
        """
        super().__init__(model)
        self.index = index
        self.state = DiseaseState.SUSCEPTIBLE if populated else DiseaseState.EMPTY
        self.incubation_remaining = 0
        self.infectious_remaining = 0
        self.immunity = 0.0
        self.medicated = False
        self.quarantined = False
        self._neighbors = None

    @property
    def is_infected(self):
        return self.state in INFECTED_STATES

    @property
    def is_infectious(self):
        """Past incubation and not yet resolved, quarantined or not."""
        return self.state in (DiseaseState.INFECTIOUS, DiseaseState.QUARANTINED)

    @property
    def neighbors(self):
        """Cells adjacent to this one on the model's grid, empty ones included."""
        # Cells never move, so the lookup is done once
        if self._neighbors is None:
            self._neighbors = self.model.grid.get_neighbors(
                self.pos, moore=self.model.params.moore, include_center=False
            )
        return self._neighbors

    def _infectious_state(self):
        return DiseaseState.QUARANTINED if self.quarantined else DiseaseState.INFECTIOUS

    def step(self):
        """
        Runs one simulated day for an infected cell.

        Order: disease progression, then medication, then quarantine, then
        infection of the neighbors. A cell that is still incubating, or that
        has just recovered or died, stops after progression.
        """
        if self.state == DiseaseState.INCUBATING:
            self.progress()
            return

        self.progress()
        if not self.is_infectious:
            return

        self.medicate()
        if not self.is_infectious:
            return

        self.quarantine()
        if not self.quarantined:
            self.infect_neighbors()

    def progress(self):
        """
        Advances the incubation or infectious countdown by one day.

        When the infectious period is over, a single draw decides between
        recovery and death: the cell recovers if the draw is greater than the
        fatality probability.
        """
        params = self.model.params
        if self.state == DiseaseState.INCUBATING:
            self.incubation_remaining -= 1
            if self.incubation_remaining <= 0:
                self.incubation_remaining = 0
                self.state = self._infectious_state()
                self.infectious_remaining = params.duration

        elif self.is_infectious:
            if self.infectious_remaining > 0:
                self.infectious_remaining -= 1
            elif self.random.random() > params.fatality:
                self.recover()
            else:
                self.die()

    def infect(self):
        """
        Infects this cell.

        The cell starts incubating, or becomes infectious straight away when
        the disease has no incubation period. A cell quarantined during an
        earlier infection stays isolated and comes out of incubation
        quarantined.
        """
        params = self.model.params
        if params.incubation > 0:
            self.state = DiseaseState.INCUBATING
            self.incubation_remaining = params.incubation
            self.infectious_remaining = 0
        else:
            self.state = self._infectious_state()
            self.incubation_remaining = 0
            self.infectious_remaining = params.duration
        self.model.ever_infected += 1

    def recover(self):
        """Ends the infection and grants the configured immunity."""
        self.state = DiseaseState.RECOVERED
        self.incubation_remaining = 0
        self.infectious_remaining = 0
        self.immunity = max(self.immunity, self.model.params.immunity)
        self.model.recovered += 1

    def die(self):
        self.state = DiseaseState.DEAD
        self.incubation_remaining = 0
        self.infectious_remaining = 0
        self.model.dead += 1

    def medicate(self):
        """
        Gives medicine to the cell once medicine is available.

        A successful treatment recovers the cell immediately. A failed one
        marks it as medicated so it is never treated again, not even when
        it is reinfected later.
        """
        params = self.model.params
        if self.medicated or params.med_introduced is None:
            return
        if self.model.day <= params.med_introduced:
            return

        if self.random.random() < params.med_effectiveness:
            self.recover()
        else:
            self.medicated = True

    def quarantine(self):
        """
        Tries to isolate the cell once quarantine is in force.

        A quarantined cell keeps progressing through the disease but never
        infects its neighbors again, through later infections included.
        """
        params = self.model.params
        if self.quarantined or params.q_introduced is None:
            return
        if self.model.day <= params.q_introduced:
            return

        if self.random.random() < params.q_effectiveness:
            self.state = DiseaseState.QUARANTINED
            self.quarantined = True

    def infect_neighbors(self):
        """
        Attempts to infect every susceptible or recovered neighbor.

        Each attempt takes two draws: the first has to beat the neighbor's
        immunity for the attempt to happen at all, the second has to fall
        below the infection rate for it to succeed.
        """
        rate = self.model.params.rate
        for neighbor in self.neighbors:
            if neighbor.state not in EXPOSABLE_STATES:
                continue
            if self.random.random() > neighbor.immunity:
                if self.random.random() < rate:
                    neighbor.infect()
