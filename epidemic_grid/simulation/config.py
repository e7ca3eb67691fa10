# epidemic_grid/simulation/config.py
"""
Simulation parameters and their validation.

Defaults reproduce the reference runs: a 60x60 grid at 70% coverage, a
15% per-contact infection probability, 3 days of incubation followed by
4 infectious days, 2% fatality and 50% immunity after recovery. Medicine and
quarantine stay off unless an onset day is given.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional, Union

NEIGHBORHOODS = ("moore", "von_neumann")
PATIENT_ZERO_STRATEGIES = ("center", "random")


class ConfigError(ValueError):
    """Raised when a parameter set cannot be simulated."""


@dataclass
class SimulationParams:
    """Everything the simulation engine needs for one run."""
    days: int = 300                # number of simulation days
    width: int = 60                # cells on one side of the grid
    rate: float = 0.15             # probability that an infection attempt succeeds
    incubation: int = 3            # days the disease stays dormant
    duration: int = 4              # days the cell stays infectious
    fatality: float = 0.02         # probability of death when the disease resolves
    immunity: float = 0.5          # resistance to reinfection after recovery
    density: float = 0.7           # share of the grid that is populated
    med_introduced: Optional[int] = None   # day medicine is introduced (None = never)
    med_effectiveness: float = 0.0
    q_introduced: Optional[int] = None     # day quarantine is introduced (None = never)
    q_effectiveness: float = 0.0
    seed: Optional[int] = None
    neighborhood: str = "moore"    # 'moore' (8 neighbors) or 'von_neumann' (4 neighbors)
    torus: bool = False            # wrap around the grid edges
    patient_zero: Union[str, int] = "center"  # 'center', 'random' or a grid index
    stop_when_clear: bool = False  # stop as soon as no cell is infected

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationParams":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown parameter(s): {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def moore(self) -> bool:
        return self.neighborhood == "moore"

    def validate(self) -> None:
        """Raise ConfigError on the first invalid parameter. Nothing is clamped."""
        for name in ("rate", "fatality", "immunity", "density",
                     "med_effectiveness", "q_effectiveness"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be a probability in [0, 1], got {value}")

        for name in ("days", "incubation", "duration"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigError(f"{name} must be non-negative, got {value}")

        for name in ("med_introduced", "q_introduced"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigError(f"{name} must be non-negative, got {value}")

        if self.width < 1:
            raise ConfigError(f"width must be at least 1, got {self.width}")

        if self.seed is not None and self.seed < 0:
            raise ConfigError("seed must be non-negative")

        if self.neighborhood not in NEIGHBORHOODS:
            raise ConfigError(
                f"neighborhood must be one of {NEIGHBORHOODS}, got {self.neighborhood!r}"
            )

        if isinstance(self.patient_zero, bool):
            raise ConfigError("patient_zero must be a strategy name or a grid index")
        if isinstance(self.patient_zero, int):
            if not 0 <= self.patient_zero < self.width * self.width:
                raise ConfigError(
                    f"patient_zero index {self.patient_zero} is outside the "
                    f"{self.width}x{self.width} grid"
                )
        elif self.patient_zero not in PATIENT_ZERO_STRATEGIES:
            raise ConfigError(
                f"patient_zero must be one of {PATIENT_ZERO_STRATEGIES} or an index, "
                f"got {self.patient_zero!r}"
            )


def parse_patient_zero(value: str) -> Union[str, int]:
    """Turn a command-line patient zero value into a strategy name or an index."""
    try:
        return int(value)
    except ValueError:
        return value
