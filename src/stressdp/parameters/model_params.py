"""
Model parameters configuration.

The six runtime inputs of the stress-damage model plus the fixed lattice
and life-history configuration, with defaults and validation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from stressdp.parameters.constants import ModelConstants


@dataclass
class ModelParameters:
    """
    All model parameters with their defaults.
    """

    # === Runtime inputs ===
    p_leave: float = 0.5               # Probability that the predator leaves
    p_arrive: float = 0.1              # Probability that the predator arrives
    p_attack: float = 0.5              # Probability that a present predator attacks
    alpha: float = 1.0                 # Effect of hormone level on pKilled
    k_mort: float = 0.0                # Increase in mortality with damage
    k_fec: float = 0.05                # Decrease in fecundity with damage

    # === Life history ===
    mu0: float = 0.002                 # Background mortality
    hmin: float = 0.3                  # Hormone level (fraction of max_h) minimising damage
    hslope: float = 20.0               # Increase in damage with deviation from hmin
    repair: int = 1                    # Damage units removed per time step

    # === Lattice ===
    max_d: int = 20                    # Maximum damage level
    max_t: int = 100                   # Maximum time steps since last attack
    max_ts: int = 10                   # Duration of a season
    max_h: int = 500                   # Maximum hormone level

    # === Iteration control ===
    max_iterations: int = 1000000
    fitness_tolerance: float = ModelConstants.FITNESS_TOLERANCE
    frequency_tolerance: float = ModelConstants.FREQUENCY_TOLERANCE
    max_forward_iterations: int = 100000
    report_interval: int = ModelConstants.REPORT_INTERVAL

    # Scan every decision row after solving and compare with the search result
    check_unimodality: bool = False

    def __post_init__(self):
        """Validate parameters."""
        self._validate()

    def _validate(self) -> None:
        """Validate parameter ranges."""
        for name in ("p_leave", "p_arrive", "p_attack"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if not 0 <= self.mu0 <= 1:
            raise ValueError(f"mu0 must be between 0 and 1, got {self.mu0}")
        if self.alpha < 0:
            raise ValueError("alpha must be non-negative")
        if self.k_mort < 0 or self.k_fec < 0:
            raise ValueError("k_mort and k_fec must be non-negative")
        if self.hslope < 0 or self.repair < 0:
            raise ValueError("hslope and repair must be non-negative")
        if not 0 <= self.hmin <= 1:
            raise ValueError("hmin must be between 0 and 1")
        if self.max_t < 1:
            raise ValueError("max_t must be at least 1")
        if self.max_ts < 1:
            raise ValueError("max_ts must be at least 1")
        if self.max_d < 0:
            raise ValueError("max_d must be non-negative")
        if self.max_h < 1:
            raise ValueError("max_h must be at least 1")
        if self.max_iterations < 1 or self.max_forward_iterations < 1:
            raise ValueError("iteration caps must be at least 1")
        if self.fitness_tolerance <= 0 or self.frequency_tolerance <= 0:
            raise ValueError("tolerances must be positive")
        if self.report_interval < 1:
            raise ValueError("report_interval must be at least 1")

    @classmethod
    def from_dict(cls, params: dict) -> ModelParameters:
        """Create parameters from dictionary."""
        return cls(**{k: v for k, v in params.items() if hasattr(cls, k)})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> ModelParameters:
        """Load parameters from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Parameter file not found: {path}")
        with open(path) as f:
            return cls.from_dict(json.load(f) or {})

    def to_dict(self) -> dict:
        """Convert parameters to dictionary."""
        from dataclasses import asdict
        return asdict(self)

    def replace(self, **changes) -> ModelParameters:
        """Return a copy with some fields changed."""
        values = self.to_dict()
        values.update(changes)
        return ModelParameters(**values)

    @property
    def lattice_shape(self) -> tuple[int, int, int, int]:
        """Shape of the (t, ts, d, h) tensors."""
        return ModelConstants.lattice_shape(self.max_t, self.max_ts, self.max_d, self.max_h)

    @property
    def damage_minimising_hormone(self) -> float:
        """Hormone level at which the damage transition is smallest."""
        return self.hmin * self.max_h
