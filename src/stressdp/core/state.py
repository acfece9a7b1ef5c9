"""
Mutable state of a model run.

All tensors live on the lattice (t, ts, d[, h]) as C-contiguous numpy
arrays, indexed [t, ts, d, h].

Fitness uses two named buffers. `w` receives the expected fitness of
the epoch being computed; `w_next` holds the fitness the decision search
reads, i.e. the epoch after it. Each epoch is published from `w` into
`w_next` once it is complete, and the season loop is closed by copying
epoch 0 into `w_next[:, max_ts]` at the end of an outer iteration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from stressdp.parameters.model_params import ModelParameters


@dataclass
class SimulationState:
    """
    Policy, fitness and frequency tensors for one parameter set.
    """
    # Policy and its value; the ts = max_ts slice of hormone is a copy of ts = 0
    hormone: np.ndarray     # (max_t + 1, max_ts + 1, max_d + 1) int64
    wopt: np.ndarray        # (max_t + 1, max_ts + 1, max_d + 1)

    # Fitness before the predator does or doesn't attack
    w: np.ndarray           # (max_t + 1, max_ts + 1, max_d + 1, max_h + 1)
    w_next: np.ndarray      # same shape as w

    # Fitness at the season boundary from the previous iteration
    v: np.ndarray           # (max_t + 1, max_d + 1, max_h + 1)

    # Population frequencies (forward propagation only)
    freq: np.ndarray        # same shape as w

    # Iteration bookkeeping
    iteration: int = 0
    fitdiff: float = float("inf")

    @classmethod
    def create(cls, params: 'ModelParameters') -> 'SimulationState':
        """Allocate zeroed tensors for a parameter set."""
        shape = params.lattice_shape
        return cls(
            hormone=np.zeros(shape[:3], dtype=np.int64),
            wopt=np.zeros(shape[:3], dtype=np.float64),
            w=np.zeros(shape, dtype=np.float64),
            w_next=np.zeros(shape, dtype=np.float64),
            v=np.zeros((shape[0], shape[2], shape[3]), dtype=np.float64),
            freq=np.zeros(shape, dtype=np.float64),
        )

    @property
    def policy(self) -> np.ndarray:
        """Decision-search policy, ts in [0, max_ts - 1]."""
        return self.hormone[:, :-1, :]

    @property
    def memory_bytes(self) -> int:
        """Total size of all tensors."""
        return sum(
            a.nbytes for a in (self.hormone, self.wopt, self.w, self.w_next, self.v, self.freq)
        )
