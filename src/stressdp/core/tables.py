"""
Static lookup tables derived from the model parameters.

These are computed once per parameter set and read on every sweep of
the value-iteration and forward-propagation engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from stressdp.environment.predator import predator_presence
from stressdp.physiology.risk import (
    kill_probability,
    background_mortality,
    damage_transition,
    interpolation_weights,
)
from stressdp.physiology.reproduction import reproductive_output

if TYPE_CHECKING:
    from stressdp.parameters.model_params import ModelParameters


@dataclass
class ModelTables:
    """
    Per-state tables for one parameter set.
    """
    p_pred: np.ndarray      # (max_t + 1,) predator presence by time since attack
    p_killed: np.ndarray    # (max_h + 1,) kill probability by hormone level
    mu: np.ndarray          # (max_d + 1,) background mortality by damage
    dnew: np.ndarray        # (max_d + 1, max_h + 1) continuous next damage
    d_lower: np.ndarray     # floor(dnew), int64
    d_upper: np.ndarray     # ceil(dnew), int64
    d_frac: np.ndarray      # dnew - d_lower
    repro: np.ndarray       # (max_ts + 1, max_d + 1) reproductive output
    p_attack: float

    @classmethod
    def from_parameters(cls, params: 'ModelParameters') -> 'ModelTables':
        """Compute all tables for a parameter set."""
        dnew = damage_transition(
            params.max_d, params.max_h, params.hmin, params.hslope, params.repair
        )
        d_lower, d_upper, d_frac = interpolation_weights(dnew)
        return cls(
            p_pred=predator_presence(
                params.p_leave, params.p_arrive, params.p_attack, params.max_t
            ),
            p_killed=kill_probability(params.max_h, params.alpha),
            mu=background_mortality(params.max_d, params.mu0, params.k_mort),
            dnew=dnew,
            d_lower=d_lower,
            d_upper=d_upper,
            d_frac=d_frac,
            repro=reproductive_output(params.max_ts, params.max_d, params.k_fec),
            p_attack=float(params.p_attack),
        )
