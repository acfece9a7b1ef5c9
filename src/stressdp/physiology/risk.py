"""
Predation risk, background mortality and damage dynamics.

The hormone level h is the organism's only decision. A high level
protects against an attacking predator but, away from the optimum hmin,
builds up somatic damage; damage in turn raises background mortality.

All functions return lookup tables indexed by the integer lattice.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np


def kill_probability(max_h: int, alpha: float) -> np.ndarray:
    """
    Probability of being killed by an attacking predator.

    pKilled[h] = max(0, 1 - (h / max_h) ** alpha)

    Args:
        max_h: Maximum hormone level
        alpha: Shape of the protective effect of the hormone

    Returns:
        Array of shape (max_h + 1,)
    """
    h = np.arange(max_h + 1, dtype=np.float64)
    return np.maximum(0.0, 1.0 - np.power(h / max_h, alpha))


def background_mortality(max_d: int, mu0: float, k_mort: float) -> np.ndarray:
    """
    Per-step background mortality as a function of damage, capped at 1.

    Returns:
        Array of shape (max_d + 1,)
    """
    d = np.arange(max_d + 1, dtype=np.float64)
    return np.minimum(1.0, mu0 + k_mort * d)


def damage_transition(
    max_d: int,
    max_h: int,
    hmin: float,
    hslope: float,
    repair: float,
) -> np.ndarray:
    """
    Damage level after one time step.

    dnew[d, h] = clamp(d + hslope * (hmin - h / max_h) ** 2 - repair, 0, max_d)

    The result is continuous; see interpolation_weights() for the split
    onto the integer damage lattice.

    Returns:
        Array of shape (max_d + 1, max_h + 1)
    """
    d = np.arange(max_d + 1, dtype=np.float64)[:, np.newaxis]
    deviation = hmin - np.arange(max_h + 1, dtype=np.float64) / max_h
    dnew = d + hslope * deviation * deviation - float(repair)
    return np.clip(dnew, 0.0, float(max_d))


def interpolation_weights(dnew: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Split continuous damage values for linear interpolation.

    Returns:
        (d_lower, d_upper, d_frac): floor and ceiling as int64 indices and
        the weight of the upper index, dnew - d_lower.
    """
    d_lower = np.floor(dnew).astype(np.int64)
    d_upper = np.ceil(dnew).astype(np.int64)
    d_frac = dnew - d_lower
    return d_lower, d_upper, d_frac
