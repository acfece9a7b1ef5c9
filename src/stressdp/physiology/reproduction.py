"""Reproductive output at the season boundary."""

from __future__ import annotations

import numpy as np


def reproductive_output(max_ts: int, max_d: int, k_fec: float) -> np.ndarray:
    """
    Reproductive output by season epoch and damage.

    Reproduction happens only at the boundary (ts % max_ts == 0), where
    fecundity declines linearly with damage: max(0, 1 - k_fec * d).

    Returns:
        Array of shape (max_ts + 1, max_d + 1)
    """
    ts = np.arange(max_ts + 1)
    d = np.arange(max_d + 1, dtype=np.float64)
    fecundity = np.maximum(0.0, 1.0 - k_fec * d)
    boundary = (ts % max_ts) == 0
    return np.where(boundary[:, np.newaxis], fecundity[np.newaxis, :], 0.0)
