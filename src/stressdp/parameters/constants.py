"""
Model constants.

Fixed values that are not part of a parameter set.
"""

from __future__ import annotations

import math


class ModelConstants:
    """
    Fixed model constants.
    """

    # Inverse of the golden ratio, used by the decision search
    PHI_INV: float = 1.0 / ((math.sqrt(5.0) + 1.0) / 2.0)

    # Convergence
    FITNESS_TOLERANCE: float = 1e-6     # Total absolute fitness change
    FREQUENCY_TOLERANCE: float = 1e-6   # Largest per-state frequency change

    # Iterations between debug print-outs
    REPORT_INTERVAL: int = 1

    # Output file prefixes
    STRATEGY_PREFIX: str = "stress"
    FORWARD_PREFIX: str = "fwdCalc"
    TRAJECTORY_PREFIX: str = "simAttacks"

    @staticmethod
    def lattice_shape(max_t: int, max_ts: int, max_d: int, max_h: int) -> tuple[int, int, int, int]:
        """Shape of a full (t, ts, d, h) tensor."""
        return (max_t + 1, max_ts + 1, max_d + 1, max_h + 1)
