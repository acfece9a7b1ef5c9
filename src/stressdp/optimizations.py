"""
Compiled kernels for the lattice sweeps.

The value-iteration and forward-propagation engines spend nearly all of
their time in dense nested loops over (t, d, h). These loops are
JIT-compiled with Numba; the engines call them one season epoch at a
time so that the epoch-to-epoch bookkeeping stays in plain Python.

All kernels work in place on C-contiguous float64/int64 arrays laid out
as [t, ts, d, h].
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit


@njit(cache=True)
def _round_half_up(x: float) -> int:
    """Round a non-negative value to the nearest integer, halves up."""
    return int(math.floor(x + 0.5))


@njit(cache=True)
def golden_section_argmax(values: np.ndarray, phi_inv: float) -> int:
    """
    Index of the maximum of a unimodal sequence by golden-section search.

    The bracket [lhs, rhs] starts at [0, len - 1] with interior points
    x1 < x2 splitting it by the inverse golden ratio. The side whose
    interior value is lower is discarded (ties discard the right side)
    until the interior points meet.

    Only correct if values has a single interior maximum; otherwise the
    result is a local maximum.

    Args:
        values: 1-D array of objective values
        phi_inv: Inverse golden ratio

    Returns:
        Index of the maximum
    """
    lhs = 0
    rhs = values.shape[0] - 1
    x1 = rhs - _round_half_up((rhs - lhs) * phi_inv)
    x2 = lhs + _round_half_up((rhs - lhs) * phi_inv)

    while x1 < x2:
        if values[x1] < values[x2]:
            lhs = x1
            x1 = x2
            x2 = rhs - _round_half_up((rhs - x1) * phi_inv)
        else:
            rhs = x2
            x2 = x1
            x1 = lhs + _round_half_up((x2 - lhs) * phi_inv)

    return x1


@njit(cache=True)
def optimal_decisions(
    w_next: np.ndarray,
    ts: int,
    hormone: np.ndarray,
    wopt: np.ndarray,
    phi_inv: float,
) -> None:
    """
    Optimal hormone level for every (t, d) at epoch ts.

    The objective for state (t, ts, d) is the fitness of entering the
    next epoch with hormone level h, w_next[min(max_t, t + 1), ts + 1, d, h].

    Args:
        w_next: Fitness buffer; slice ts + 1 must be filled
        ts: Epoch, 0 <= ts < max_ts
        hormone: Policy (written at [:, ts, :])
        wopt: Value of the policy (written at [:, ts, :])
        phi_inv: Inverse golden ratio
    """
    n_t = w_next.shape[0]
    n_d = w_next.shape[2]
    max_t = n_t - 1

    for t in range(n_t):
        t_next = min(max_t, t + 1)
        for d in range(n_d):
            row = w_next[t_next, ts + 1, d]
            x = golden_section_argmax(row, phi_inv)
            hormone[t, ts, d] = x
            wopt[t, ts, d] = row[x]


@njit(cache=True)
def expected_fitness(
    wopt: np.ndarray,
    ts: int,
    p_pred: np.ndarray,
    p_attack: float,
    p_killed: np.ndarray,
    mu: np.ndarray,
    d_lower: np.ndarray,
    d_upper: np.ndarray,
    d_frac: np.ndarray,
    repro: np.ndarray,
    w: np.ndarray,
) -> None:
    """
    Expected fitness at epoch ts before the predator does/doesn't attack.

    An individual with time-since-attack t, damage d and hormone h is
    attacked with probability p_pred[t] * p_attack and survives the attack
    with probability 1 - p_killed[h]; it survives background mortality
    with probability 1 - mu[d]. Surviving individuals collect repro[ts, d]
    and continue from the policy value at their new damage level
    (interpolated between d_lower and d_upper), with the clock reset to 0
    after an attack and left at t otherwise.

    Writes w[1:, ts, :, :]; t = 0 is not a state at the start of a step.
    """
    n_t = w.shape[0]
    n_d = w.shape[2]
    n_h = w.shape[3]

    for t in range(1, n_t):
        attack = p_pred[t] * p_attack
        for d in range(n_d):
            alive = 1.0 - mu[d]
            r = repro[ts, d]
            for h in range(n_h):
                d1 = d_lower[d, h]
                d2 = d_upper[d, h]
                frac = d_frac[d, h]

                after_attack = r + (1.0 - frac) * wopt[0, ts, d1] + frac * wopt[0, ts, d2]
                no_attack = r + (1.0 - frac) * wopt[t, ts, d1] + frac * wopt[t, ts, d2]

                w[t, ts, d, h] = (
                    attack * (1.0 - p_killed[h]) * alive * after_attack
                    + (1.0 - attack) * alive * no_attack
                )


@njit(cache=True)
def propagate_epoch(
    freq: np.ndarray,
    ts: int,
    hormone: np.ndarray,
    p_pred: np.ndarray,
    p_attack: float,
    p_killed: np.ndarray,
    mu: np.ndarray,
    d_lower: np.ndarray,
    d_upper: np.ndarray,
    d_frac: np.ndarray,
) -> tuple:
    """
    Move population mass from epoch ts to epoch ts + 1.

    Uses the same branch probabilities as expected_fitness(). Survivors
    of an attack arrive at t = 1 with the hormone level the policy sets at
    t = 0; the others arrive at min(max_t, t + 1) with the level the policy
    sets at t. Mass is split between the two neighbouring damage levels.

    Reads freq[:, ts] and adds into freq[:, ts + 1].

    Returns:
        (predation_deaths, damage_deaths, background_deaths) as fractions
        of the mass propagated. Damage deaths are the part of background
        mortality in excess of mu[0].
    """
    n_t = freq.shape[0]
    n_d = freq.shape[2]
    n_h = freq.shape[3]
    max_t = n_t - 1
    mu0 = mu[0]

    pred_deaths = 0.0
    damage_deaths = 0.0
    background_deaths = 0.0

    for t in range(1, n_t):
        attack = p_pred[t] * p_attack
        t_next = min(max_t, t + 1)
        for d in range(n_d):
            alive = 1.0 - mu[d]
            for h in range(n_h):
                m = freq[t, ts, d, h]
                if m == 0.0:
                    continue

                d1 = d_lower[d, h]
                d2 = d_upper[d, h]
                frac = d_frac[d, h]

                # Attacked and survived
                survived = m * attack * (1.0 - p_killed[h]) * alive
                freq[1, ts + 1, d1, hormone[0, ts, d1]] += survived * (1.0 - frac)
                freq[1, ts + 1, d2, hormone[0, ts, d2]] += survived * frac

                # Not attacked
                quiet = m * (1.0 - attack) * alive
                freq[t_next, ts + 1, d1, hormone[t, ts, d1]] += quiet * (1.0 - frac)
                freq[t_next, ts + 1, d2, hormone[t, ts, d2]] += quiet * frac

                killed = attack * p_killed[h]
                pred_deaths += m * killed
                damage_deaths += m * (1.0 - killed) * (mu[d] - mu0)
                background_deaths += m * (1.0 - killed) * mu0

    return pred_deaths, damage_deaths, background_deaths
