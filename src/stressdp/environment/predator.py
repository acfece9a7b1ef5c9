"""
Predator presence model.

The predator arrives, leaves and attacks with fixed per-step
probabilities. An individual cannot see the predator, only its attacks,
so the probability that the predator is present is a function of the
number of time steps since the last attack. This module computes that
probability by a Bayesian update on "no attack observed".
"""

from __future__ import annotations

import numpy as np


def predator_presence(
    p_leave: float,
    p_arrive: float,
    p_attack: float,
    max_t: int,
) -> np.ndarray:
    """
    Probability that the predator is present, by time since last attack.

    pPred[1] = 1 - p_leave, since the predator was certainly present one
    step ago and stays unless it leaves. For t >= 2:

        Pr(present at t | no attack at t-1)
            = (pPred[t-1] (1 - p_attack)(1 - p_leave) + (1 - pPred[t-1]) p_arrive)
              / (1 - pPred[t-1] p_attack)

    Index 0 is never read (t = 0 only exists between an attack and the
    next decision) and is left at zero.

    Args:
        p_leave: Probability that a present predator leaves
        p_arrive: Probability that an absent predator arrives
        p_attack: Probability that a present predator attacks
        max_t: Censoring value for time since last attack

    Returns:
        Array of shape (max_t + 1,)
    """
    p_pred = np.zeros(max_t + 1, dtype=np.float64)
    if max_t < 1:
        return p_pred

    p_pred[1] = 1.0 - p_leave
    for t in range(2, max_t + 1):
        prev = p_pred[t - 1]
        no_attack = 1.0 - prev * p_attack
        if no_attack <= 0.0:
            # "No attack" cannot happen; nothing to update on
            p_pred[t] = prev
            continue
        p_pred[t] = (prev * (1.0 - p_attack) * (1.0 - p_leave) + (1.0 - prev) * p_arrive) / no_attack

    return np.clip(p_pred, 0.0, 1.0)


def stationary_presence(p_leave: float, p_arrive: float) -> float:
    """Long-run fraction of time the predator is present, ignoring attacks."""
    total = p_leave + p_arrive
    if total == 0:
        return 0.0
    return p_arrive / total
