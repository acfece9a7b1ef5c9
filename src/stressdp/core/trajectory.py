"""
Single-individual trajectory under the optimal policy.

Replays the solved policy for one individual through a scripted series
of predator attacks, drawing the stochastic damage transition at each
step. Used to illustrate how hormone level and damage respond to a run
of attacks and recover afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from stressdp.core.state import SimulationState
    from stressdp.core.tables import ModelTables
    from stressdp.parameters.model_params import ModelParameters

logger = logging.getLogger(__name__)

TRAJECTORY_COLUMNS = ["time", "t", "ts", "damage", "hormone", "attack", "reproduce"]


@dataclass
class AttackSchedule:
    """
    Scripted predator attacks.

    Attacks happen at every step with attack_start < time < attack_stop.
    """
    duration: Optional[int] = None      # Steps to simulate (default 3 seasons)
    attack_start: int = 16
    attack_stop: int = 33
    reproduce_at: int = 40              # Step of the first reproduction

    def steps(self, max_ts: int) -> int:
        """Number of steps to simulate."""
        return self.duration if self.duration is not None else 3 * max_ts

    def is_attack(self, time: int) -> bool:
        """Whether the predator attacks at this step."""
        return self.attack_start < time < self.attack_stop

    def season_offset(self, max_ts: int) -> int:
        """Season clock at time 0, so that time reproduce_at is a boundary."""
        return max_ts - self.reproduce_at


def simulate_trajectory(
    state: 'SimulationState',
    tables: 'ModelTables',
    params: 'ModelParameters',
    schedule: Optional[AttackSchedule] = None,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    Simulate one individual under the solved policy.

    The individual starts undamaged at t = max_t. Each step the clock t is
    reset to 0 by an attack or advanced (censored at max_t), the hormone
    level is read from the policy at (t, ts mod max_ts, d), and damage
    moves to ceil(dnew) with probability dnew - floor(dnew), else to
    floor(dnew).

    Args:
        state: Solved simulation state
        tables: Static lookup tables
        params: Model parameters
        schedule: Attack schedule (default AttackSchedule())
        rng: Random generator (default: fresh unseeded generator)

    Returns:
        DataFrame with one row per step and TRAJECTORY_COLUMNS
    """
    if schedule is None:
        schedule = AttackSchedule()
    if rng is None:
        rng = np.random.default_rng()

    max_t = params.max_t
    max_ts = params.max_ts

    t = max_t
    d = 0
    ts = schedule.season_offset(max_ts)
    rows = []

    for time in range(schedule.steps(max_ts)):
        attack = schedule.is_attack(time)
        t = 0 if attack else min(max_t, t + 1)

        epoch = ts % max_ts
        h = int(state.hormone[t, epoch, d])

        if rng.random() < tables.d_frac[d, h]:
            d = int(tables.d_upper[d, h])
        else:
            d = int(tables.d_lower[d, h])

        # reproduce marks the season-boundary step (ts mod max_ts == 0)
        rows.append((time, t, ts, d, h, attack, epoch == 0))
        ts += 1

    logger.debug("Simulated %d steps, final damage %d", len(rows), d)
    return pd.DataFrame(rows, columns=TRAJECTORY_COLUMNS)
