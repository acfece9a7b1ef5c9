"""
Forward propagation of population frequencies under a fixed policy.

Starting from a single cohort with no damage, long after the last
attack, the frequency distribution over (t, ts, d, h) is pushed through
the season one epoch at a time. At each season boundary the survivors
are renormalised to unit mass and compared with the previous boundary
distribution; the cycle repeats until that distribution is stationary.
If nobody survives a season the run stops there, reported as extinct
and not converged.

Death rates are tallied per cause over each season: predation,
damage-related mortality (in excess of the undamaged background rate)
and background mortality.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

import numpy as np
from tqdm import tqdm

from stressdp import optimizations

if TYPE_CHECKING:
    from stressdp.core.state import SimulationState
    from stressdp.core.tables import ModelTables
    from stressdp.parameters.model_params import ModelParameters

logger = logging.getLogger(__name__)


@dataclass
class ForwardResult:
    """Outcome of forward propagation (death rates are per season)."""
    converged: bool
    iterations: int
    predation_deaths: float
    damage_deaths: float
    background_deaths: float
    max_freq_diff: float
    boundary_mass: List[float] = field(default_factory=list)
    extinct: bool = False       # Nobody survived the last season

    @property
    def total_deaths(self) -> float:
        """All deaths over the last season."""
        return self.predation_deaths + self.damage_deaths + self.background_deaths


def initialise_frequencies(state: 'SimulationState') -> None:
    """Put all mass at t = max_t, ts = 0, d = 0, h = 0."""
    state.freq[...] = 0.0
    state.freq[-1, 0, 0, 0] = 1.0


class ForwardPropagationEngine:
    """
    Propagates population frequencies to a stationary distribution.

    Example usage:
        engine = ForwardPropagationEngine(params, tables, state)
        result = engine.run()
        print(result.predation_deaths, result.damage_deaths)
    """

    def __init__(
        self,
        params: 'ModelParameters',
        tables: 'ModelTables',
        state: 'SimulationState',
    ):
        """
        Initialize the engine.

        Args:
            params: Model parameters (tolerance, cycle cap)
            tables: Static lookup tables
            state: Solved state; freq is overwritten
        """
        self.params = params
        self.tables = tables
        self.state = state

    def propagate_season(self) -> tuple[float, float, float]:
        """
        Push the boundary distribution at ts = 0 through one season.

        Returns:
            Per-cause deaths over the season as fractions of the mass at ts = 0
        """
        tables = self.tables
        state = self.state
        max_ts = state.freq.shape[1] - 1

        pred_deaths = 0.0
        damage_deaths = 0.0
        background_deaths = 0.0

        for ts in range(max_ts):
            pred, damage, background = optimizations.propagate_epoch(
                state.freq, ts, state.hormone,
                tables.p_pred, tables.p_attack, tables.p_killed, tables.mu,
                tables.d_lower, tables.d_upper, tables.d_frac,
            )
            pred_deaths += pred
            damage_deaths += damage
            background_deaths += background

        return pred_deaths, damage_deaths, background_deaths

    def close_season(self, total_deaths: float) -> tuple[float, float]:
        """
        Renormalise the survivors and start the next season.

        Returns:
            (largest per-state change in the boundary distribution,
             mass of the boundary distribution after renormalisation)
        """
        freq = self.state.freq
        survivors = 1.0 - total_deaths
        if survivors > 0.0:
            freq[:, -1] /= survivors

        boundary = freq[:, -1]
        max_freq_diff = float(np.abs(boundary - freq[:, 0]).max())
        mass = float(boundary[1:].sum())

        freq[:, 0] = boundary
        freq[:, 1:] = 0.0
        return max_freq_diff, mass

    def run(self, progress: bool = True) -> ForwardResult:
        """
        Cycle through seasons until the boundary distribution is stationary.

        Args:
            progress: Show progress bar

        Returns:
            ForwardResult
        """
        params = self.params
        initialise_frequencies(self.state)

        boundary_mass: List[float] = []
        pred_deaths = damage_deaths = background_deaths = 0.0
        max_freq_diff = 1.0
        converged = False
        extinct = False
        i = 0

        bar = tqdm(total=params.max_forward_iterations, desc="Forward propagation",
                   unit="season", disable=not progress)
        try:
            while i < params.max_forward_iterations:
                i += 1
                pred_deaths, damage_deaths, background_deaths = self.propagate_season()
                bar.update(1)

                # No survivors: nothing to renormalise and no stationary distribution
                if not self.state.freq[:, -1].any():
                    extinct = True
                    boundary_mass.append(0.0)
                    break

                max_freq_diff, mass = self.close_season(
                    pred_deaths + damage_deaths + background_deaths
                )
                boundary_mass.append(mass)

                if i % params.report_interval == 0:
                    logger.debug("i=%d maxfreqdiff=%.6g", i, max_freq_diff)
                    bar.set_postfix(maxfreqdiff=f"{max_freq_diff:.3g}")

                if max_freq_diff < params.frequency_tolerance:
                    converged = True
                    break
        finally:
            bar.close()

        if extinct:
            logger.warning(
                "Population died out in season %d: predDeaths=%.6g damageDeaths=%.6g "
                "bkgrndDeaths=%.6g",
                i, pred_deaths, damage_deaths, background_deaths,
            )
        elif converged:
            logger.info(
                "Frequencies stationary after %d seasons: predDeaths=%.6g damageDeaths=%.6g",
                i, pred_deaths, damage_deaths,
            )
        else:
            logger.warning(
                "Forward propagation did not converge within %d seasons (maxfreqdiff=%.3g)",
                i, max_freq_diff,
            )

        return ForwardResult(
            converged=converged,
            iterations=i,
            predation_deaths=pred_deaths,
            damage_deaths=damage_deaths,
            background_deaths=background_deaths,
            max_freq_diff=max_freq_diff,
            boundary_mass=boundary_mass,
            extinct=extinct,
        )
