"""
Backward-induction value iteration.

Each outer iteration sweeps one season backwards, from epoch max_ts - 1
down to the reproduction boundary at epoch 0:

1. Decision search: for every (t, d) the hormone level maximising the
   fitness of the following epoch.
2. Expected fitness: for every (t, d, h) the fitness before the predator
   does or doesn't attack, given the decisions just found.

The fitness at epoch 0 then becomes the terminal fitness of the next
iteration's season, and the total absolute change in that fitness is the
convergence signal. Iteration stops once it falls below the tolerance or
the iteration cap is reached; failure to converge is reported, not raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

import numpy as np
from tqdm import tqdm

from stressdp import optimizations
from stressdp.parameters.constants import ModelConstants

if TYPE_CHECKING:
    from stressdp.core.state import SimulationState
    from stressdp.core.tables import ModelTables
    from stressdp.parameters.model_params import ModelParameters

logger = logging.getLogger(__name__)


def final_fitness(state: 'SimulationState', tables: 'ModelTables') -> None:
    """
    Seed terminal fitness: fitness beyond the horizon equals fecundity.

    Sets w_next[t, max_ts, d, h] and v[t, d, h] to repro[max_ts, d] for
    every t >= 1 and h.
    """
    terminal = tables.repro[-1][np.newaxis, :, np.newaxis]
    state.w_next[1:, -1] = terminal
    state.v[1:] = terminal


def optimise_decisions(state: 'SimulationState', tables: 'ModelTables') -> None:
    """
    One backward sweep over the season.

    For ts = max_ts - 1 .. 0, finds the policy at ts from w_next[:, ts + 1],
    computes w[:, ts] and publishes it to w_next[:, ts] for the next epoch
    down.
    """
    max_ts = state.w.shape[1] - 1

    for ts in range(max_ts - 1, -1, -1):
        optimizations.optimal_decisions(
            state.w_next, ts, state.hormone, state.wopt, ModelConstants.PHI_INV
        )
        optimizations.expected_fitness(
            state.wopt, ts,
            tables.p_pred, tables.p_attack, tables.p_killed, tables.mu,
            tables.d_lower, tables.d_upper, tables.d_frac, tables.repro,
            state.w,
        )
        state.w_next[1:, ts] = state.w[1:, ts]


def replace_fitness(state: 'SimulationState') -> float:
    """
    Close the season loop and measure convergence.

    Returns:
        Sum over t >= 1, d, h of |v - w[:, 0]|, the change in boundary
        fitness since the previous iteration.
    """
    boundary = state.w[1:, 0]
    fitdiff = float(np.abs(state.v[1:] - boundary).sum())

    state.w_next[1:, -1] = boundary
    state.v[1:] = boundary
    state.hormone[:, -1] = state.hormone[:, 0]

    state.fitdiff = fitdiff
    return fitdiff


@dataclass
class ConvergenceResult:
    """Outcome of value iteration."""
    converged: bool
    iterations: int
    fitdiff: float
    history: List[float] = field(default_factory=list)


class ValueIterationEngine:
    """
    Runs value iteration to a fixed point.

    Example usage:
        engine = ValueIterationEngine(params, tables, state)
        result = engine.run()
        if not result.converged:
            ...  # state.hormone still holds the last policy
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
            params: Model parameters (iteration cap, tolerance)
            tables: Static lookup tables
            state: State to solve in place
        """
        self.params = params
        self.tables = tables
        self.state = state

    def step(self) -> float:
        """Run one outer iteration and return its fitness change."""
        optimise_decisions(self.state, self.tables)
        fitdiff = replace_fitness(self.state)
        self.state.iteration += 1
        return fitdiff

    def run(self, progress: bool = True) -> ConvergenceResult:
        """
        Iterate until the fitness change falls below tolerance.

        Args:
            progress: Show progress bar

        Returns:
            ConvergenceResult
        """
        params = self.params
        final_fitness(self.state, self.tables)
        self.state.iteration = 0

        history: List[float] = []
        converged = False
        fitdiff = float("inf")

        logger.info(
            "Solving: pLeave=%g pArrive=%g pAttack=%g alpha=%g Kmort=%g Kfec=%g",
            params.p_leave, params.p_arrive, params.p_attack,
            params.alpha, params.k_mort, params.k_fec,
        )

        bar = tqdm(total=params.max_iterations, desc="Value iteration",
                   unit="it", disable=not progress)
        try:
            for i in range(1, params.max_iterations + 1):
                fitdiff = self.step()
                history.append(fitdiff)
                bar.update(1)

                if i % params.report_interval == 0 or fitdiff < params.fitness_tolerance:
                    logger.debug("i=%d totfitdiff=%.6g", i, fitdiff)
                    bar.set_postfix(fitdiff=f"{fitdiff:.3g}")

                if fitdiff < params.fitness_tolerance:
                    converged = True
                    break
        finally:
            bar.close()

        if converged:
            logger.info("Converged after %d iterations (fitdiff=%.3g)",
                        self.state.iteration, fitdiff)
        else:
            logger.warning("*** DID NOT CONVERGE WITHIN %d ITERATIONS *** (fitdiff=%.3g)",
                           self.state.iteration, fitdiff)

        return ConvergenceResult(
            converged=converged,
            iterations=self.state.iteration,
            fitdiff=fitdiff,
            history=history,
        )
