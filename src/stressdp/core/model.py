"""
Main model controller.

StressModel ties the pieces together for one parameter set: it builds
the static tables, owns the simulation state, solves for the optimal
policy, and runs the forward projection and trajectory simulation on
the solved policy.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

from stressdp.core.decision import UnimodalityReport, audit_policy
from stressdp.core.forward import ForwardPropagationEngine, ForwardResult
from stressdp.core.state import SimulationState
from stressdp.core.tables import ModelTables
from stressdp.core.trajectory import AttackSchedule, simulate_trajectory
from stressdp.core.value_iteration import ConvergenceResult, ValueIterationEngine
from stressdp.parameters.model_params import ModelParameters

logger = logging.getLogger(__name__)


class StressModel:
    """
    Stress response / somatic damage model for one parameter set.

    Example usage:
        model = StressModel(ModelParameters(p_leave=0.5, p_arrive=0.1))
        model.solve()
        fwd = model.forward()
        traj = model.simulate_trajectory(seed=1)
    """

    def __init__(self, params: Optional[ModelParameters] = None):
        """
        Initialize the model.

        Args:
            params: Model parameters (defaults if None)
        """
        self.params = params if params is not None else ModelParameters()
        self.tables = ModelTables.from_parameters(self.params)
        self.state = SimulationState.create(self.params)

        self.convergence: Optional[ConvergenceResult] = None
        self.forward_result: Optional[ForwardResult] = None
        self.unimodality: Optional[UnimodalityReport] = None

        logger.debug("Allocated %.1f MB of lattice tensors",
                     self.state.memory_bytes / 1e6)

    @property
    def is_solved(self) -> bool:
        """Whether solve() has run."""
        return self.convergence is not None

    def _require_solved(self) -> None:
        if not self.is_solved:
            raise RuntimeError("Model has not been solved; call solve() first")

    def solve(self, progress: bool = True) -> ConvergenceResult:
        """
        Compute the optimal policy by value iteration.

        Args:
            progress: Show progress bar

        Returns:
            ConvergenceResult (converged is False if the cap was reached)
        """
        engine = ValueIterationEngine(self.params, self.tables, self.state)
        self.convergence = engine.run(progress=progress)

        if self.params.check_unimodality:
            self.unimodality = audit_policy(self.state)

        return self.convergence

    def forward(self, progress: bool = True) -> ForwardResult:
        """
        Project population frequencies under the solved policy.

        Returns:
            ForwardResult
        """
        self._require_solved()
        engine = ForwardPropagationEngine(self.params, self.tables, self.state)
        self.forward_result = engine.run(progress=progress)
        return self.forward_result

    def simulate_trajectory(
        self,
        schedule: Optional[AttackSchedule] = None,
        seed: Optional[int] = None,
    ) -> pd.DataFrame:
        """
        Simulate one individual under the solved policy.

        Args:
            schedule: Attack schedule (default AttackSchedule())
            seed: Random seed for the damage draws

        Returns:
            Trajectory DataFrame
        """
        self._require_solved()
        rng = np.random.default_rng(seed)
        return simulate_trajectory(self.state, self.tables, self.params, schedule, rng)

    @property
    def policy(self) -> np.ndarray:
        """Optimal hormone level, indexed [t, ts, d] for ts < max_ts."""
        self._require_solved()
        return self.state.policy

    def get_statistics(self) -> dict:
        """Summary of the current run."""
        stats = {
            "solved": self.is_solved,
            "converged": bool(self.convergence and self.convergence.converged),
            "iterations": self.convergence.iterations if self.convergence else 0,
            "fitdiff": self.convergence.fitdiff if self.convergence else None,
        }
        if self.forward_result is not None:
            stats.update({
                "forward_converged": self.forward_result.converged,
                "forward_extinct": self.forward_result.extinct,
                "forward_iterations": self.forward_result.iterations,
                "predation_deaths": self.forward_result.predation_deaths,
                "damage_deaths": self.forward_result.damage_deaths,
                "background_deaths": self.forward_result.background_deaths,
            })
        return stats
