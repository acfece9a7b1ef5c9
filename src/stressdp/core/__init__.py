"""Core engines: value iteration, forward propagation and trajectories."""

from stressdp.core.model import StressModel
from stressdp.core.state import SimulationState
from stressdp.core.tables import ModelTables
from stressdp.core.value_iteration import ValueIterationEngine, ConvergenceResult
from stressdp.core.forward import ForwardPropagationEngine, ForwardResult
from stressdp.core.trajectory import AttackSchedule, simulate_trajectory
from stressdp.core.sweep import run_sweep, write_sweep

__all__ = [
    "StressModel",
    "SimulationState",
    "ModelTables",
    "ValueIterationEngine",
    "ConvergenceResult",
    "ForwardPropagationEngine",
    "ForwardResult",
    "AttackSchedule",
    "simulate_trajectory",
    "run_sweep",
    "write_sweep",
]
