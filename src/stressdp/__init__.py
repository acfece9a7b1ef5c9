"""
stress-sdp - Stress response and somatic damage under predation risk

Stochastic dynamic programming model of an organism choosing its stress
hormone level when the predator cannot be seen, only its attacks. The
optimal policy is found by backward-induction value iteration and checked
by projecting population frequencies forward under it.
"""

__version__ = "0.1.0"

from stressdp.core.model import StressModel
from stressdp.parameters.model_params import ModelParameters
from stressdp.parameters.constants import ModelConstants

__all__ = [
    "StressModel",
    "ModelParameters",
    "ModelConstants",
]
