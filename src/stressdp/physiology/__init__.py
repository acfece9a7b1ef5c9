"""Physiology: predation risk, mortality, damage and reproduction."""

from stressdp.physiology.risk import (
    kill_probability,
    background_mortality,
    damage_transition,
    interpolation_weights,
)
from stressdp.physiology.reproduction import reproductive_output

__all__ = [
    "kill_probability",
    "background_mortality",
    "damage_transition",
    "interpolation_weights",
    "reproductive_output",
]
