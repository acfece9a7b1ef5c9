"""Environment: predator arrival, departure and attack."""

from stressdp.environment.predator import predator_presence, stationary_presence

__all__ = ["predator_presence", "stationary_presence"]
