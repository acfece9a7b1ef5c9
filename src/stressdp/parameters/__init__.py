"""Parameters configuration module."""

from stressdp.parameters.model_params import ModelParameters
from stressdp.parameters.constants import ModelConstants

__all__ = ["ModelParameters", "ModelConstants"]
