"""Output tables and files."""

from stressdp.reporting.output import (
    output_filename,
    policy_table,
    frequency_table,
    parameter_echo,
    write_strategy_file,
    write_forward_file,
    write_trajectory_file,
)

__all__ = [
    "output_filename",
    "policy_table",
    "frequency_table",
    "parameter_echo",
    "write_strategy_file",
    "write_forward_file",
    "write_trajectory_file",
]
