"""
Command-line entry point.

Usage:
    stressdp 0.5 0.1 0.5 1.0 0.0 0.05 --output-dir results --forward
    stressdp 0.5 0.1 0.5 1.0 0.0 0.05 --config lattice.json --no-progress

Positional arguments are pLeave, pArrive, pAttack, alpha, Kmort and Kfec.
A JSON config may set any other ModelParameters field; positional values
override it.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from stressdp.core.model import StressModel
from stressdp.parameters.model_params import ModelParameters
from stressdp.reporting.output import (
    write_forward_file,
    write_strategy_file,
    write_trajectory_file,
)

logger = logging.getLogger("stressdp")

POSITIONAL = ["p_leave", "p_arrive", "p_attack", "alpha", "k_mort", "k_fec"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stressdp",
        description="Optimal stress response under predation risk and somatic damage",
    )
    parser.add_argument("p_leave", type=float, help="probability that the predator leaves")
    parser.add_argument("p_arrive", type=float, help="probability that the predator arrives")
    parser.add_argument("p_attack", type=float, help="probability that a present predator attacks")
    parser.add_argument("alpha", type=float, help="effect of hormone level on pKilled")
    parser.add_argument("k_mort", type=float, help="increase in mortality with damage")
    parser.add_argument("k_fec", type=float, help="decrease in fecundity with damage")
    parser.add_argument("--config", help="JSON file with further ModelParameters fields")
    parser.add_argument("--output-dir", default=".", help="directory for output files")
    parser.add_argument("--max-iterations", type=int, help="cap on value iterations")
    parser.add_argument("--forward", action="store_true",
                        help="run the forward frequency projection")
    parser.add_argument("--all-states", action="store_true",
                        help="write zero-frequency states to the forward file")
    parser.add_argument("--no-trajectory", action="store_true",
                        help="skip the simulated attack trajectory")
    parser.add_argument("--seed", type=int, default=None, help="seed for the trajectory")
    parser.add_argument("--check-unimodality", action="store_true",
                        help="audit the decision search against a full scan")
    parser.add_argument("--no-progress", action="store_true", help="hide progress bars")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def parameters_from_args(args: argparse.Namespace) -> ModelParameters:
    """Merge the JSON config (if any) with command-line values."""
    values = ModelParameters.from_json(args.config).to_dict() if args.config else {}
    for name in POSITIONAL:
        values[name] = getattr(args, name)
    if args.max_iterations is not None:
        values["max_iterations"] = args.max_iterations
    if args.check_unimodality:
        values["check_unimodality"] = True
    return ModelParameters.from_dict(values)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        params = parameters_from_args(args)
    except (ValueError, FileNotFoundError) as e:
        logger.error("Invalid parameters: %s", e)
        return 2

    progress = not args.no_progress
    model = StressModel(params)
    convergence = model.solve(progress=progress)
    write_strategy_file(model.state, params, convergence, args.output_dir, seed=args.seed)

    if args.forward:
        result = model.forward(progress=progress)
        write_forward_file(model.state, params, result, args.output_dir,
                           drop_empty=not args.all_states)

    if not args.no_trajectory:
        trajectory = model.simulate_trajectory(seed=args.seed)
        write_trajectory_file(trajectory, params, args.output_dir)

    return 0


if __name__ == "__main__":
    sys.exit(main())
