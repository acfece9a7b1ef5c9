"""
Output tables and files.

Tables are built as pandas DataFrames; the writers produce the
tab-separated text files of a model run, each named after the
parameter set:

    stressL0.500000A0.100000Kmort0.000000Kfec0.050000.txt
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

import numpy as np
import pandas as pd

from stressdp.parameters.constants import ModelConstants

if TYPE_CHECKING:
    from stressdp.core.forward import ForwardResult
    from stressdp.core.state import SimulationState
    from stressdp.core.value_iteration import ConvergenceResult
    from stressdp.parameters.model_params import ModelParameters

logger = logging.getLogger(__name__)

# (label, attribute) pairs echoed after the strategy table
PARAMETER_ECHO = [
    ("pLeave", "p_leave"),
    ("pArrive", "p_arrive"),
    ("pAttack", "p_attack"),
    ("alpha", "alpha"),
    ("mu0", "mu0"),
    ("Kmort", "k_mort"),
    ("Kfec", "k_fec"),
    ("maxI", "max_iterations"),
    ("maxT", "max_t"),
    ("maxTs", "max_ts"),
    ("maxD", "max_d"),
    ("maxH", "max_h"),
    ("hmin", "hmin"),
    ("hslope", "hslope"),
    ("repair", "repair"),
]


def output_filename(prefix: str, params: 'ModelParameters') -> str:
    """File name for a parameter set, e.g. 'stressL0.500000A0.100000...txt'."""
    return (
        f"{prefix}L{params.p_leave:.6f}A{params.p_arrive:.6f}"
        f"Kmort{params.k_mort:.6f}Kfec{params.k_fec:.6f}.txt"
    )


def policy_table(state: 'SimulationState', params: 'ModelParameters') -> pd.DataFrame:
    """
    Optimal hormone level for every (t, d, ts) with ts < max_ts.

    Rows are ordered by t, then ts, then d.
    """
    t, ts, d = np.meshgrid(
        np.arange(params.max_t + 1),
        np.arange(params.max_ts),
        np.arange(params.max_d + 1),
        indexing="ij",
    )
    return pd.DataFrame({
        "t": t.ravel(),
        "d": d.ravel(),
        "ts": ts.ravel(),
        "hormone": state.policy.ravel(),
    })


def frequency_table(
    state: 'SimulationState',
    params: 'ModelParameters',
    drop_empty: bool = False,
) -> pd.DataFrame:
    """
    Population frequency for every (t, ts, d, h) with t >= 1.

    Args:
        state: State after forward propagation
        params: Model parameters
        drop_empty: Leave out states with zero frequency
    """
    freq = state.freq[1:]
    t, ts, d, h = np.meshgrid(
        np.arange(1, params.max_t + 1),
        np.arange(params.max_ts + 1),
        np.arange(params.max_d + 1),
        np.arange(params.max_h + 1),
        indexing="ij",
    )
    df = pd.DataFrame({
        "t": t.ravel(),
        "ts": ts.ravel(),
        "damage": d.ravel(),
        "hormone": h.ravel(),
        "freq": freq.ravel(),
    })
    if drop_empty:
        df = df[df["freq"] != 0.0].reset_index(drop=True)
    return df


def parameter_echo(params: 'ModelParameters') -> str:
    """'PARAMETER VALUES' block listing the parameter set."""
    lines = ["", "PARAMETER VALUES"]
    for label, attr in PARAMETER_ECHO:
        lines.append(f"{label}: \t{getattr(params, attr)}")
    return "\n".join(lines) + "\n"


def write_strategy_file(
    state: 'SimulationState',
    params: 'ModelParameters',
    convergence: 'ConvergenceResult',
    output_dir: Union[str, Path] = ".",
    seed: Optional[int] = None,
) -> Path:
    """
    Write the optimal strategy, iteration count and parameter echo.

    Returns:
        Path to the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / output_filename(ModelConstants.STRATEGY_PREFIX, params)

    with open(path, "w", newline="") as f:
        if seed is not None:
            f.write(f"Random seed: {seed}\n")
        if not convergence.converged:
            f.write(f"*** DID NOT CONVERGE WITHIN {convergence.iterations} ITERATIONS ***\n")
        f.write("\n")
        policy_table(state, params).to_csv(f, sep="\t", index=False)
        f.write("\n")
        f.write(f"nIterations\t{convergence.iterations}\n")
        f.write(parameter_echo(params))

    logger.info("Wrote strategy to %s", path)
    return path


def write_forward_file(
    state: 'SimulationState',
    params: 'ModelParameters',
    result: 'ForwardResult',
    output_dir: Union[str, Path] = ".",
    drop_empty: bool = False,
) -> Path:
    """
    Write death-cause totals and the stationary frequency table.

    Returns:
        Path to the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / output_filename(ModelConstants.FORWARD_PREFIX, params)

    with open(path, "w", newline="") as f:
        f.write("SUMMARY STATS\n")
        f.write(f"predDeaths: \t{result.predation_deaths}\n")
        f.write(f"damageDeaths: \t{result.damage_deaths}\n")
        f.write(f"bkgrndDeaths: \t{result.background_deaths}\n")
        if not result.converged:
            f.write(f"*** DID NOT CONVERGE WITHIN {result.iterations} ITERATIONS ***\n")
        f.write("\n")
        frequency_table(state, params, drop_empty=drop_empty).to_csv(
            f, sep="\t", index=False, float_format="%.4g"
        )

    logger.info("Wrote forward frequencies to %s", path)
    return path


def write_trajectory_file(
    trajectory: pd.DataFrame,
    params: 'ModelParameters',
    output_dir: Union[str, Path] = ".",
) -> Path:
    """
    Write a simulated trajectory with attack and reproduction flags as 0/1.

    Returns:
        Path to the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / output_filename(ModelConstants.TRAJECTORY_PREFIX, params)

    out = trajectory.astype({"attack": int, "reproduce": int})
    out.to_csv(path, sep="\t", index=False)

    logger.info("Wrote trajectory to %s", path)
    return path
