"""
Parameter sweeps.

Solves the model for every combination of a few varied parameters, e.g.
a grid of predator leave and arrive rates, and tabulates what each
solution looks like: whether it converged, the hormone levels its policy
uses and, optionally, the stationary death rates by cause.
"""

from __future__ import annotations

import itertools
import logging
import time
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
from tqdm import tqdm

from stressdp.core.model import StressModel
from stressdp.parameters.model_params import ModelParameters

logger = logging.getLogger(__name__)

SWEEP_COLUMNS = [
    "converged", "iterations", "fitdiff",
    "mean_hormone", "min_hormone", "max_hormone",
    "predation_deaths", "damage_deaths", "background_deaths",
    "seconds",
]


def parameter_grid(
    base: Mapping[str, Any],
    variations: Mapping[str, Sequence[Any]],
) -> List[ModelParameters]:
    """
    Every combination of the varied values on top of the base values.

    All parameter sets are validated before anything is solved.
    """
    names = list(variations)
    grid = []
    for values in itertools.product(*(variations[name] for name in names)):
        grid.append(ModelParameters.from_dict({**base, **dict(zip(names, values))}))
    return grid


def solve_one(params: ModelParameters, run_forward: bool = False) -> Dict[str, Any]:
    """Solve one parameter set and summarise its policy and death rates."""
    start = time.time()
    model = StressModel(params)
    convergence = model.solve(progress=False)
    policy = model.policy

    row = {
        "converged": convergence.converged,
        "iterations": convergence.iterations,
        "fitdiff": convergence.fitdiff,
        "mean_hormone": float(policy.mean()),
        "min_hormone": int(policy.min()),
        "max_hormone": int(policy.max()),
        "predation_deaths": np.nan,
        "damage_deaths": np.nan,
        "background_deaths": np.nan,
    }
    if run_forward:
        fwd = model.forward(progress=False)
        row["predation_deaths"] = fwd.predation_deaths
        row["damage_deaths"] = fwd.damage_deaths
        row["background_deaths"] = fwd.background_deaths

    row["seconds"] = time.time() - start
    return row


def run_sweep(
    base: Optional[Mapping[str, Any]] = None,
    variations: Optional[Mapping[str, Sequence[Any]]] = None,
    run_forward: bool = False,
    max_workers: int = 1,
    progress: bool = True,
) -> pd.DataFrame:
    """
    Solve every combination in the grid.

    Args:
        base: Parameter values shared by all runs
        variations: Values to try for each varied parameter
        run_forward: Also project frequencies to get death rates
        max_workers: Worker processes (1 solves in this process)
        progress: Show progress bar

    Returns:
        One row per run: the varied parameters followed by SWEEP_COLUMNS
    """
    variations = dict(variations or {})
    grid = parameter_grid(base or {}, variations)
    logger.info("Sweeping %d parameter sets over %s",
                len(grid), ", ".join(variations) or "no parameters")

    bar = tqdm(total=len(grid), desc="Sweep", unit="run", disable=not progress)
    try:
        if max_workers > 1 and len(grid) > 1:
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                rows = []
                for row in executor.map(solve_one, grid, itertools.repeat(run_forward)):
                    rows.append(row)
                    bar.update(1)
        else:
            rows = []
            for params in grid:
                rows.append(solve_one(params, run_forward))
                bar.update(1)
    finally:
        bar.close()

    df = pd.DataFrame(rows, columns=SWEEP_COLUMNS)
    for name in reversed(list(variations)):
        df.insert(0, name, [getattr(params, name) for params in grid])

    failed = int((~df["converged"].astype(bool)).sum())
    if failed:
        logger.warning("%d of %d runs did not converge", failed, len(df))
    return df


def write_sweep(
    results: pd.DataFrame,
    output_dir: Union[str, Path] = ".",
    filename: str = "sweep.txt",
) -> Path:
    """Write sweep results as a tab-separated table."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / filename
    results.to_csv(path, sep="\t", index=False)
    logger.info("Wrote %d sweep results to %s", len(results), path)
    return path
