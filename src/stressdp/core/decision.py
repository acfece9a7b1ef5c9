"""
Decision search and unimodality diagnostics.

The optimal hormone level is found by golden-section search, which
assumes that fitness as a function of h has a single interior maximum.
That assumption is not checked during value iteration. audit_policy()
scans every decision row in full and reports where the search result
disagrees with the true maximum, so the assumption can be checked for a
given parameter set after the fact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Tuple

import numpy as np

from stressdp.optimizations import golden_section_argmax
from stressdp.parameters.constants import ModelConstants

if TYPE_CHECKING:
    from stressdp.core.state import SimulationState

logger = logging.getLogger(__name__)


def golden_section_search(values) -> int:
    """
    Index of the maximum of a unimodal sequence.

    Args:
        values: Sequence of objective values over the hormone lattice

    Returns:
        Index of the (local) maximum found
    """
    arr = np.ascontiguousarray(values, dtype=np.float64)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError("values must be a non-empty 1-D sequence")
    return int(golden_section_argmax(arr, ModelConstants.PHI_INV))


def is_unimodal(values, atol: float = 0.0) -> bool:
    """
    Check that a sequence weakly rises and then weakly falls.

    Steps smaller than atol in absolute value count as flat.
    """
    diffs = np.diff(np.asarray(values, dtype=np.float64))
    signs = np.sign(np.where(np.abs(diffs) <= atol, 0.0, diffs))
    signs = signs[signs != 0]
    if signs.size == 0:
        return True
    # Once the sequence has started falling it must not rise again
    falling = np.cumsum(signs < 0) > 0
    return not np.any(falling & (signs > 0))


@dataclass
class UnimodalityReport:
    """Result of auditing the decision search."""
    rows_checked: int = 0
    mismatched: List[Tuple[int, int, int]] = field(default_factory=list)
    non_unimodal: List[Tuple[int, int, int]] = field(default_factory=list)
    max_value_gap: float = 0.0

    @property
    def ok(self) -> bool:
        """True if every search result is within tolerance of the scan."""
        return not self.mismatched


def audit_policy(
    state: 'SimulationState',
    tolerance: int = 1,
    atol: float = 1e-12,
) -> UnimodalityReport:
    """
    Compare the decision-search policy with a full scan of each row.

    For every state (t, ts, d) with ts < max_ts, the row searched is
    w_next[min(max_t, t + 1), ts + 1, d, :]. A row is flagged as
    mismatched when the searched index is more than `tolerance` lattice
    units from the scan's argmax and its value is lower by more than atol.

    Args:
        state: Solved simulation state
        tolerance: Allowed index distance between search and scan
        atol: Value difference treated as a tie

    Returns:
        UnimodalityReport
    """
    n_t, n_ts, n_d, _ = state.w_next.shape
    max_t = n_t - 1
    report = UnimodalityReport()

    for ts in range(n_ts - 1):
        for t in range(n_t):
            rows = state.w_next[min(max_t, t + 1), ts + 1]
            best = np.argmax(rows, axis=1)
            for d in range(n_d):
                report.rows_checked += 1
                chosen = int(state.hormone[t, ts, d])
                gap = float(rows[d, best[d]] - rows[d, chosen])
                if abs(chosen - int(best[d])) > tolerance and gap > atol:
                    report.mismatched.append((t, ts, d))
                    report.max_value_gap = max(report.max_value_gap, gap)
                    if not is_unimodal(rows[d], atol=atol):
                        report.non_unimodal.append((t, ts, d))

    if report.ok:
        logger.info("Decision search agrees with full scan on %d rows", report.rows_checked)
    else:
        logger.warning(
            "Decision search missed the maximum on %d of %d rows "
            "(%d not unimodal, largest fitness gap %.3g)",
            len(report.mismatched), report.rows_checked,
            len(report.non_unimodal), report.max_value_gap,
        )
    return report
