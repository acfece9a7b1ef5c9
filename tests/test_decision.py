"""Tests for the golden-section decision search and its audit."""

import numpy as np
import pytest

from stressdp import ModelParameters
from stressdp.core.decision import audit_policy, golden_section_search, is_unimodal
from stressdp.core.state import SimulationState


def parabola(peak, length=501):
    h = np.arange(length, dtype=np.float64)
    return -(h - peak) ** 2


class TestGoldenSectionSearch:
    """Test the search on synthetic unimodal rows."""

    @pytest.mark.parametrize("peak", [0, 150, 500])
    def test_finds_parabola_peak(self, peak):
        assert abs(golden_section_search(parabola(peak)) - peak) <= 1

    def test_exact_on_interior_peak(self):
        assert golden_section_search(parabola(150)) == 150

    def test_monotone_increasing(self):
        assert golden_section_search(np.arange(501.0)) >= 499

    def test_monotone_decreasing(self):
        assert golden_section_search(-np.arange(501.0)) <= 1

    def test_two_points(self):
        assert golden_section_search([0.0, 1.0]) == 1
        assert golden_section_search([1.0, 0.0]) == 0

    def test_accepts_lists(self):
        values = list(parabola(20, length=41))
        assert abs(golden_section_search(values) - 20) <= 1

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            golden_section_search([])


class TestIsUnimodal:
    def test_unimodal(self):
        assert is_unimodal(parabola(100))

    def test_monotone_and_flat(self):
        assert is_unimodal(np.arange(10.0))
        assert is_unimodal(np.ones(10))

    def test_plateau_at_top(self):
        assert is_unimodal([0.0, 1.0, 2.0, 2.0, 2.0, 1.0])

    def test_bimodal(self):
        assert not is_unimodal([0.0, 2.0, 1.0, 3.0, 0.0])

    def test_tolerance_ignores_noise(self):
        values = [0.0, 1.0, 2.0, 1.0, 1.0 + 1e-14, 0.0]
        assert not is_unimodal(values)
        assert is_unimodal(values, atol=1e-12)


class TestAuditPolicy:
    """Test the full-scan comparison."""

    def test_checks_every_decision_row(self, solved_model):
        report = audit_policy(solved_model.state)
        params = solved_model.params
        assert report.rows_checked == (params.max_t + 1) * params.max_ts * (params.max_d + 1)
        assert set(report.non_unimodal) <= set(report.mismatched)
        assert report.ok or report.max_value_gap > 0.0

    def test_model_runs_audit_when_requested(self, small_params):
        from stressdp import StressModel

        model = StressModel(small_params.replace(check_unimodality=True))
        assert model.unimodality is None
        model.solve(progress=False)
        assert model.unimodality is not None
        assert model.unimodality.rows_checked > 0

    def test_agrees_on_unimodal_rows(self):
        params = ModelParameters(max_t=1, max_ts=1, max_d=2, max_h=60)
        state = SimulationState.create(params)
        for d, peak in enumerate([5, 30, 55]):
            state.w_next[:, 1, d, :] = parabola(peak, length=61)
        from stressdp import optimizations
        from stressdp.parameters import ModelConstants
        optimizations.optimal_decisions(
            state.w_next, 0, state.hormone, state.wopt, ModelConstants.PHI_INV
        )

        report = audit_policy(state)
        assert report.ok
        assert report.non_unimodal == []

    def test_flags_missed_maximum(self):
        params = ModelParameters(max_t=2, max_ts=1, max_d=0, max_h=20)
        state = SimulationState.create(params)
        # Bimodal row: local peak at 3, global peak at 17
        row = -np.abs(np.arange(21.0) - 3.0)
        row[15:] = 10.0 - np.abs(np.arange(15, 21) - 17.0)
        state.w_next[:, 1, 0, :] = row
        state.hormone[:, 0, 0] = 3

        report = audit_policy(state)
        assert not report.ok
        assert len(report.mismatched) == 3
        assert len(report.non_unimodal) == 3
        assert report.max_value_gap == pytest.approx(10.0)
