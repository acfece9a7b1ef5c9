"""
End-to-end runs of the model.

These solve a mid-sized lattice under predation risk and check the
qualitative behaviour of the optimal stress response.
"""

import numpy as np
import pytest

from stressdp import ModelParameters, StressModel
from stressdp.core.decision import audit_policy


def solve(p_attack):
    params = ModelParameters(
        p_leave=0.5, p_arrive=0.1, p_attack=p_attack, alpha=1.0, k_mort=0.0, k_fec=0.05,
        max_t=20, max_ts=5, max_d=10, max_h=100,
        max_iterations=100000,
    )
    model = StressModel(params)
    model.solve(progress=False)
    return model


@pytest.fixture(scope="module")
def risky_model():
    """Occasional attacks: the policy depends on clock and damage."""
    return solve(0.1)


@pytest.fixture(scope="module")
def dangerous_model():
    """Frequent attacks: the hormone level is pushed to the top of the range."""
    return solve(0.5)


class TestOptimalPolicy:
    """Test the solved policy under predation risk."""

    def test_converges(self, risky_model):
        assert risky_model.convergence.converged
        assert risky_model.convergence.fitdiff < 1e-6

    def test_policy_within_lattice(self, risky_model):
        policy = risky_model.policy
        assert policy.shape == (21, 5, 11)
        assert policy.min() >= 0
        assert policy.max() <= 100

    def test_policy_varies(self, risky_model):
        assert len(np.unique(risky_model.policy)) > 10

    def test_never_below_damage_minimum(self, risky_model):
        """Lowering the hormone below hmin * max_h only adds damage and risk."""
        hmin_level = risky_model.params.damage_minimising_hormone
        assert risky_model.policy.min() >= hmin_level - 2

    def test_damage_transition_minimum(self, risky_model):
        dnew = risky_model.tables.dnew
        assert np.argmin(dnew[5]) == int(risky_model.params.damage_minimising_hormone)

    def test_stress_response_after_attack(self, risky_model):
        """Hormone right after an attack is higher than long after one."""
        policy = risky_model.policy
        assert np.all(policy[1, :, 3] > policy[-1, :, 3])

    def test_search_misses_are_reported(self, risky_model):
        """On this lattice some decision rows have more than one peak."""
        report = audit_policy(risky_model.state)
        assert report.rows_checked == 21 * 5 * 11
        assert len(report.mismatched) > 0
        assert report.max_value_gap > 0.0

    def test_forward_projection(self, risky_model):
        result = risky_model.forward(progress=False)
        assert result.converged
        assert not result.extinct
        assert result.predation_deaths > 0.0
        assert result.damage_deaths == pytest.approx(0.0)
        assert 0.0 < result.total_deaths < 1.0

    def test_statistics(self, risky_model):
        stats = risky_model.get_statistics()
        assert stats["converged"]
        assert stats["iterations"] == risky_model.convergence.iterations


class TestParameterEffects:
    """Compare solutions across parameter sets."""

    def test_frequent_attacks_saturate_hormone(self, dangerous_model, risky_model):
        assert dangerous_model.convergence.converged
        assert dangerous_model.policy.min() >= 90
        assert dangerous_model.policy.mean() > risky_model.policy.mean()

    def test_no_predation_means_minimum_damage_policy(self):
        params = ModelParameters(
            p_attack=0.0, max_t=5, max_ts=3, max_d=6, max_h=40, max_iterations=50000,
        )
        model = StressModel(params)
        model.solve(progress=False)
        # Without attacks only damage matters. At d = 0 every level that
        # repairs fully ties, so only damaged states pin the optimum.
        policy = model.policy[1:, :, 1:]
        assert np.all(np.abs(policy - 12) <= 2)
