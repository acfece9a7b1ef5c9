"""Shared fixtures: small lattices that solve in well under a second."""

import pytest

from stressdp import ModelParameters, StressModel


SMALL_LATTICE = dict(max_t=10, max_ts=4, max_d=8, max_h=40)


@pytest.fixture
def small_params():
    """Benign parameter set on a small lattice."""
    return ModelParameters(
        p_leave=0.5, p_arrive=0.1, p_attack=0.3, alpha=1.0, k_mort=0.0, k_fec=0.05,
        max_iterations=50000, max_forward_iterations=50000,
        **SMALL_LATTICE,
    )


@pytest.fixture
def solved_model(small_params):
    """Small model solved to convergence."""
    model = StressModel(small_params)
    model.solve(progress=False)
    return model
