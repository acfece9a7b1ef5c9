"""Tests for the simulated attack trajectory."""

import numpy as np
import pandas as pd
import pytest

from stressdp import StressModel
from stressdp.core.trajectory import TRAJECTORY_COLUMNS, AttackSchedule


class TestAttackSchedule:
    def test_default_window(self):
        schedule = AttackSchedule()
        assert not schedule.is_attack(16)
        assert schedule.is_attack(17)
        assert schedule.is_attack(32)
        assert not schedule.is_attack(33)

    def test_default_duration(self):
        assert AttackSchedule().steps(10) == 30
        assert AttackSchedule(duration=7).steps(10) == 7

    def test_reproduction_at_boundary(self):
        schedule = AttackSchedule()
        assert (schedule.season_offset(10) + schedule.reproduce_at) % 10 == 0


class TestSimulateTrajectory:
    """Test one simulated individual on the solved small model."""

    @pytest.fixture
    def trajectory(self, solved_model):
        return solved_model.simulate_trajectory(AttackSchedule(duration=50), seed=7)

    def test_columns_and_length(self, trajectory):
        assert list(trajectory.columns) == TRAJECTORY_COLUMNS
        assert len(trajectory) == 50
        assert list(trajectory["time"]) == list(range(50))

    def test_default_length(self, solved_model):
        traj = solved_model.simulate_trajectory(seed=1)
        assert len(traj) == 3 * solved_model.params.max_ts

    def test_attacks_reset_clock(self, trajectory):
        attacked = trajectory[trajectory["attack"]]
        assert list(attacked["time"]) == list(range(17, 33))
        assert np.all(attacked["t"] == 0)
        after = trajectory.set_index("time").loc[33]
        assert after["t"] == 1

    def test_clock_censored(self, trajectory, solved_model):
        assert trajectory["t"].max() == solved_model.params.max_t
        assert trajectory.loc[0, "t"] == solved_model.params.max_t

    def test_damage_in_range(self, trajectory, solved_model):
        assert trajectory["damage"].min() >= 0
        assert trajectory["damage"].max() <= solved_model.params.max_d

    def test_hormone_follows_policy(self, trajectory, solved_model):
        max_ts = solved_model.params.max_ts
        hormone = solved_model.state.hormone
        damage_before = [0] + list(trajectory["damage"][:-1])
        for row, d in zip(trajectory.itertuples(), damage_before):
            assert row.hormone == hormone[row.t, row.ts % max_ts, d]

    def test_reproduction_flags(self, trajectory, solved_model):
        max_ts = solved_model.params.max_ts
        assert trajectory.set_index("time").loc[40, "reproduce"]
        expected = (trajectory["time"] % max_ts) == 0
        assert list(trajectory["reproduce"]) == list(expected)

    def test_reproducible_with_seed(self, solved_model):
        a = solved_model.simulate_trajectory(seed=3)
        b = solved_model.simulate_trajectory(seed=3)
        pd.testing.assert_frame_equal(a, b)

    def test_requires_solved_model(self, small_params):
        with pytest.raises(RuntimeError):
            StressModel(small_params).simulate_trajectory(seed=1)
