"""Tests for the command-line entry point."""

import json

import pytest

from stressdp.cli import build_parser, main, parameters_from_args

SMALL_LATTICE = dict(max_t=10, max_ts=4, max_d=8, max_h=40)

ARGS = ["0.5", "0.1", "0.3", "1.0", "0.0", "0.05"]


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "lattice.json"
    path.write_text(json.dumps(dict(SMALL_LATTICE, max_iterations=50000, p_leave=0.9)))
    return path


class TestParser:
    def test_positional_parameters(self):
        args = build_parser().parse_args(ARGS)
        params = parameters_from_args(args)
        assert params.p_leave == 0.5
        assert params.p_attack == 0.3
        assert params.k_fec == 0.05
        assert params.max_h == 500

    def test_config_overridden_by_positionals(self, config_file):
        args = build_parser().parse_args(ARGS + ["--config", str(config_file)])
        params = parameters_from_args(args)
        assert params.max_h == SMALL_LATTICE["max_h"]
        assert params.p_leave == 0.5

    def test_flags(self):
        args = build_parser().parse_args(ARGS + ["--max-iterations", "10", "--check-unimodality"])
        params = parameters_from_args(args)
        assert params.max_iterations == 10
        assert params.check_unimodality

    def test_requires_six_values(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(ARGS[:5])


class TestMain:
    """Test complete command-line runs on a small lattice."""

    def test_writes_outputs(self, config_file, tmp_path):
        out = tmp_path / "results"
        code = main(ARGS + [
            "--config", str(config_file), "--output-dir", str(out),
            "--forward", "--seed", "5", "--no-progress",
        ])
        assert code == 0

        names = sorted(p.name for p in out.iterdir())
        suffix = "L0.500000A0.100000Kmort0.000000Kfec0.050000.txt"
        assert names == sorted(["fwdCalc" + suffix, "simAttacks" + suffix, "stress" + suffix])

    def test_strategy_only(self, config_file, tmp_path):
        code = main(ARGS + [
            "--config", str(config_file), "--output-dir", str(tmp_path),
            "--no-trajectory", "--no-progress",
        ])
        assert code == 0
        files = [p.name for p in tmp_path.iterdir() if p.suffix == ".txt"]
        assert len(files) == 1
        assert files[0].startswith("stress")

    def test_invalid_probability(self, tmp_path):
        code = main(["1.5", "0.1", "0.3", "1.0", "0.0", "0.05",
                     "--output-dir", str(tmp_path), "--no-progress"])
        assert code == 2
        assert not any(tmp_path.iterdir())

    def test_missing_config(self, tmp_path):
        code = main(ARGS + ["--config", str(tmp_path / "missing.json"), "--no-progress"])
        assert code == 2
