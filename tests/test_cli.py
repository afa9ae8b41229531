# -*- coding: utf-8 -*-
"""命令行入口测试：输出顺序、邻接表打印、错误退出码。"""

import pytest

from hogwild_gibbs.cli import build_parser, main


def test_quick_run_prints_statistics_then_summary(capsys):
    rc = main(["--preset", "quick", "--set", "verbose=false", "--log-level", "warning"])
    assert rc == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Graph statistics:"
    assert out[1].startswith("Min Degree: ")
    assert out[2].startswith("Max Degree: ")
    assert out[3].startswith("Avg Degree: ")
    assert "Sampling summary:" in out
    assert out.index("Sampling summary:") > 3


def test_print_graph(capsys):
    rc = main(["--preset", "quick", "--set", "print_graph=true", "--set", "sampler.n_iterations=2",
               "--set", "verbose=false", "--log-level", "ERROR"])
    assert rc == 0
    out = capsys.readouterr().out.splitlines()
    adjacency = [line for line in out if line.split(":")[0].isdigit()]
    assert len(adjacency) == 100
    assert adjacency[0].startswith("0: ")


def test_lattice_hogwild(capsys):
    rc = main(["--preset", "lattice", "--set", "graph.L=6", "--set", "sampler.scan=hogwild",
               "--set", "sampler.n_workers=2", "--set", "sampler.n_iterations=3", "--set", "sampler.seed=1",
               "--set", "verbose=false", "--log-level", "ERROR"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Avg Degree: 4.000000" in out
    assert "Scan: hogwild (workers: 2)" in out


@pytest.mark.parametrize("override", ["sampler.beta=abc", "sampler.scan=wolff", "graph.L=0", "bogus=1"])
def test_invalid_config_returns_error(override, capsys):
    rc = main(["--preset", "quick", "--set", override, "--log-level", "ERROR"])
    assert rc == 1
    captured = capsys.readouterr()
    assert "Sampling summary:" not in captured.out


def test_missing_config_file(tmp_path):
    assert main(["--config", str(tmp_path / "none.yaml"), "--log-level", "CRITICAL"]) == 1


def test_parser_defaults():
    ns = build_parser().parse_args([])
    assert ns.preset is None
    assert ns.sets == []
    assert ns.log_level == "INFO"
    assert ns.env_prefix == "HOGWILD"
