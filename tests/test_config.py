# -*- coding: utf-8 -*-
"""
配置层测试：默认值、预设、硬约束、软性检查、文件读写与分层覆盖（预设 < 文件 < 环境变量 < --set）。
"""

import json
from pathlib import Path

import pytest
import yaml

from hogwild_gibbs.utils import config as C


def test_defaults_match_reference_constants():
    cfg = C.Config()
    assert cfg.graph.topology == "random"
    assert cfg.graph.n_vertices == C.N == 1000
    assert cfg.graph.max_degree == C.DELTA == 3
    assert cfg.graph.max_edges is None and cfg.graph.max_insertion_tries is None
    assert cfg.sampler.beta == C.BETA == 0.2
    assert cfg.sampler.prior_weight == 0.0
    assert cfg.sampler.scan == "systematic"
    assert cfg.print_graph is False


@pytest.mark.parametrize("name", C.PRESETS)
def test_presets_are_valid_copies(name):
    a = C.get_preset_config(name)
    b = C.get_preset_config(name)
    assert a is not b
    a.sampler.beta = 9.0
    assert b.sampler.beta != 9.0


def test_preset_contents():
    assert C.get_preset_config("lattice").graph.num_vertices == 32 * 32
    assert C.get_preset_config("hogwild").sampler.scan == "hogwild"
    assert C.get_preset_config("quick").sampler.seed == 0
    with pytest.raises(ValueError):
        C.get_preset_config("nope")


@pytest.mark.parametrize("kwargs", [
    {"topology": "torus"},
    {"n_vertices": 0},
    {"max_degree": -1},
    {"max_edges": -5},
    {"L": 0},
    {"topology": "lattice", "L": 1},
    {"boundary": "mirror"},
    {"n_vertices": True},
])
def test_graph_config_hard_errors(kwargs):
    with pytest.raises(ValueError):
        C.GraphConfig(**kwargs)


@pytest.mark.parametrize("kwargs", [
    {"beta": float("nan")},
    {"prior_weight": "abc"},
    {"scan": "wolff"},
    {"n_workers": 0},
    {"n_iterations": -1},
    {"record_interval": 0},
    {"seed": -3},
])
def test_sampler_config_hard_errors(kwargs):
    with pytest.raises(ValueError):
        C.SamplerConfig(**kwargs)


def test_normalization():
    assert C.SamplerConfig(scan="Sequential").scan == "systematic"
    assert C.SamplerConfig(scan="async").scan == "hogwild"
    assert C.GraphConfig(topology="lattice", boundary="periodic").boundary == "pbc"
    assert C.GraphConfig(topology="lattice", L=1, boundary="free").boundary == "open"


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError):
        C.Config.from_dict({"bogus": 1})
    with pytest.raises(ValueError):
        C.Config.from_dict({"sampler": {"temperature": 2.0}})


def test_validate_config_soft_issues():
    ok, issues = C.validate_config(C.Config())
    assert ok and issues == []
    cfg = C.Config(
        graph=C.GraphConfig(n_vertices=4, max_degree=0),
        sampler=C.SamplerConfig(scan="hogwild", n_workers=8, n_iterations=2, record_interval=5, beta=-0.1),
    )
    ok, issues = C.validate_config(cfg)
    assert not ok
    assert len(issues) == 4
    ok, issues = C.validate_config(C.Config(sampler=C.SamplerConfig(n_workers=4)))
    assert not ok and "ignored" in issues[0]


@pytest.mark.parametrize("suffix", [".yaml", ".json"])
def test_save_and_load_roundtrip(tmp_path, suffix):
    cfg = C.get_preset_config("lattice")
    cfg.sampler.seed = 17
    p = C.save_config(cfg, tmp_path / "sub" / f"cfg{suffix}")
    assert p.exists()
    loaded = C.load_config(str(p))
    assert loaded.to_dict() == cfg.to_dict()


def test_load_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        C.load_config(str(tmp_path / "missing.yaml"))
    bad = tmp_path / "cfg.txt"
    bad.write_text("x")
    with pytest.raises(ValueError):
        C.load_config(str(bad))
    lst = tmp_path / "list.yaml"
    lst.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        C.load_config(str(lst))


def test_load_from_env():
    env = {
        "HOGWILD__sampler__beta": "0.35",
        "HOGWILD__graph__topology": "lattice",
        "HOGWILD__print_graph": "true",
        "OTHER__sampler__beta": "9",
    }
    out = C.load_from_env(environ=env)
    assert out == {"sampler": {"beta": 0.35}, "graph": {"topology": "lattice"}, "print_graph": True}


def test_layered_precedence(tmp_path):
    f = tmp_path / "cfg.yaml"
    f.write_text(yaml.safe_dump({"sampler": {"beta": 0.3, "n_iterations": 7}}))
    env = {"HOGWILD__sampler__beta": "0.4"}
    cfg = C.from_args(
        ["--preset", "quick", "--config", str(f), "--set", "sampler.n_iterations=9"],
        environ=env,
    )
    # 预设值在文件未覆盖的字段上保留
    assert cfg.graph.n_vertices == 100
    assert cfg.sampler.seed == 0
    assert cfg.sampler.beta == 0.4
    assert cfg.sampler.n_iterations == 9


def test_cli_overrides_parsing():
    out = C._parse_cli_overrides(["sampler.scan=hogwild", "graph.max_edges=None", "print_graph=yes"])
    assert out == {"sampler": {"scan": "hogwild"}, "graph": {"max_edges": None}, "print_graph": "yes"}
    with pytest.raises(ValueError):
        C._parse_cli_overrides(["sampler.beta"])


def test_json_file_merge(tmp_path):
    f = tmp_path / "cfg.json"
    f.write_text(json.dumps({"graph": {"topology": "lattice", "L": 6}}))
    cfg = C.from_args(["--config", str(f)], environ={})
    assert cfg.graph.num_vertices == 36
    assert cfg.sampler.beta == C.BETA


def test_shipped_config_files_load():
    root = Path(__file__).resolve().parents[1] / "configs"
    for p in sorted(root.glob("*.yaml")):
        cfg = C.load_config(str(p))
        ok, issues = C.validate_config(cfg)
        assert ok, (p.name, issues)


def test_quoted_booleans_in_files(tmp_path):
    f = tmp_path / "cfg.yaml"
    f.write_text('print_graph: "false"\nverbose: "True"\n')
    cfg = C.load_config(str(f))
    assert cfg.print_graph is False
    assert cfg.verbose is True
    with pytest.raises(ValueError):
        C.Config.from_dict({"print_graph": "maybe"})
    with pytest.raises(ValueError):
        C.Config.from_dict({"verbose": 1})
