# -*- coding: utf-8 -*-
"""
实验配置（预设、分层覆盖、一致性检查）

默认值即参考实验的常量：
    N = 1000, DELTA = 3, BETA = 0.2, PRIOR_WEIGHTS = 0,
    MAX_EDGES = MAX_EDGE_INSERTION_TRIES = N*N（None 表示按 N*N 计算）

实现功能：
    - 扫描方式名称归一化（'sequential' → 'systematic'，'async' → 'hogwild' 等）
    - 硬性约束在 __post_init__ 中检查并抛 ValueError：
         拓扑仅 random / lattice；周期方格要求 L >= 2
         beta / prior_weight 必须有限；n_iterations、record_interval 合法
    - validate_config() 返回软性问题列表（不抛错）
    - YAML/JSON 读写、环境变量覆盖、--set 命令行覆盖
      优先级：默认/预设 < 文件 < 环境变量 < CLI --set
"""

from __future__ import annotations

import argparse
import ast
import copy
import json
import logging
import math
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..core.gibbs import SCAN_MODES, normalize_scan_name

logger = logging.getLogger(__name__)

__all__ = [
    'N', 'DELTA', 'BETA', 'PRIOR_WEIGHTS',
    'Config', 'GraphConfig', 'SamplerConfig',
    'load_config', 'save_config', 'get_preset_config', 'PRESETS',
    'load_from_env', 'merge_configs', 'validate_config',
    'add_config_arguments', 'config_from_namespace', 'from_args',
]

# 参考实验常量
N = 1000
DELTA = 3
BETA = 0.2
PRIOR_WEIGHTS = 0.0

_TOPOLOGIES = ('random', 'lattice')
_BOUNDARIES = ('pbc', 'open')
PRESETS = ('paper', 'lattice', 'hogwild', 'quick')


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _deep_merge(d1: Dict[str, Any], d2: Dict[str, Any]) -> Dict[str, Any]:
    """将 d2 深度合并到 d1（原地修改 d1 并返回它）。"""
    for k, v in (d2 or {}).items():
        if k in d1 and isinstance(d1[k], dict) and isinstance(v, dict):
            _deep_merge(d1[k], v)
        else:
            d1[k] = v
    return d1


def _set_by_path(d: Dict[str, Any], path: List[str], value: Any):
    cur = d
    for key in path[:-1]:
        if key not in cur or not isinstance(cur[key], dict):
            cur[key] = {}
        cur = cur[key]
    cur[path[-1]] = value


def _parse_value(s: str):
    """字符串 → Python 值（literal_eval 优先，兼容 true/false/none）。"""
    try:
        return ast.literal_eval(s)
    except (ValueError, SyntaxError):
        sl = s.strip().lower()
        if sl == 'true':
            return True
        if sl == 'false':
            return False
        if sl in ('none', 'null'):
            return None
        return s.strip()


def _normalize_boundary(b: str) -> str:
    s = str(b).strip().lower()
    if s in ('pbc', 'periodic', 'periodic_bc', 'torus'):
        return 'pbc'
    if s in ('open', 'obc', 'free'):
        return 'open'
    return s


def _check_int(name: str, v: Any, minimum: int, allow_none: bool = False):
    if v is None and allow_none:
        return
    if isinstance(v, bool) or not isinstance(v, int) or v < minimum:
        raise ValueError(f"{name} must be an integer >= {minimum} (got {v!r})")


def _check_bool(name: str, v: Any) -> bool:
    """接受 bool 或 'true'/'false' 字符串（文件中加了引号的情况）。"""
    if isinstance(v, str):
        v = _parse_value(v)
    if not isinstance(v, bool):
        raise ValueError(f"{name} must be a boolean (got {v!r})")
    return v


# -----------------------------------------------------------------------------
# Dataclasses
# -----------------------------------------------------------------------------
@dataclass
class GraphConfig:
    topology: str = 'random'          # 'random' | 'lattice'

    # 随机有界度图
    n_vertices: int = N
    max_degree: int = DELTA
    max_edges: Optional[int] = None            # None → n_vertices**2
    max_insertion_tries: Optional[int] = None  # None → n_vertices**2

    # 二维方格
    L: int = 32
    boundary: str = 'pbc'             # 'pbc' | 'open'

    def __post_init__(self):
        self.topology = str(self.topology).strip().lower()
        if self.topology not in _TOPOLOGIES:
            raise ValueError(f"topology must be one of {_TOPOLOGIES}, got {self.topology!r}")
        _check_int('n_vertices', self.n_vertices, 1)
        _check_int('max_degree', self.max_degree, 0)
        _check_int('max_edges', self.max_edges, 0, allow_none=True)
        _check_int('max_insertion_tries', self.max_insertion_tries, 0, allow_none=True)
        _check_int('L', self.L, 1)
        self.boundary = _normalize_boundary(self.boundary)
        if self.boundary not in _BOUNDARIES:
            raise ValueError(f"boundary must be one of {_BOUNDARIES}, got {self.boundary!r}")
        if self.topology == 'lattice' and self.boundary == 'pbc' and self.L < 2:
            raise ValueError("periodic lattice requires L >= 2")

    @property
    def num_vertices(self) -> int:
        """实际顶点数（方格为 L*L）。"""
        return self.L * self.L if self.topology == 'lattice' else self.n_vertices


@dataclass
class SamplerConfig:
    beta: float = BETA
    prior_weight: float = PRIOR_WEIGHTS
    scan: str = 'systematic'          # 'systematic' | 'random' | 'hogwild'（同义词会归一化）
    n_workers: Optional[int] = None   # Hogwild 线程数；None → CPU 核数
    n_iterations: int = 100
    record_interval: int = 1
    seed: Optional[int] = None

    def __post_init__(self):
        try:
            self.beta = float(self.beta)
            self.prior_weight = float(self.prior_weight)
        except (TypeError, ValueError):
            raise ValueError("beta and prior_weight must be numeric")
        if not (math.isfinite(self.beta) and math.isfinite(self.prior_weight)):
            raise ValueError("beta and prior_weight must be finite")
        self.scan = normalize_scan_name(self.scan)
        if self.scan not in SCAN_MODES:
            raise ValueError(f"Unknown scan: {self.scan!r}. Use one of {SCAN_MODES} (synonyms accepted).")
        _check_int('n_workers', self.n_workers, 1, allow_none=True)
        _check_int('n_iterations', self.n_iterations, 0)
        _check_int('record_interval', self.record_interval, 1)
        _check_int('seed', self.seed, 0, allow_none=True)


@dataclass
class Config:
    graph: GraphConfig = field(default_factory=GraphConfig)
    sampler: SamplerConfig = field(default_factory=SamplerConfig)

    print_graph: bool = False
    verbose: bool = True
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'graph': asdict(self.graph),
            'sampler': asdict(self.sampler),
            'print_graph': self.print_graph,
            'verbose': self.verbose,
            'version': self.version,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Config':
        d = d or {}
        unknown = set(d) - {'graph', 'sampler', 'print_graph', 'verbose', 'version'}
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        try:
            graph = GraphConfig(**(d.get('graph') or {}))
            sampler = SamplerConfig(**(d.get('sampler') or {}))
        except TypeError as exc:
            # 未知字段
            raise ValueError(f"Invalid config section: {exc}") from exc
        return cls(
            graph=graph,
            sampler=sampler,
            print_graph=_check_bool('print_graph', d.get('print_graph', False)),
            verbose=_check_bool('verbose', d.get('verbose', True)),
            version=int(d.get('version', 1)),
        )


# -----------------------------------------------------------------------------
# I/O
# -----------------------------------------------------------------------------
def load_config(filepath: str) -> Config:
    """从 YAML 或 JSON 文件加载配置。"""
    return Config.from_dict(_read_config_file(filepath))


def _read_config_file(filepath: str) -> Dict[str, Any]:
    p = Path(filepath)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")
    suf = p.suffix.lower()
    with open(p, 'r', encoding='utf-8') as f:
        if suf in ('.yaml', '.yml'):
            cfg = yaml.safe_load(f) or {}
        elif suf == '.json':
            cfg = json.load(f) or {}
        else:
            raise ValueError(f"Unsupported config file extension: {suf}")
    if not isinstance(cfg, dict):
        raise ValueError(f"Config file {filepath} must contain a mapping at top level")
    return cfg


def save_config(config: Config, filepath: str, format: Optional[str] = None) -> Path:
    """将 Config 保存为 YAML 或 JSON；默认根据后缀判断格式。"""
    p = Path(filepath)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    fmt = format
    if fmt is None:
        fmt = 'json' if p.suffix.lower() == '.json' else 'yaml'
    with open(p, 'w', encoding='utf-8') as f:
        if fmt == 'yaml':
            yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        elif fmt == 'json':
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            raise ValueError(f"Unsupported format: {fmt}")
    logger.info("Config saved: %s", p)
    return p


# -----------------------------------------------------------------------------
# Presets
# -----------------------------------------------------------------------------
def get_preset_config(name: str) -> Config:
    """返回内置预设配置的副本（deepcopy）。"""
    presets: Dict[str, Config] = {
        # 参考实验：N=1000, Δ=3, β=0.2 的随机图，顺序扫描
        'paper': Config(),
        # 二维周期方格
        'lattice': Config(
            graph=GraphConfig(topology='lattice', L=32, boundary='pbc'),
            sampler=SamplerConfig(beta=0.2, n_iterations=200),
        ),
        # 参考随机图上的 Hogwild 异步扫描
        'hogwild': Config(
            sampler=SamplerConfig(scan='hogwild', n_iterations=200),
        ),
        'quick': Config(
            graph=GraphConfig(n_vertices=100, max_degree=3),
            sampler=SamplerConfig(n_iterations=20, seed=0),
        ),
    }
    if name not in presets:
        raise ValueError(f"Unknown preset: {name}. Available: {list(presets.keys())}")
    return copy.deepcopy(presets[name])


# -----------------------------------------------------------------------------
# Environment variables (nested via sep, e.g., HOGWILD__sampler__beta=0.3)
# -----------------------------------------------------------------------------
def load_from_env(prefix: str = 'HOGWILD', sep: str = '__', environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    从环境变量读取以 prefix 开头、用 sep 分层的键，返回嵌套 dict。
    例： HOGWILD__graph__n_vertices=500  → {'graph': {'n_vertices': 500}}
    """
    env = os.environ if environ is None else environ
    out: Dict[str, Any] = {}
    pfx = prefix + sep
    for k, v in env.items():
        if not k.startswith(pfx):
            continue
        parts = [p for p in k[len(pfx):].split(sep) if p]
        if parts:
            _set_by_path(out, parts, _parse_value(v))
    return out


# -----------------------------------------------------------------------------
# Merge & validate
# -----------------------------------------------------------------------------
def merge_configs(base: Config, override: Dict[str, Any]) -> Config:
    """将 override（nested dict）深度合并到 base 的字典表示上，返回新的 Config。"""
    base_dict = base.to_dict()
    _deep_merge(base_dict, override or {})
    return Config.from_dict(base_dict)


def validate_config(cfg: Config) -> Tuple[bool, List[str]]:
    """跨块一致性检查（仅返回 issues，不抛错；硬约束已在 __post_init__ 完成）。"""
    issues: List[str] = []
    g, s = cfg.graph, cfg.sampler

    if s.scan != 'hogwild' and s.n_workers not in (None, 1):
        issues.append(f"sampler.n_workers={s.n_workers} is ignored unless sampler.scan='hogwild'")
    if s.scan == 'hogwild' and s.n_workers is not None and s.n_workers > g.num_vertices:
        issues.append(f"sampler.n_workers ({s.n_workers}) > number of vertices ({g.num_vertices}); "
                      "extra workers will sample nothing")
    if g.topology == 'random' and g.max_degree == 0:
        issues.append("graph.max_degree=0 produces an edgeless graph")
    if s.record_interval > max(1, s.n_iterations):
        issues.append("sampler.record_interval > sampler.n_iterations: no samples will be recorded")
    if s.beta < 0:
        issues.append(f"sampler.beta={s.beta} < 0 (anti-ferromagnetic couplings)")
    return len(issues) == 0, issues


# -----------------------------------------------------------------------------
# CLI helpers
# -----------------------------------------------------------------------------
def _parse_cli_overrides(kv_list: List[str]) -> Dict[str, Any]:
    """解析 --set key=value（点分路径）列表。例：--set sampler.beta=0.3"""
    out: Dict[str, Any] = {}
    for kv in (kv_list or []):
        if '=' not in kv:
            raise ValueError(f"--set expects key=value pairs, got: {kv}")
        key, val = kv.split('=', 1)
        path = [p.strip() for p in key.split('.') if p.strip()]
        if path:
            _set_by_path(out, path, _parse_value(val))
    return out


def add_config_arguments(ap: argparse.ArgumentParser, env_prefix: str = 'HOGWILD') -> argparse.ArgumentParser:
    ap.add_argument('--preset', type=str, choices=list(PRESETS), help='preset name')
    ap.add_argument('--config', type=str, help='config file (yaml|json)')
    ap.add_argument('--env-prefix', type=str, default=env_prefix,
                    help=f'environment variable prefix (default {env_prefix})')
    ap.add_argument('--set', dest='sets', action='append', default=[],
                    help='override key=value (dot notation, can repeat)')
    return ap


def config_from_namespace(ns: argparse.Namespace, environ: Optional[Dict[str, str]] = None) -> Config:
    """按 默认/预设 <- 文件 <- 环境变量 <- --set 的顺序合并，并记录软性问题。"""
    cfg = get_preset_config(ns.preset) if ns.preset else Config()
    if ns.config:
        # 只合并文件中实际出现的键，文件里没写的字段保留预设值
        cfg = merge_configs(cfg, _read_config_file(ns.config))
    env_over = load_from_env(prefix=ns.env_prefix, environ=environ)
    if env_over:
        cfg = merge_configs(cfg, env_over)
    cli_over = _parse_cli_overrides(ns.sets)
    if cli_over:
        cfg = merge_configs(cfg, cli_over)

    ok, issues = validate_config(cfg)
    if not ok:
        for it in issues:
            logger.warning("config: %s", it)
    return cfg


def from_args(args: Optional[List[str]] = None, env_prefix: str = 'HOGWILD',
              environ: Optional[Dict[str, str]] = None) -> Config:
    """
    从命令行加载并合并配置。支持参数：
      --preset NAME | --config FILE | --env-prefix PREFIX | --set k=v（可重复）
    """
    ap = add_config_arguments(argparse.ArgumentParser(description="Load & merge configuration"), env_prefix)
    return config_from_namespace(ap.parse_args(args=args), environ=environ)
