# -*- coding: utf-8 -*-
"""
Hogwild Gibbs Sampling on Synthetic Ising Graphs
================================================

在合成 Ising 模型图上做 Gibbs 采样的小型实验工具包，参考
De Sa, Olukotun & Ré, arXiv:1602.07415（异步 Gibbs 采样的混合与偏差）。

主要功能
--------
- 随机有界度图（N=1000, Δ=3）与二维方格
- logistic 条件更新：顺序扫描 / 随机扫描 / Hogwild 异步多线程扫描
- 观测量轨迹与自相关诊断（τ_int / ESS）

快速开始
--------
>>> from hogwild_gibbs.core.graphs import random_bounded_degree_graph
>>> from hogwild_gibbs.core.gibbs import seed_to_generator
>>> from hogwild_gibbs.simulation.sampler import GibbsSampler
>>> g = random_bounded_degree_graph(1000, 3, seed_to_generator(0))
>>> sampler = GibbsSampler(g, beta=0.2, scan="hogwild", n_workers=4, seed=42)
>>> results = sampler.run(200)
>>> sampler.analyze()["M"]["tau_int"]

模块组织
--------
- core: 图、Gibbs 更新内核与观测量
- simulation: 采样器与实验流程
- analysis: 自相关统计
- utils: 日志与配置工具
"""

# hogwild_gibbs/__init__.py
from importlib import import_module
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from typing import TYPE_CHECKING

try:
    __version__ = _pkg_version("hogwild-gibbs")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "core",
    "simulation",
    "analysis",
    "utils",
    "__version__",
]

_lazy_subpackages = {
    "core": ".core",
    "simulation": ".simulation",
    "analysis": ".analysis",
    "utils": ".utils",
}

def __getattr__(name: str):
    if name in _lazy_subpackages:
        mod = import_module(_lazy_subpackages[name], __name__)
        globals()[name] = mod  # cache
        return mod
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

def __dir__():
    return sorted(list(__all__))

if TYPE_CHECKING:  # for IDE/static type checkers only
    from . import core, simulation, analysis, utils
