# -*- coding: utf-8 -*-
"""
核心模块
========

子模块
------
- graphs: 随机有界度图 / 二维方格（CSR 邻接）
- gibbs: logistic 条件更新与三种扫描方式（含 Hogwild）
- observables: 磁化强度、键能、对数权重

示例
----
>>> from hogwild_gibbs.core import graphs, gibbs
>>> g = graphs.lattice_graph(16)
>>> s = gibbs.random_spins(g.n_vertices, gibbs.seed_to_generator(1))
>>> info = gibbs.gibbs_sweep(s, g, beta=0.44, seed=7)
"""


# hogwild_gibbs/core/__init__.py
from importlib import import_module
from typing import TYPE_CHECKING

__all__ = ["graphs", "gibbs", "observables"]

_lazy = {
    "graphs": ".graphs",
    "gibbs": ".gibbs",
    "observables": ".observables",
}

def __getattr__(name: str):
    if name in _lazy:
        mod = import_module(_lazy[name], __name__)
        globals()[name] = mod
        return mod
    raise AttributeError(f"{__name__} has no attribute {name!r}")

def __dir__():
    return sorted(list(__all__))

if TYPE_CHECKING:
    from . import graphs, gibbs, observables
