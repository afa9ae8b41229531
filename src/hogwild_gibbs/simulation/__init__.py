# -*- coding: utf-8 -*-
"""
模拟层
======

- sampler: GibbsSampler（sweep 循环、轨迹记录、诊断）
- experiment: 由 Config 驱动的完整实验（生成图 → 初始化 → 采样）
"""

# hogwild_gibbs/simulation/__init__.py
from importlib import import_module
from typing import TYPE_CHECKING

__all__ = ["sampler", "experiment"]

_lazy = {
    "sampler": ".sampler",
    "experiment": ".experiment",
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
    from . import sampler, experiment
