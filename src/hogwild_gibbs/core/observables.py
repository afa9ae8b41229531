# -*- coding: utf-8 -*-
"""
    图上 Ising 构型的物理量计算

约定（与 gibbs 模块的条件概率一致）：
    π(s) ∝ exp(β·Σ_{(u,v)∈E} s_u s_v + prior·Σ_v s_v)

    - ``E``: 每顶点键能 -Σ_{E} s_u s_v / n（重边按重数计入）
    - ``M`` / ``absM`` / ``M2``: 每顶点磁化强度、其绝对值与平方
    - ``log_weight``: 未归一化对数概率 β·Σ_E s_u s_v + prior·Σ s
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from .graphs import Graph

__all__ = ["local_fields", "bond_sum", "magnetization", "calculate_observables"]


def local_fields(spins: Any, graph: Graph) -> np.ndarray:
    """每个顶点的邻居自旋之和（int64）。"""
    s = np.asarray(spins, dtype=np.int64)
    n = graph.n_vertices
    if s.shape != (n,):
        raise ValueError(f"spins shape {s.shape} does not match graph with {n} vertices")
    if n == 0:
        return np.zeros(0, dtype=np.int64)
    rows = np.repeat(np.arange(n, dtype=np.int64), graph.degrees())
    out = np.bincount(rows, weights=s[graph.indices], minlength=n)
    return np.rint(out).astype(np.int64)


def bond_sum(spins: Any, graph: Graph) -> int:
    """Σ_{(u,v)∈E} s_u s_v，每条无向边只计一次。"""
    s = np.asarray(spins, dtype=np.int64)
    # 邻接表中每条边出现两次
    return int(np.dot(s, local_fields(s, graph))) // 2


def magnetization(spins: Any) -> float:
    s = np.asarray(spins, dtype=np.int64)
    if s.size == 0:
        raise ValueError("spins must be non-empty")
    return float(s.sum()) / float(s.size)


def calculate_observables(spins: Any, graph: Graph, beta: float = 0.0, prior: float = 0.0) -> Dict[str, float]:
    s = np.asarray(spins, dtype=np.int64)
    n = graph.n_vertices
    if n == 0:
        raise ValueError("observables are undefined for an empty graph")
    b = bond_sum(s, graph)
    m_tot = int(s.sum())
    m = m_tot / float(n)
    return {
        "E": -float(b) / float(n),
        "M": float(m),
        "absM": float(abs(m)),
        "M2": float(m * m),
        "log_weight": float(beta) * float(b) + float(prior) * float(m_tot),
    }
