# -*- coding: utf-8 -*-
"""
    合成 Ising 模型图：随机有界度图与二维方格

    本模块构造 Gibbs 采样所用的固定拓扑图。所有图统一存放为 CSR 邻接结构
（``indptr`` / ``indices``），顶点编号为 ``0..n-1``，每个顶点的邻居按边插入顺序排列。

实现功能：
    - ``random_bounded_degree_graph``: 随机抽取顶点对并插入边，保证每个顶点度数不超过 ``max_degree``；
      连续失败次数超限、边数达到上限、或剩余可连顶点不足两个时停止
    - ``lattice_graph``: L×L 方格（四邻），支持周期 (pbc) 与开放 (open) 边界
    - 图统计（最小/最大/平均度）与文本输出
    - ``validate_graph``: 邻接结构一致性检查（对称、无自环、度约束）

注意：
    随机图允许重边（同一对顶点可多次被选中），每条重边在耦合中按重数计入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import logging

import numpy as np
from numba import njit

logger = logging.getLogger(__name__)

__all__ = [
    "Graph",
    "graph_from_edges",
    "random_bounded_degree_graph",
    "lattice_graph",
    "graph_statistics",
    "format_graph_statistics",
    "format_graph",
    "validate_graph",
]

# 每批抽取的候选顶点对数量
_PAIR_CHUNK = 1 << 16

# 随机图构造的停止原因
STOP_MAX_EDGES = "max_edges"
STOP_MAX_TRIES = "max_insertion_tries"
STOP_SATURATED = "saturated"
STOP_EMPTY = "empty"

_STATUS_TO_REASON = {1: STOP_MAX_EDGES, 2: STOP_MAX_TRIES, 3: STOP_SATURATED}


# -----------------------
# 数据结构
# -----------------------
@dataclass(frozen=True)
class Graph:
    """
    CSR 邻接结构。顶点 v 的邻居为 ``indices[indptr[v]:indptr[v+1]]``。
    无向边在两端各存一次，因此 ``indices.size == 2 * n_edges``。
    """
    indptr: np.ndarray
    indices: np.ndarray
    meta: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def n_vertices(self) -> int:
        return int(self.indptr.size - 1)

    @property
    def n_edges(self) -> int:
        return int(self.indices.size // 2)

    def degrees(self) -> np.ndarray:
        return np.diff(self.indptr)

    @property
    def max_degree(self) -> int:
        if self.n_vertices == 0:
            return 0
        return int(self.degrees().max())

    def neighbors(self, v: int) -> np.ndarray:
        v = int(v)
        if not (0 <= v < self.n_vertices):
            raise IndexError(f"vertex {v} out of range [0, {self.n_vertices})")
        return self.indices[self.indptr[v]:self.indptr[v + 1]]

    def to_adjacency(self) -> Dict[int, List[int]]:
        return {v: [int(u) for u in self.neighbors(v)] for v in range(self.n_vertices)}


def _freeze(a: np.ndarray) -> np.ndarray:
    a = np.ascontiguousarray(a, dtype=np.int64)
    a.setflags(write=False)
    return a


def graph_from_edges(
    n: int,
    edges: Iterable[Tuple[int, int]],
    meta: Optional[Dict[str, Any]] = None,
) -> Graph:
    """
    由无向边列表构造 CSR 图。每个顶点的邻居顺序与边在列表中的出现顺序一致。
    """
    n = int(n)
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    e = np.asarray(list(edges), dtype=np.int64).reshape(-1, 2)
    if e.size and (e.min() < 0 or e.max() >= n):
        raise ValueError(f"edge endpoint out of range [0, {n})")
    if np.any(e[:, 0] == e[:, 1]):
        raise ValueError("self loops are not allowed")

    # 每条边展开成两条有向边，按源点稳定排序以保留插入顺序
    src = e.ravel()
    dst = e[:, ::-1].ravel()
    order = np.argsort(src, kind="stable")
    counts = np.bincount(src, minlength=n) if n > 0 else np.zeros(0, dtype=np.int64)
    indptr = np.zeros(n + 1, dtype=np.int64)
    np.cumsum(counts, out=indptr[1:])
    return Graph(indptr=_freeze(indptr), indices=_freeze(dst[order]), meta=dict(meta or {}))


# -----------------------
# JIT 内核：有界度随机插边
# -----------------------
@njit(cache=True)
def _insert_edges_jit(
    pairs: np.ndarray,
    degree: np.ndarray,
    edge_u: np.ndarray,
    edge_v: np.ndarray,
    n_edges: int,
    max_edges: int,
    max_degree: int,
    tries: int,
    max_tries: int,
    n_open: int,
) -> Tuple[int, int, int, int, int]:
    """
    依次检查候选顶点对，合法则插边。
    返回 (n_edges, tries, n_open, consumed_pairs, status)，
    status: 0 本批用完，1 边数达到上限，2 连续失败超限，3 可连顶点不足两个。
    """
    for k in range(pairs.shape[0]):
        a = pairs[k, 0]
        b = pairs[k, 1]
        if a != b and degree[a] < max_degree and degree[b] < max_degree:
            edge_u[n_edges] = a
            edge_v[n_edges] = b
            n_edges += 1
            degree[a] += 1
            degree[b] += 1
            if degree[a] == max_degree:
                n_open -= 1
            if degree[b] == max_degree:
                n_open -= 1
            tries = 0
            if n_edges >= max_edges:
                return n_edges, tries, n_open, k + 1, 1
            if n_open < 2:
                return n_edges, tries, n_open, k + 1, 3
        else:
            tries += 1
            if tries > max_tries:
                return n_edges, tries, n_open, k + 1, 2
    return n_edges, tries, n_open, pairs.shape[0], 0


def random_bounded_degree_graph(
    n: int,
    max_degree: int,
    rng: np.random.Generator,
    max_edges: Optional[int] = None,
    max_insertion_tries: Optional[int] = None,
) -> Graph:
    """
    随机有界度图。

    每次均匀抽取一对顶点 (a, b)；当 a != b 且两端度数均小于 ``max_degree`` 时插入无向边，
    否则重新抽取。以下任一条件满足即停止：
      - 已插入 ``max_edges`` 条边（默认 n*n）
      - 连续 ``max_insertion_tries`` 次候选不合法（默认 n*n）
      - 度数未满的顶点少于两个（此时不存在合法顶点对）

    返回的 Graph.meta 记录 ``stop_reason`` 与 ``rng_consumed``（单位：整数抽样次数）。
    """
    n = int(n)
    max_degree = int(max_degree)
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if max_degree < 0:
        raise ValueError(f"max_degree must be non-negative, got {max_degree}")
    if not isinstance(rng, np.random.Generator):
        raise ValueError("rng must be a numpy.random.Generator")
    max_edges = n * n if max_edges is None else int(max_edges)
    max_tries = n * n if max_insertion_tries is None else int(max_insertion_tries)
    if max_edges < 0 or max_tries < 0:
        raise ValueError("max_edges and max_insertion_tries must be non-negative")

    meta: Dict[str, Any] = {
        "topology": "random",
        "max_degree": max_degree,
        "max_edges": max_edges,
        "max_insertion_tries": max_tries,
    }
    if n < 2 or max_degree == 0 or max_edges == 0:
        meta.update(stop_reason=STOP_EMPTY, rng_consumed=0)
        return graph_from_edges(n, [], meta=meta)

    # 边数不可能超过 n*max_degree/2
    capacity = min(max_edges, (n * max_degree) // 2)
    degree = np.zeros(n, dtype=np.int64)
    edge_u = np.empty(capacity, dtype=np.int64)
    edge_v = np.empty(capacity, dtype=np.int64)

    n_edges, tries, n_open = 0, 0, n
    consumed = 0
    status = 0
    while status == 0:
        pairs = rng.integers(0, n, size=(_PAIR_CHUNK, 2), dtype=np.int64)
        n_edges, tries, n_open, used, status = _insert_edges_jit(
            pairs, degree, edge_u, edge_v, n_edges, max_edges, max_degree, tries, max_tries, n_open
        )
        consumed += 2 * int(used)

    reason = _STATUS_TO_REASON[int(status)]
    logger.debug("random graph: n=%d edges=%d stop=%s draws=%d", n, n_edges, reason, consumed)
    meta.update(stop_reason=reason, rng_consumed=consumed)
    edges = np.stack([edge_u[:n_edges], edge_v[:n_edges]], axis=1)
    return graph_from_edges(n, edges, meta=meta)


def lattice_graph(L: int, periodic: bool = True) -> Graph:
    """
    L×L 二维方格，顶点 ``i*L + j``；邻居顺序为 上、下、左、右。
    开放边界下缺失的邻居直接省略。周期边界要求 L >= 2（L=2 时会出现重边）。
    """
    L = int(L)
    if L < 1:
        raise ValueError(f"L must be a positive integer, got {L}")
    if periodic and L < 2:
        raise ValueError("periodic lattice requires L >= 2 (L=1 would create self loops)")
    N = L * L
    idx = np.arange(N, dtype=np.int64).reshape(L, L)
    cand = np.stack(
        [
            np.roll(idx, 1, axis=0),   # up
            np.roll(idx, -1, axis=0),  # down
            np.roll(idx, 1, axis=1),   # left
            np.roll(idx, -1, axis=1),  # right
        ],
        axis=-1,
    ).reshape(N, 4)
    meta = {"topology": "lattice", "L": L, "boundary": "pbc" if periodic else "open"}
    if periodic:
        indptr = np.arange(0, 4 * N + 1, 4, dtype=np.int64)
        return Graph(indptr=_freeze(indptr), indices=_freeze(cand.ravel()), meta=meta)

    ii, jj = np.divmod(np.arange(N, dtype=np.int64), L)
    valid = np.stack([ii > 0, ii < L - 1, jj > 0, jj < L - 1], axis=-1)
    indptr = np.zeros(N + 1, dtype=np.int64)
    np.cumsum(valid.sum(axis=1), out=indptr[1:])
    return Graph(indptr=_freeze(indptr), indices=_freeze(cand[valid]), meta=meta)


# -----------------------
# 统计与输出
# -----------------------
def graph_statistics(graph: Graph) -> Dict[str, float]:
    """最小/最大/平均度（float）。空图没有定义。"""
    if graph.n_vertices == 0:
        raise ValueError("graph statistics are undefined for an empty graph")
    deg = graph.degrees()
    return {
        "n_vertices": float(graph.n_vertices),
        "n_edges": float(graph.n_edges),
        "min_degree": float(deg.min()),
        "max_degree": float(deg.max()),
        "avg_degree": float(deg.mean()),
    }


def format_graph_statistics(stats: Dict[str, float]) -> str:
    return "\n".join(
        [
            "Graph statistics:",
            f"Min Degree: {stats['min_degree']:.6f}",
            f"Max Degree: {stats['max_degree']:.6f}",
            f"Avg Degree: {stats['avg_degree']:.6f}",
        ]
    )


def format_graph(graph: Graph) -> str:
    """每个顶点一行：``v: a, b, c``。"""
    lines = []
    for v in range(graph.n_vertices):
        nb = ", ".join(str(int(u)) for u in graph.neighbors(v))
        lines.append(f"{v}: {nb}")
    return "\n".join(lines)


# -----------------------
# 一致性检查
# -----------------------
def validate_graph(graph: Graph, max_degree: Optional[int] = None) -> None:
    """
    检查 CSR 结构是否良构；发现问题时抛出 ValueError。
      - indptr 从 0 开始、单调不减、末项等于 indices 长度
      - 顶点编号在 [0, n) 内，无自环
      - 邻接对称（含重数）
      - 可选：度数不超过 max_degree
    """
    indptr = np.asarray(graph.indptr)
    indices = np.asarray(graph.indices)
    if indptr.ndim != 1 or indptr.size < 1:
        raise ValueError("indptr must be a 1D array with at least one entry")
    if indices.ndim != 1:
        raise ValueError("indices must be a 1D array")
    if indptr[0] != 0 or indptr[-1] != indices.size:
        raise ValueError("indptr must start at 0 and end at len(indices)")
    deg = np.diff(indptr)
    if np.any(deg < 0):
        raise ValueError("indptr must be non-decreasing")
    n = indptr.size - 1
    if indices.size == 0:
        return
    if indices.min() < 0 or indices.max() >= n:
        raise ValueError(f"neighbor index out of range [0, {n})")
    src = np.repeat(np.arange(n, dtype=np.int64), deg)
    if np.any(src == indices):
        raise ValueError("graph contains self loops")
    fwd = np.sort(src * n + indices)
    bwd = np.sort(indices * n + src)
    if not np.array_equal(fwd, bwd):
        raise ValueError("adjacency is not symmetric")
    if max_degree is not None and int(deg.max()) > int(max_degree):
        raise ValueError(f"degree bound exceeded: max degree {int(deg.max())} > {int(max_degree)}")
