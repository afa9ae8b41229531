# -*- coding: utf-8 -*-
"""
    Ising 图上的 Gibbs 采样更新（含 Hogwild 异步并行）

    对顶点 v，局部场 x_v = β·Σ_{u∈N(v)} s_u + prior，条件概率
P(s_v = +1 | 其余) = 1 / (1 + exp(-2 x_v))；抽一个 uniform u，u < P 时置 +1，否则置 -1。
所有更新原地写入共享的 int8 自旋数组。

支持的扫描方式：
    - ``systematic``: 按 0..n-1 顺序逐点更新
    - ``random``: 有放回地均匀抽取 n 个顶点依次更新
    - ``hogwild``: 顶点按连续区间切成 n_workers 份，每个线程用自己的随机流扫描自己的区间，
      线程间不做任何同步，读取邻居时可能看到其它线程尚未写完的旧值（Hogwild 假设）

实现功能：
    - Numba JIT 内核（``nogil=True``），线程池中真正并发执行
    - 随机性全部由显式 ``numpy.random.Generator`` 或整数种子控制；随机数在 wrapper 中预先抽取
    - n_workers=1 的 Hogwild sweep 与同种子的 systematic sweep 逐位一致
    - 统计 RNG 消耗量与翻转数，便于比较不同扫描方式的动力学
"""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import math
import os

import numpy as np
from numba import njit
from numpy.random import Generator, Philox, SeedSequence

from .graphs import Graph

__all__ = [
    "SweepInfo",
    "normalize_scan_name",
    "spawn_worker_seeds",
    "seed_to_generator",
    "default_n_workers",
    "random_spins",
    "validate_spins",
    "conditional_probability",
    "gibbs_sweep",
]

SCAN_MODES = ("systematic", "random", "hogwild")


# -----------------------
# 随机种子 / Generator 辅助
# -----------------------
def _seed32(seed: Optional[int]) -> int:
    if seed is None:
        raise ValueError("seed must be an integer (not None)")
    try:
        s = int(seed)
    except (TypeError, ValueError):
        raise ValueError(f"seed must be convertible to int, got {seed!r}")
    return s & 0xFFFFFFFF


def seed_to_generator(seed: int) -> np.random.Generator:
    """由整数种子构造 Philox 位生成器上的 Generator（种子截断为 32 位）。"""
    return Generator(Philox(_seed32(seed)))


def spawn_worker_seeds(master_seed: int, n_workers: int) -> List[int]:
    """
    用 SeedSequence.spawn 从主种子派生 n_workers 个 32 位子种子。
    同一主种子总是得到同一组子种子。
    """
    if master_seed is None:
        raise ValueError("master_seed must be provided")
    if int(n_workers) < 0:
        raise ValueError("n_workers must be non-negative")
    children = SeedSequence(int(master_seed) & 0xFFFFFFFFFFFFFFFF).spawn(int(n_workers))
    return [int(ch.generate_state(1)[0]) & 0xFFFFFFFF for ch in children]


def default_n_workers() -> int:
    return max(1, os.cpu_count() or 1)


# -----------------------
# 扫描方式名称规范化
# -----------------------
def normalize_scan_name(name: str) -> str:
    if name is None:
        raise ValueError("scan name must be provided")
    s = str(name).strip().lower().replace("-", "_").replace(" ", "_")
    if s in ("systematic", "sequential", "seq", "sys", "systematic_scan", "sweep"):
        return "systematic"
    if s in ("random", "random_scan", "rs", "rand"):
        return "random"
    if s in ("hogwild", "async", "asynchronous", "parallel", "hogwild_gibbs"):
        return "hogwild"
    return s


# -----------------------
# 自旋状态
# -----------------------
def random_spins(n: int, rng: np.random.Generator) -> np.ndarray:
    """均匀随机的 ±1 自旋（int8, C 连续）。"""
    n = int(n)
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return (rng.integers(0, 2, size=n, dtype=np.int8) * 2 - 1).astype(np.int8)


def validate_spins(spins: Any, n: Optional[int] = None) -> None:
    """检查自旋缓冲区：一维 int8、C 连续、取值仅 ±1、长度与顶点数一致。"""
    if not isinstance(spins, np.ndarray):
        raise ValueError("spins must be a numpy array")
    if spins.ndim != 1:
        raise ValueError(f"spins must be 1D, got shape {spins.shape}")
    if spins.dtype != np.int8:
        raise ValueError(f"spins must have dtype int8, got {spins.dtype}")
    if not spins.flags["C_CONTIGUOUS"]:
        raise ValueError("spins must be C contiguous")
    if n is not None and spins.size != int(n):
        raise ValueError(f"spins length {spins.size} != number of vertices {int(n)}")
    if spins.size and not np.all((spins == 1) | (spins == -1)):
        raise ValueError("spins must contain only +1/-1")


# -----------------------
# JIT 内核
# -----------------------
@njit(cache=True, nogil=True)
def _p_plus(x: float) -> float:
    # 1/(1+exp(-2x))，按符号分支避免 exp 溢出
    t = 2.0 * x
    if t >= 0.0:
        return 1.0 / (1.0 + math.exp(-t))
    e = math.exp(t)
    return e / (1.0 + e)


@njit(cache=True, nogil=True)
def _gibbs_update_jit(
    spins: np.ndarray,
    indptr: np.ndarray,
    indices: np.ndarray,
    order: np.ndarray,
    u: np.ndarray,
    beta: float,
    prior: float,
) -> int:
    """
    按 order 依次对顶点做 Gibbs 更新，原地写 spins；第 k 次更新使用 u[k]。
    返回翻转次数。
    """
    flips = 0
    for k in range(order.shape[0]):
        v = order[k]
        acc = 0
        for p in range(indptr[v], indptr[v + 1]):
            acc += spins[indices[p]]
        x = beta * acc + prior
        if u[k] < _p_plus(x):
            new = 1
        else:
            new = -1
        if spins[v] != new:
            spins[v] = new
            flips += 1
    return flips


def conditional_probability(local_sum: Any, beta: float, prior: float = 0.0) -> np.ndarray:
    """P(s=+1 | 邻居)，local_sum 为邻居自旋之和（支持数组）。"""
    x = 2.0 * (float(beta) * np.asarray(local_sum, dtype=float) + float(prior))
    # 0.5*(1+tanh(x/2)) 与 logistic 等价且不溢出
    return 0.5 * (1.0 + np.tanh(0.5 * x))


# -----------------------
# 单次 sweep
# -----------------------
@dataclass
class SweepInfo:
    scan: str
    updates: int = 0
    flips: int = 0
    rng_consumed: int = 0
    n_workers: int = 1
    rng_model: Optional[str] = None
    seed: Optional[int] = None
    worker_seeds: List[int] = field(default_factory=list)


def _rng_model(rng: np.random.Generator) -> str:
    return type(rng.bit_generator).__name__


def _resolve_worker_rngs(
    n_workers: int,
    rng: Optional[Generator],
    seed: Optional[int],
    worker_rngs: Optional[Sequence[Generator]],
    worker_seeds: Optional[Sequence[int]],
):
    """
    优先级：worker_rngs > worker_seeds > seed（spawn）> rng（抽取子种子）。
    单线程时直接使用 seed / rng 本身的随机流，与同源的 systematic sweep 一致。
    """
    if worker_rngs is None and worker_seeds is None and n_workers == 1:
        if seed is not None:
            worker_seeds = [_seed32(seed)]
        elif rng is not None:
            if not isinstance(rng, Generator):
                raise ValueError("rng must be a numpy.random.Generator if provided.")
            return [rng], []
    if worker_rngs is not None:
        gens = list(worker_rngs)
        if len(gens) != n_workers:
            raise ValueError(f"worker_rngs length ({len(gens)}) must equal n_workers ({n_workers})")
        for g in gens:
            if not isinstance(g, Generator):
                raise ValueError("worker_rngs must contain numpy.random.Generator objects")
        return gens, []
    if worker_seeds is None:
        if seed is not None:
            worker_seeds = spawn_worker_seeds(int(seed), n_workers)
        elif rng is not None:
            worker_seeds = [int(x) for x in rng.integers(0, 1 << 32, size=n_workers, dtype=np.uint64)]
        else:
            raise ValueError("Either 'rng', 'seed', 'worker_seeds' or 'worker_rngs' must be provided for hogwild scan.")
    seeds = [int(s) for s in worker_seeds]
    if len(seeds) != n_workers:
        raise ValueError(f"worker_seeds length ({len(seeds)}) must equal n_workers ({n_workers})")
    return [seed_to_generator(s) for s in seeds], seeds


def _hogwild_sweep(
    spins: np.ndarray,
    graph: Graph,
    beta: float,
    prior: float,
    gens: Sequence[Generator],
    executor: Optional[Executor],
) -> int:
    n = spins.size
    blocks = np.array_split(np.arange(n, dtype=np.int64), len(gens))
    # 每个 worker 的 uniform 在提交前抽取，线程内只跑 JIT 内核
    jobs = [(blk, g.random(blk.size)) for blk, g in zip(blocks, gens)]
    if executor is None:
        with ThreadPoolExecutor(max_workers=len(gens), thread_name_prefix="hogwild") as ex:
            return _hogwild_submit(ex, spins, graph, beta, prior, jobs)
    return _hogwild_submit(executor, spins, graph, beta, prior, jobs)


def _hogwild_submit(ex: Executor, spins, graph, beta, prior, jobs) -> int:
    futures = [
        ex.submit(_gibbs_update_jit, spins, graph.indptr, graph.indices, blk, u, beta, prior)
        for blk, u in jobs
    ]
    return int(sum(f.result() for f in futures))


def gibbs_sweep(
    spins: np.ndarray,
    graph: Graph,
    beta: float,
    prior: float = 0.0,
    *,
    scan: str = "systematic",
    rng: Optional[Generator] = None,
    seed: Optional[int] = None,
    n_workers: Optional[int] = None,
    worker_rngs: Optional[Sequence[Generator]] = None,
    worker_seeds: Optional[Sequence[int]] = None,
    executor: Optional[Executor] = None,
) -> SweepInfo:
    """
    对整张图做一次 sweep（n 次单点更新），原地修改 spins。

    参数：
      - spins: 一维 int8 ±1 数组（长度 = graph.n_vertices），原地更新
      - scan: 'systematic' | 'random' | 'hogwild'（同义词会归一化）
      - rng / seed: systematic/random 的随机源，rng 优先
      - n_workers: Hogwild 线程数（默认 CPU 核数，且不超过顶点数）
      - worker_rngs / worker_seeds: Hogwild 每个线程的随机流；未给出时由 seed 派生，再退而由 rng 抽取
      - executor: 复用的线程池；未给出时临时创建

    返回 SweepInfo。
    """
    validate_spins(spins, graph.n_vertices)
    name = normalize_scan_name(scan)
    if name not in SCAN_MODES:
        raise ValueError(f"Unknown scan: {scan} (normalized -> '{name}'). Known scans: {list(SCAN_MODES)}")
    beta = float(beta)
    prior = float(prior)
    if not (math.isfinite(beta) and math.isfinite(prior)):
        raise ValueError("beta and prior must be finite")
    n = graph.n_vertices

    if name == "hogwild":
        if n_workers is None:
            n_workers = len(worker_rngs) if worker_rngs is not None else (
                len(worker_seeds) if worker_seeds is not None else default_n_workers()
            )
        n_workers = int(n_workers)
        if n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {n_workers}")
        if worker_rngs is None and worker_seeds is None:
            n_workers = min(n_workers, max(1, n))
        gens, seeds = _resolve_worker_rngs(n_workers, rng, seed, worker_rngs, worker_seeds)
        flips = _hogwild_sweep(spins, graph, beta, prior, gens, executor) if n else 0
        return SweepInfo(
            scan=name,
            updates=n,
            flips=flips,
            rng_consumed=n,
            n_workers=len(gens),
            rng_model=_rng_model(gens[0]) if gens else None,
            seed=None if seed is None else int(seed),
            worker_seeds=seeds,
        )

    used_seed: Optional[int] = None
    if rng is not None:
        if not isinstance(rng, Generator):
            raise ValueError("rng must be a numpy.random.Generator if provided.")
        used_rng = rng
    else:
        if seed is None:
            raise ValueError("Either 'rng' (Generator) or 'seed' (int) must be provided for deterministic RNG.")
        used_seed = int(seed)
        used_rng = seed_to_generator(used_seed)

    consumed = n
    if name == "random":
        order = used_rng.integers(0, max(1, n), size=n, dtype=np.int64)
        consumed += n
    else:
        order = np.arange(n, dtype=np.int64)
    u = used_rng.random(n)
    flips = int(_gibbs_update_jit(spins, graph.indptr, graph.indices, order, u, beta, prior)) if n else 0
    return SweepInfo(
        scan=name,
        updates=n,
        flips=flips,
        rng_consumed=consumed,
        n_workers=1,
        rng_model=_rng_model(used_rng),
        seed=used_seed,
    )
