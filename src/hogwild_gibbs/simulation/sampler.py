# -*- coding: utf-8 -*-
"""
    图上 Ising 模型的 Gibbs 采样器

    `GibbsSampler` 持有一张固定拓扑的图与一份共享自旋缓冲区，反复调用
`core.gibbs.gibbs_sweep` 做 sweep，并按 record_interval 记录观测量轨迹。

实现功能:
    - 三种扫描方式：systematic / random / hogwild（线程池复用，线程间不同步）
    - 随机流绑定：systematic/random 用一把主 RNG；hogwild 每个 worker 一把 RNG，
      均由 master seed 经 SeedSequence 派生，整个运行期间持续消耗（不会每步重播种）；
      单线程 hogwild 与 systematic 共用同一随机流，结果逐位一致
    - 未给 seed 时从系统熵生成一个 32 位种子并记录，保证事后可复现（确定性扫描）
    - 运行结束检查自旋缓冲区完整性；analyze() 给出 τ_int / ESS / 误差
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import logging
import time

import numpy as np
from numpy.random import SeedSequence

from ..analysis import statistics as stats
from ..core.gibbs import (
    SCAN_MODES,
    default_n_workers,
    gibbs_sweep,
    normalize_scan_name,
    random_spins,
    seed_to_generator,
    spawn_worker_seeds,
    validate_spins,
)
from ..core.graphs import Graph
from ..core.observables import calculate_observables
from ..utils.logger import ProgressLogger

logger = logging.getLogger(__name__)

_TRACE_KEYS = ("M", "absM", "E")


class GibbsSampler:
    """
    Gibbs 采样主控类。

    参数
    ----
    graph : Graph
    beta : 逆温度
    prior : 每顶点先验权重（外场）
    scan : 'systematic' | 'random' | 'hogwild'
    n_workers : Hogwild 线程数（默认 CPU 核数，不超过顶点数）；其它扫描方式忽略
    seed : 主种子；None 时从系统熵生成
    spins : 初始自旋（复制一份）；None 时由主种子派生的 RNG 随机生成
    """

    def __init__(
        self,
        graph: Graph,
        beta: float,
        prior: float = 0.0,
        scan: str = "systematic",
        n_workers: Optional[int] = None,
        seed: Optional[int] = None,
        spins: Optional[Sequence[int]] = None,
    ) -> None:
        self.graph = graph
        self.n = graph.n_vertices
        if self.n == 0:
            raise ValueError("graph must have at least one vertex")
        self.beta = float(beta)
        self.prior = float(prior)

        self.scan = normalize_scan_name(scan)
        if self.scan not in SCAN_MODES:
            raise ValueError(f"Unknown scan: {scan!r}. Known scans: {list(SCAN_MODES)}")

        if seed is None:
            seed = int(SeedSequence().generate_state(1)[0])
            logger.info("no seed given; drew seed=%d from system entropy", seed)
        self.seed = int(seed)

        # 初始化 / 运行期随机流解耦
        init_seed, run_seed = spawn_worker_seeds(self.seed, 2)
        if spins is None:
            self.spins = random_spins(self.n, seed_to_generator(init_seed))
        else:
            self.spins = np.array(spins, dtype=np.int8, copy=True, order="C").ravel()
        validate_spins(self.spins, self.n)

        if self.scan == "hogwild":
            nw = default_n_workers() if n_workers is None else int(n_workers)
            if nw < 1:
                raise ValueError(f"n_workers must be >= 1, got {nw}")
            self.n_workers = min(nw, self.n)
            # 单线程沿用 systematic 的随机流
            if self.n_workers == 1:
                self.worker_seeds: List[int] = [int(run_seed)]
            else:
                self.worker_seeds = spawn_worker_seeds(run_seed, self.n_workers)
            self.worker_rngs = [seed_to_generator(s) for s in self.worker_seeds]
            self.rng = None
        else:
            if n_workers not in (None, 1):
                logger.warning("n_workers=%s ignored for scan='%s'", n_workers, self.scan)
            self.n_workers = 1
            self.worker_seeds = []
            self.worker_rngs = None
            self.rng = seed_to_generator(run_seed)

        self.sweep_index = 0
        self.total_flips = 0
        self.rng_consumed = 0
        self._results: Optional[Dict[str, Any]] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    # -------------------------
    # 单次 sweep
    # -------------------------
    def step(self) -> int:
        """做一次 sweep，返回翻转数。"""
        info = gibbs_sweep(
            self.spins,
            self.graph,
            self.beta,
            self.prior,
            scan=self.scan,
            rng=self.rng,
            n_workers=self.n_workers,
            worker_rngs=self.worker_rngs,
            executor=self._executor,
        )
        self.sweep_index += 1
        self.total_flips += info.flips
        self.rng_consumed += info.rng_consumed
        return info.flips

    @contextmanager
    def _worker_pool(self) -> Iterator[None]:
        if self.scan != "hogwild" or self._executor is not None:
            yield
            return
        with ThreadPoolExecutor(max_workers=self.n_workers, thread_name_prefix="hogwild") as ex:
            self._executor = ex
            try:
                yield
            finally:
                self._executor = None

    def observables(self) -> Dict[str, float]:
        return calculate_observables(self.spins, self.graph, self.beta, self.prior)

    # -------------------------
    # 主运行循环
    # -------------------------
    def run(self, n_iterations: int, record_interval: int = 1, progress: bool = True) -> Dict[str, Any]:
        """
        连续做 n_iterations 次 sweep；每 record_interval 次记录一次 M / absM / E。
        返回结果字典（同时缓存供 analyze() 使用）。
        """
        n_iterations = int(n_iterations)
        record_interval = int(record_interval)
        if n_iterations < 0:
            raise ValueError(f"n_iterations must be non-negative, got {n_iterations}")
        if record_interval < 1:
            raise ValueError(f"record_interval must be >= 1, got {record_interval}")

        traces: Dict[str, List[float]] = {k: [] for k in _TRACE_KEYS}
        steps: List[int] = []
        flips = np.zeros(n_iterations, dtype=np.int64)
        prog = ProgressLogger(n_iterations, desc=f"Gibbs[{self.scan}]", logger=logger,
                              log_every_n=max(1, n_iterations // 10), log_every_seconds=10.0) if progress else None

        logger.info("start: n=%d edges=%d beta=%.4f prior=%.4f scan=%s workers=%d seed=%d iterations=%d",
                    self.n, self.graph.n_edges, self.beta, self.prior, self.scan, self.n_workers,
                    self.seed, n_iterations)
        t0 = time.perf_counter()
        with self._worker_pool():
            for t in range(n_iterations):
                flips[t] = self.step()
                if (t + 1) % record_interval == 0:
                    obs = self.observables()
                    for k in _TRACE_KEYS:
                        traces[k].append(obs[k])
                    steps.append(self.sweep_index)
                if prog is not None:
                    prog.update()
        elapsed = time.perf_counter() - t0
        if prog is not None:
            prog.finish()

        # 无同步的并发写之后再确认一次缓冲区
        try:
            validate_spins(self.spins, self.n)
        except ValueError as exc:
            raise RuntimeError(f"spin buffer corrupted after sampling: {exc}") from exc

        self._results = {
            "scan": self.scan,
            "n_workers": self.n_workers,
            "beta": self.beta,
            "prior": self.prior,
            "seed": self.seed,
            "worker_seeds": list(self.worker_seeds),
            "n_vertices": self.n,
            "n_edges": self.graph.n_edges,
            "n_iterations": n_iterations,
            "record_interval": record_interval,
            "steps": np.asarray(steps, dtype=np.int64),
            "flips": flips,
            "elapsed": elapsed,
            "sweeps_per_second": (n_iterations / elapsed) if elapsed > 0 else float("inf"),
            "final": self.observables(),
        }
        for k in _TRACE_KEYS:
            self._results[k] = np.asarray(traces[k], dtype=float)
        return self._results

    # -------------------------
    # 分析
    # -------------------------
    def analyze(self) -> Dict[str, Any]:
        """对最近一次 run() 的轨迹给出均值、τ_int、ESS 与自相关修正误差。"""
        if self._results is None:
            raise RuntimeError("analyze() called before run()")
        res = self._results
        out: Dict[str, Any] = {
            "scan": res["scan"],
            "n_workers": res["n_workers"],
            "n_samples": int(res["steps"].size),
            "flip_rate": float(res["flips"].mean() / self.n) if res["flips"].size else 0.0,
            "sweeps_per_second": res["sweeps_per_second"],
        }
        for k in _TRACE_KEYS:
            x = res[k]
            if x.size == 0:
                out[k] = {"mean": float("nan"), "err": float("nan"), "tau_int": float("nan"), "ess": 0.0}
                continue
            err, tau = stats.estimate_error_with_autocorr(x)
            out[k] = {
                "mean": float(x.mean()),
                "err": err,
                "tau_int": tau,
                "ess": stats.effective_sample_size(x, tau),
            }
        return out

    def summary_lines(self) -> List[str]:
        a = self.analyze()
        lines = [
            "Sampling summary:",
            f"Scan: {a['scan']} (workers: {a['n_workers']})",
            f"Sweeps: {self._results['n_iterations']} | samples: {a['n_samples']} | "
            f"{a['sweeps_per_second']:.2f} sweeps/s",
            f"Flip rate: {a['flip_rate']:.6f}",
        ]
        for k in _TRACE_KEYS:
            d = a[k]
            lines.append(f"{k}: {d['mean']:.6f} +/- {d['err']:.6f} (tau_int {d['tau_int']:.2f}, ESS {d['ess']:.1f})")
        return lines
