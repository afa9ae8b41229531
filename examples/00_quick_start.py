# examples/00_quick_start.py
"""
Quick start: 参考实验的最小版本

- N=1000, Δ=3 的随机有界度图，β=0.2，无外场
- 不依赖 Config 系统，直接调用图构造与 GibbsSampler
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for p in (ROOT, ROOT / "src"):
    s = str(p)
    if s not in sys.path:
        sys.path.insert(0, s)

from hogwild_gibbs.core.gibbs import seed_to_generator, spawn_worker_seeds
from hogwild_gibbs.core.graphs import format_graph_statistics, graph_statistics, random_bounded_degree_graph
from hogwild_gibbs.simulation.sampler import GibbsSampler
from hogwild_gibbs.utils.logger import setup_logger


def main():
    setup_logger("hogwild_gibbs", level="INFO")
    master_seed = 2016
    graph_seed, sampler_seed = spawn_worker_seeds(master_seed, 2)

    graph = random_bounded_degree_graph(1000, 3, seed_to_generator(graph_seed))
    print(format_graph_statistics(graph_statistics(graph)))
    print(f"stop reason: {graph.meta['stop_reason']}, edges: {graph.n_edges}\n")

    sampler = GibbsSampler(graph, beta=0.2, prior=0.0, scan="systematic", seed=sampler_seed)
    sampler.run(n_iterations=200, record_interval=1, progress=False)

    for line in sampler.summary_lines():
        print(line)


if __name__ == "__main__":
    main()
