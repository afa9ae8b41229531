# examples/11_lattice.py
"""
二维方格上的 Gibbs 采样：高温 / 临界附近 / 低温三个 β 的 |M| 与 τ_int 对比

方格临界点 β_c = ln(1+√2)/2 ≈ 0.4407；越靠近 β_c，自相关时间越长。
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for p in (ROOT, ROOT / "src"):
    s = str(p)
    if s not in sys.path:
        sys.path.insert(0, s)

from hogwild_gibbs.core.graphs import lattice_graph
from hogwild_gibbs.simulation.sampler import GibbsSampler


def main():
    L = 24
    graph = lattice_graph(L, periodic=True)

    print(f"L = {L}, N = {graph.n_vertices}, edges = {graph.n_edges}")
    print(f"{'beta':>6} | {'<|M|>':>18} | {'tau_int':>8} | {'flip rate':>9}")
    for beta in (0.2, 0.44, 0.7):
        sampler = GibbsSampler(graph, beta=beta, scan="systematic", seed=7)
        sampler.run(n_iterations=400, progress=False)
        a = sampler.analyze()
        m = a["absM"]
        print(f"{beta:6.3f} | {m['mean']:.4f} +/- {m['err']:.4f} | {m['tau_int']:8.2f} | {a['flip_rate']:9.4f}")


if __name__ == "__main__":
    main()
