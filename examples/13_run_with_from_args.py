# examples/13_run_with_from_args.py
"""
用 from_args 组装配置：预设 < 配置文件 < 环境变量 < --set

    python examples/13_run_with_from_args.py --preset lattice --set graph.L=16 --set sampler.beta=0.44
    HOGWILD__sampler__scan=hogwild python examples/13_run_with_from_args.py --preset quick
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for p in (ROOT, ROOT / "src"):
    s = str(p)
    if s not in sys.path:
        sys.path.insert(0, s)

import yaml

from hogwild_gibbs.simulation.experiment import run_experiment
from hogwild_gibbs.utils.config import from_args
from hogwild_gibbs.utils.logger import setup_logger


def main():
    setup_logger("hogwild_gibbs", level="INFO")
    cfg = from_args()
    print("effective config:")
    print(yaml.safe_dump(cfg.to_dict(), sort_keys=False))

    result = run_experiment(cfg, progress=cfg.verbose)
    for k in ("M", "absM", "E"):
        d = result.analysis[k]
        print(f"{k:>5}: {d['mean']:.6f} +/- {d['err']:.6f}  (tau_int {d['tau_int']:.2f})")


if __name__ == "__main__":
    main()
