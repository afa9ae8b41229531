# smoke_tests.py
# Lightweight smoke run over every module for quick local verification.
# Run with: python tests/smoke_tests.py
import shutil
import sys
import tempfile
from pathlib import Path

import numpy as np

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from hogwild_gibbs.analysis import statistics as stats
from hogwild_gibbs.core import gibbs as gb
from hogwild_gibbs.core import graphs as gr
from hogwild_gibbs.core import observables as obs
from hogwild_gibbs.simulation.experiment import run_experiment
from hogwild_gibbs.utils import config as cfg_mod
from hogwild_gibbs.utils import logger as lg


def main():
    print("=== SMOKE TESTS START ===")
    tmpdir = Path(tempfile.mkdtemp(prefix="smoke_"))
    print("tmpdir:", tmpdir)

    try:
        # 1) graphs
        print("\n-- graphs --")
        g = gr.random_bounded_degree_graph(1000, 3, gb.seed_to_generator(0))
        gr.validate_graph(g, max_degree=3)
        print(gr.format_graph_statistics(gr.graph_statistics(g)))
        print("stop reason:", g.meta["stop_reason"], "rng draws:", g.meta["rng_consumed"])
        lat = gr.lattice_graph(16)
        print("lattice edges:", lat.n_edges)

        # 2) gibbs sweeps
        print("\n-- gibbs --")
        s = gb.random_spins(g.n_vertices, gb.seed_to_generator(1))
        for scan in gb.SCAN_MODES:
            info = gb.gibbs_sweep(s, g, 0.2, scan=scan, seed=3, n_workers=4)
            print(info)

        # 3) observables
        print("\n-- observables --")
        print({k: round(v, 4) for k, v in obs.calculate_observables(s, g, 0.2).items()})

        # 4) statistics
        print("\n-- statistics --")
        series = np.random.default_rng(0).standard_normal(2000)
        tau = stats.autocorrelation_time(series)
        err, _ = stats.estimate_error_with_autocorr(series, tau)
        print(f"tau={tau:.3f} ess={stats.effective_sample_size(series, tau):.1f} err={err:.4f}")

        # 5) logger + config + experiment
        print("\n-- experiment --")
        lg.setup_logger("hogwild_gibbs", level="INFO", log_file=str(tmpdir / "smoke.log"), use_color=False)
        cfg = cfg_mod.get_preset_config("quick")
        cfg_mod.save_config(cfg, tmpdir / "quick.yaml")
        res = run_experiment(cfg_mod.load_config(str(tmpdir / "quick.yaml")), progress=False)
        print("\n".join(res.sampler.summary_lines()))
        print("log lines:", len((tmpdir / "smoke.log").read_text(encoding="utf-8").splitlines()))

        print("\nSMOKE TESTS OK (if no uncaught exceptions)")

    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)

    print("=== SMOKE TESTS END ===")


if __name__ == "__main__":
    main()
