# -*- coding: utf-8 -*-
"""
自相关诊断单元测试

- 白噪声 / AR(1) 序列的自相关与 τ_int（AR(1) 理论值 (1+φ)/(2(1-φ))）
- ESS 与自相关修正误差
- 短序列、常数序列、含 NaN 序列的降级行为
"""

import math
import sys
import unittest
from pathlib import Path

import numpy as np

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from hogwild_gibbs.analysis import statistics as stats


def _ar1(n, phi, seed):
    rng = np.random.default_rng(seed)
    eps = rng.standard_normal(n)
    x = np.empty(n)
    x[0] = eps[0]
    for t in range(1, n):
        x[t] = phi * x[t - 1] + eps[t]
    return x


class TestAutocorrelation(unittest.TestCase):

    def test_white_noise(self):
        x = np.random.default_rng(0).standard_normal(10000)
        rho = stats.autocorrelation(x, max_lag=5)
        self.assertEqual(rho.shape, (6,))
        self.assertEqual(rho[0], 1.0)
        self.assertTrue(np.all(np.abs(rho[1:]) < 0.1))
        tau = stats.autocorrelation_time(x)
        self.assertGreaterEqual(tau, 1.0)
        self.assertLess(tau, 1.5)

    def test_ar1_tau(self):
        phi = 0.9
        x = _ar1(50000, phi, seed=1)
        rho = stats.autocorrelation(x, max_lag=3)
        self.assertAlmostEqual(rho[1], phi, delta=0.03)
        tau = stats.autocorrelation_time(x)
        expected = (1 + phi) / (2 * (1 - phi))
        self.assertGreater(tau, 0.7 * expected)
        self.assertLess(tau, 1.3 * expected)

    def test_constant_series(self):
        rho = stats.autocorrelation(np.full(20, 3.0), max_lag=4)
        np.testing.assert_array_equal(rho, [1.0, 0.0, 0.0, 0.0, 0.0])
        self.assertEqual(stats.autocorrelation_time(np.full(20, 3.0)), 1.0)
        self.assertEqual(stats.estimate_error_with_autocorr(np.full(20, 3.0)), (0.0, 1.0))

    def test_short_and_nan(self):
        self.assertEqual(stats.autocorrelation_time([1.0, 2.0, 3.0]), 1.0)
        self.assertEqual(stats.estimate_error_with_autocorr([1.0]), (0.0, 1.0))
        self.assertEqual(stats.autocorrelation([]).tolist(), [1.0])
        err, _ = stats.estimate_error_with_autocorr([1.0, float("nan"), 3.0], tau=1.0)
        self.assertAlmostEqual(err, math.sqrt(2.0 * 2.0 / 2))


class TestErrorAndESS(unittest.TestCase):

    def test_effective_sample_size(self):
        x = np.arange(100, dtype=float)
        self.assertAlmostEqual(stats.effective_sample_size(x, tau=2.0), 25.0)
        self.assertAlmostEqual(stats.effective_sample_size(x, tau=0.1), 100.0)
        self.assertEqual(stats.effective_sample_size([]), 0.0)

    def test_error_scales_with_tau(self):
        x = np.random.default_rng(3).standard_normal(400)
        e1, t1 = stats.estimate_error_with_autocorr(x, tau=1.0)
        e4, t4 = stats.estimate_error_with_autocorr(x, tau=4.0)
        self.assertEqual((t1, t4), (1.0, 4.0))
        self.assertAlmostEqual(e1, math.sqrt(np.var(x, ddof=1) * 2.0 / 400))
        self.assertAlmostEqual(e4 / e1, 2.0)

    def test_correlated_error_larger(self):
        x = _ar1(20000, 0.8, seed=5)
        err, tau = stats.estimate_error_with_autocorr(x)
        naive = float(np.std(x, ddof=1) / math.sqrt(x.size))
        self.assertGreater(tau, 2.0)
        self.assertGreater(err, naive)


if __name__ == "__main__":
    unittest.main(verbosity=2)
