# -*- coding: utf-8 -*-
"""
马尔可夫链时间序列的自相关诊断

实现功能：
    - FFT 计算归一化自相关函数 rho[0..max_lag]
    - Sokal 自洽窗口法估计积分自相关时间 τ_int（窗口 t <= c·τ）
    - 有效样本数 ESS = n / (2 τ_int)
    - 自相关修正后的均值标准误 σ·sqrt(2 τ_int / n)
    - 对短序列、常数序列、含 NaN 的情况自动降级（τ=1，误差 0）
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

__all__ = [
    "autocorrelation",
    "autocorrelation_time",
    "effective_sample_size",
    "estimate_error_with_autocorr",
]


def _finite_clean(x) -> np.ndarray:
    y = np.asarray(x, dtype=float).ravel()
    return y[np.isfinite(y)]


def autocorrelation(data, max_lag: Optional[int] = None) -> np.ndarray:
    """
    归一化自相关 rho[0..max_lag]，rho[0] = 1。
    自协方差按配对数 (n-k) 归一；方差为零时只返回 rho[0]。
    """
    x = _finite_clean(data)
    n = x.size
    if n == 0:
        return np.array([1.0])
    max_lag = min(n - 1, 4096) if max_lag is None else int(max(0, min(max_lag, n - 1)))
    x = x - x.mean()

    m = 1 << (2 * n - 1).bit_length()
    fx = np.fft.rfft(x, n=m)
    acov = np.fft.irfft(fx * np.conj(fx), n=m)[:n]
    acov /= np.maximum(n - np.arange(n), 1).astype(float)

    v0 = acov[0]
    if not np.isfinite(v0) or v0 <= 0.0:
        rho = np.zeros(max_lag + 1)
        rho[0] = 1.0
        return rho
    rho = acov[: max_lag + 1] / v0
    rho[0] = 1.0
    return rho


def autocorrelation_time(data, max_lag: Optional[int] = None, c: float = 5.0) -> float:
    """
    积分自相关时间 τ_int = 1/2 + Σ_{t=1}^{W} rho[t]，
    W 取满足 W >= c·τ_int(W) 的最小窗口（Sokal）。结果不小于 1。
    """
    x = _finite_clean(data)
    if x.size < 4:
        return 1.0
    rho = autocorrelation(x, max_lag=max_lag)
    if rho.size <= 1:
        return 1.0
    tau = 0.5
    for w in range(1, rho.size):
        tau += float(rho[w])
        if w >= c * tau:
            break
    if not math.isfinite(tau):
        return 1.0
    return float(max(1.0, tau))


def effective_sample_size(data, tau: Optional[float] = None) -> float:
    x = _finite_clean(data)
    if x.size == 0:
        return 0.0
    if tau is None:
        tau = autocorrelation_time(x)
    return float(x.size / (2.0 * max(float(tau), 0.5)))


def estimate_error_with_autocorr(data, tau: Optional[float] = None) -> Tuple[float, float]:
    """返回 (均值标准误, τ_int)。"""
    x = _finite_clean(data)
    if x.size < 2:
        return 0.0, 1.0
    if tau is None:
        tau = autocorrelation_time(x)
    var = float(np.var(x, ddof=1))
    if var <= 0.0:
        return 0.0, float(tau)
    return float(math.sqrt(var * 2.0 * float(tau) / x.size)), float(tau)
