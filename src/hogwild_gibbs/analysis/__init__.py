# -*- coding: utf-8 -*-
"""
分析层：马尔可夫链轨迹的自相关时间、有效样本数与误差估计。
"""

from .statistics import (
    autocorrelation,
    autocorrelation_time,
    effective_sample_size,
    estimate_error_with_autocorr,
)

__all__ = [
    "autocorrelation",
    "autocorrelation_time",
    "effective_sample_size",
    "estimate_error_with_autocorr",
]
