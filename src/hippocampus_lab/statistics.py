"""
Statistics Helpers

Point estimates and 95% normal-approximation confidence intervals used by the
aggregation use case. Intervals are clamped to the metric's natural bounds.
"""

from __future__ import annotations

import math
from typing import Sequence

from hippocampus_lab.domain.constants import Z_95
from hippocampus_lab.domain.value_objects import ConfidenceInterval


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp value to the range [lower, upper]"""
    return max(lower, min(upper, value))


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic mean

    Args:
        values: Non-empty sequence of numbers

    Returns:
        Mean value (0.0 for an empty sequence)
    """
    if not values:
        return 0.0
    return sum(values) / len(values)


def sample_std(values: Sequence[float]) -> float:
    """
    Sample standard deviation (divides by n - 1)

    Returns 0.0 when fewer than two values are given.
    """
    n = len(values)
    if n < 2:
        return 0.0
    mu = mean(values)
    variance = sum((v - mu) ** 2 for v in values) / (n - 1)
    return math.sqrt(variance)


def proportion_ci(p_hat: float, n: int, z: float = Z_95) -> ConfidenceInterval:
    """
    Normal-approximation interval for a Bernoulli proportion

    p_hat +/- z * sqrt(p_hat * (1 - p_hat) / n), clamped to [0, 1].

    Args:
        p_hat: Observed success rate
        n: Number of samples (must be >= 1)
        z: Normal quantile (default: 1.96 for 95%)

    Returns:
        ConfidenceInterval
    """
    if n < 1:
        raise ValueError("n must be at least 1")
    margin = z * math.sqrt(max(0.0, p_hat * (1 - p_hat)) / n)
    return _bounded_interval(p_hat, margin)


def mean_ci(values: Sequence[float], z: float = Z_95) -> ConfidenceInterval:
    """
    Normal-approximation interval for a bounded mean

    mean +/- z * s / sqrt(n) with s the sample standard deviation,
    clamped to [0, 1]. A single value collapses to its point estimate.
    """
    n = len(values)
    if n < 1:
        raise ValueError("values must not be empty")
    margin = z * sample_std(values) / math.sqrt(n)
    return _bounded_interval(mean(values), margin)


def _bounded_interval(center: float, margin: float) -> ConfidenceInterval:
    lower = clamp(center - margin)
    upper = clamp(center + margin)
    # Float noise can invert a zero-width interval after clamping
    if upper < lower:
        lower = upper = clamp(center)
    return ConfidenceInterval(lower=lower, upper=upper)
