"""
Pluggable feature scorers for the spread window.

A tracker can be given any object with ``score(window) -> float``; its
output replaces 70% of the plain z-score once enough history exists.
"""

import math
from typing import Protocol, runtime_checkable

import numpy as np

from .rolling_window import RollingWindow
from .statistics import mean, std_dev, z_score

MIN_ATTENTION_SAMPLES = 5
RECENCY_WEIGHT = 0.7
MAGNITUDE_WEIGHT = 0.3
MOMENTUM_WEIGHT = 0.1


@runtime_checkable
class FeatureScorer(Protocol):
    """Anything that turns a spread window into a z-score-like number."""

    def score(self, window: RollingWindow) -> float:
        ...


class TemporalAttentionScorer:
    """
    Attention-weighted z-score of the newest spread value.

    Each observation gets a weight mixing recency ((i + 1) / n) and magnitude
    (|x_i|); the weights are normalized, and the z-score is taken against the
    weighted mean and weighted standard deviation. With ``include_momentum``
    a small term proportional to the weighted first differences is added.
    """

    def __init__(self, include_momentum: bool = True):
        self.include_momentum = include_momentum

    def attention_weights(self, values: np.ndarray) -> np.ndarray:
        n = values.size
        recency = np.arange(1, n + 1, dtype=float) / n
        scores = recency * RECENCY_WEIGHT + np.abs(values) * MAGNITUDE_WEIGHT
        return scores / np.sum(scores)

    def score(self, window: RollingWindow) -> float:
        size = window.size()
        if size == 0:
            return 0.0
        if size < MIN_ATTENTION_SAMPLES:
            return z_score(window.last(), mean(window), std_dev(window))

        values = window.values()
        if np.ptp(values) == 0.0:
            return 0.0
        weights = self.attention_weights(values)
        weighted_mean = float(np.sum(weights * values))
        weighted_std = math.sqrt(float(np.sum(weights * (values - weighted_mean) ** 2)))
        if weighted_std <= 0:
            return 0.0

        enhanced = (values[-1] - weighted_mean) / weighted_std
        if self.include_momentum:
            momentum = float(np.sum(weights[1:] * np.diff(values)))
            enhanced += momentum * MOMENTUM_WEIGHT
        return enhanced
