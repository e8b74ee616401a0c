"""Tests for the simplified cointegration statistics."""

import math

import numpy as np
import pytest

from signal_lib.cointegration import (
    CointegrationReport,
    engle_granger_test,
    error_correction_test,
    fractional_cointegration_test,
    is_cointegrated,
    johansen_test,
    run_suite,
    threshold_cointegration_test,
)
from signal_lib.rolling_window import RollingWindow


def random_walk(n, seed, start=100.0, volatility=0.01):
    rng = np.random.default_rng(seed)
    return start * np.exp(np.cumsum(rng.normal(scale=volatility, size=n)))


def to_window(values):
    window = RollingWindow(len(values))
    for value in values:
        window.push(value)
    return window


class TestMinimumSamples:
    """Every estimator reports 0.0 below its minimum sample count."""

    def test_engle_granger(self):
        """Engle-Granger needs ten samples."""
        assert engle_granger_test(random_walk(9, 1), random_walk(9, 2)) == 0.0

    def test_threshold(self):
        """The threshold test needs ten samples."""
        assert threshold_cointegration_test(np.linspace(-1, 1, 9), 0.0) == 0.0

    def test_fractional(self):
        """The Hurst estimate needs thirty samples."""
        assert fractional_cointegration_test(random_walk(29, 1), random_walk(29, 2)) == 0.0

    def test_error_correction(self):
        """The error-correction test needs fifteen samples."""
        spread = np.zeros(14)
        assert error_correction_test(random_walk(14, 1), random_walk(14, 2), spread) == 0.0

    def test_johansen(self):
        """Johansen needs twenty samples."""
        assert johansen_test(random_walk(19, 1), random_walk(19, 2)) == 0.0

    def test_mismatched_sizes(self):
        """Windows of different sizes are untested."""
        assert engle_granger_test(random_walk(40, 1), random_walk(39, 2)) == 0.0
        assert johansen_test(random_walk(40, 1), random_walk(39, 2)) == 0.0
        assert error_correction_test(random_walk(40, 1), random_walk(40, 2), np.zeros(39)) == 0.0


class TestEstimators:
    """Test each estimator on synthetic data."""

    def test_engle_granger_residual_mean_is_zero(self):
        """OLS residuals with an intercept average to zero."""
        rng = np.random.default_rng(3)
        x = np.linspace(50.0, 60.0, 50)
        y = 2.0 * x + 1.0 + rng.normal(scale=0.1, size=50)
        assert abs(engle_granger_test(y, x)) < 1e-8

    def test_threshold_needs_qualifying_lags(self):
        """Fewer than five lags beyond the threshold gives 0.0."""
        spread = np.linspace(-1.0, 1.0, 20)
        assert threshold_cointegration_test(spread, 10.0) == 0.0

    def test_threshold_random_walk(self):
        """A unit-root spread has beta near 1."""
        spread = np.cumsum(np.ones(20))
        stat = threshold_cointegration_test(spread, 0.0)
        assert stat == pytest.approx(0.0, abs=1e-6)

    def test_threshold_mean_reverting(self):
        """An exact AR(1) with beta 0.5 reports |0.5 - 1| * sqrt(count)."""
        spread = 64.0 * 0.5 ** np.arange(12)
        stat = threshold_cointegration_test(spread, 0.0)
        assert stat == pytest.approx(0.5 * math.sqrt(11))

    def test_fractional_is_non_negative(self):
        """The fractional statistic is a finite absolute value."""
        stat = fractional_cointegration_test(random_walk(60, 4), random_walk(60, 5))
        assert stat >= 0.0
        assert math.isfinite(stat)

    def test_error_correction(self):
        """The adjustment speed is finite and non-negative."""
        p1 = random_walk(30, 6)
        p2 = random_walk(30, 7)
        spread = np.log(p1) - np.log(p2)
        stat = error_correction_test(p1, p2, spread)
        assert stat >= 0.0
        assert math.isfinite(stat)

    def test_johansen_is_finite(self):
        """Unrelated random walks give a finite trace statistic."""
        stat = johansen_test(random_walk(50, 8), random_walk(50, 9))
        assert stat >= 0.0
        assert math.isfinite(stat)

    def test_johansen_identical_series(self):
        """Perfectly collinear returns have a zero smallest eigenvalue."""
        prices = random_walk(40, 10)
        assert johansen_test(prices, prices) == pytest.approx(0.0, abs=1e-9)


class TestDecision:
    """Test the critical-value comparison and the full suite."""

    def test_is_cointegrated(self):
        """Only a statistic strictly below the critical value rejects the null."""
        assert is_cointegrated(-3.5, -2.86) is True
        assert is_cointegrated(-1.0, -2.86) is False
        assert is_cointegrated(-2.86, -2.86) is False

    def test_run_suite(self):
        """The suite matches the individual estimators."""
        p1 = random_walk(40, 11)
        p2 = random_walk(40, 12)
        spread = np.log(p1) - np.log(p2)

        report = run_suite(to_window(p1), to_window(p2), to_window(spread), float(np.std(spread)))

        assert isinstance(report, CointegrationReport)
        assert report.engle_granger == pytest.approx(engle_granger_test(p1, p2))
        assert report.johansen == pytest.approx(johansen_test(p1, p2))
        assert set(report.to_dict()) == {
            "engle_granger", "johansen", "threshold", "fractional", "error_correction",
        }
