"""
Tests for conversion utility functions.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import numpy as np
import pytest

from stereodelay import (
    ms_to_samples,
    samples_to_ms,
    percent_to_fraction,
    fraction_to_percent,
)


class TestMsSamples:
    def test_one_second(self):
        assert ms_to_samples(1000.0, 44100) == pytest.approx(44100.0)

    def test_fractional(self):
        assert ms_to_samples(0.5, 48000) == pytest.approx(24.0)
        assert ms_to_samples(10.5, 1000) == pytest.approx(10.5)

    def test_back(self):
        assert samples_to_ms(22050, 44100) == pytest.approx(500.0)

    def test_vectorized(self):
        result = ms_to_samples([0.0, 1.0, 2000.0], 1000)
        np.testing.assert_allclose(result, [0.0, 1.0, 2000.0])

    def test_round_trip(self):
        ms = np.array([0.0, 12.34, 1999.9])
        np.testing.assert_allclose(samples_to_ms(ms_to_samples(ms, 96000), 96000), ms)


class TestPercent:
    def test_to_fraction(self):
        assert percent_to_fraction(50) == pytest.approx(0.5)
        assert percent_to_fraction(100) == pytest.approx(1.0)

    def test_not_clamped(self):
        assert percent_to_fraction(150) == pytest.approx(1.5)

    def test_to_percent(self):
        assert fraction_to_percent(0.25) == pytest.approx(25.0)
