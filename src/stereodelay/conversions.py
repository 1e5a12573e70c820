"""
Unit conversion helpers for delay parameters.

All functions are vectorized and work with numpy arrays or scalars.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import numpy as np
from numpy.typing import ArrayLike


def ms_to_samples(ms: ArrayLike, sample_rate: float) -> np.ndarray:
    """
    Convert milliseconds to a (fractional) sample count.

    Computed in double precision so that long delays at high sample rates
    keep their sub-sample remainder.

    Example:
        >>> ms_to_samples(1000.0, 44100)
        44100.0
        >>> ms_to_samples(0.5, 48000)
        24.0
    """
    ms = np.asarray(ms, dtype=np.float64)
    return ms * float(sample_rate) / 1000.0


def samples_to_ms(samples: ArrayLike, sample_rate: float) -> np.ndarray:
    """
    Convert a sample count to milliseconds.

    Example:
        >>> samples_to_ms(22050, 44100)
        500.0
    """
    samples = np.asarray(samples, dtype=np.float64)
    return samples * 1000.0 / float(sample_rate)


def percent_to_fraction(pct: ArrayLike) -> np.ndarray:
    """
    Convert a 0-100 percentage to a 0-1 fraction. Values are not clamped.

    Example:
        >>> percent_to_fraction(50)
        0.5
    """
    return np.asarray(pct, dtype=np.float64) / 100.0


def fraction_to_percent(frac: ArrayLike) -> np.ndarray:
    """Convert a 0-1 fraction to a 0-100 percentage."""
    return np.asarray(frac, dtype=np.float64) * 100.0
