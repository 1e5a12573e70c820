"""
Configuration and error handling utilities for stereodelay.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from enum import Enum
from typing import Type, Optional
from stereodelay.logger import get_logger

logger = get_logger(__name__)


class ErrorMode(Enum):
    """
    Error handling mode for recoverable configuration errors.

    STRICT: All errors raise exceptions (default, fail-fast)
    LENIENT: Non-fatal errors become warnings and the offending update is
             ignored, so a live stream keeps running
    """
    STRICT = "strict"
    LENIENT = "lenient"


DEFAULT_ERROR_MODE: ErrorMode = ErrorMode.STRICT

# Sample rate used when a DelayLine or StereoDelay is built without one
DEFAULT_SAMPLE_RATE: int = 44100

_sample_rate: int = DEFAULT_SAMPLE_RATE


def set_error_mode(mode: ErrorMode) -> None:
    """Set the default error mode for all stereodelay operations."""
    global DEFAULT_ERROR_MODE
    DEFAULT_ERROR_MODE = mode


def get_error_mode() -> ErrorMode:
    """Return the current default error mode."""
    return DEFAULT_ERROR_MODE


def set_sample_rate(rate: int) -> None:
    """
    Set the sample rate used by engines constructed without an explicit rate.

    Engines read this once, at construction. Changing it later does not
    affect existing instances.

    Args:
        rate: Sample rate in Hz (must be a positive integer)

    Raises:
        ValueError: If rate is not positive
    """
    global _sample_rate
    rate = int(rate)
    if rate <= 0:
        handle_error(
            f"sample_rate must be positive, got {rate}",
            fatal=True,
            exception_class=ValueError,
        )
    _sample_rate = rate


def get_sample_rate() -> int:
    """Return the default sample rate in Hz."""
    return _sample_rate


def handle_error(
    message: str,
    fatal: bool = False,
    error_mode: Optional[ErrorMode] = None,
    exception_class: Type[Exception] = RuntimeError,
) -> bool:
    """
    Handle an error based on the error mode.

    In STRICT mode (or if fatal=True), raises an exception.
    In LENIENT mode (and fatal=False), logs a warning and returns True.

    Args:
        message: Error description
        fatal: If True, always raise regardless of mode
        error_mode: Override the default error mode (optional)
        exception_class: Exception type to raise (default: RuntimeError)

    Returns:
        True if the caller should skip the operation and continue

    Raises:
        exception_class: If in STRICT mode or fatal=True

    Example:
        # Strict: raises ValueError. Lenient: warns, update is dropped.
        if not math.isfinite(ms):
            if handle_error("delay is not finite", exception_class=ValueError):
                return

        # Always raises regardless of mode
        if sample_rate <= 0:
            handle_error("bad sample rate", fatal=True, exception_class=ValueError)
    """
    mode = error_mode if error_mode is not None else DEFAULT_ERROR_MODE

    if fatal or mode == ErrorMode.STRICT:
        raise exception_class(message)
    else:
        logger.warning(message)
        return True
