"""
stereodelay - a per-channel feedback delay effect with fractional delay times.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from stereodelay.config import (
    ErrorMode,
    set_error_mode,
    get_error_mode,
    handle_error,
    set_sample_rate,
    get_sample_rate,
)
from stereodelay.params import DelayParams, Param
from stereodelay.control import ParameterQueue
from stereodelay.delay_line import DelayLine
from stereodelay.stereo_delay import StereoDelay
from stereodelay.conversions import (
    ms_to_samples,
    samples_to_ms,
    percent_to_fraction,
    fraction_to_percent,
)
from stereodelay.logger import set_global_logging, get_logger

__version__ = "0.1.0"

# Lazy imports for modules that need audio I/O libraries
# (soundfile, sounddevice/PortAudio), loaded on first access
_lazy_imports = {
    "LiveDelay": ("stereodelay.live", "LiveDelay"),
    "read_audio": ("stereodelay.wav_io", "read_audio"),
    "write_audio": ("stereodelay.wav_io", "write_audio"),
    "render_file": ("stereodelay.wav_io", "render_file"),
}


def __getattr__(name):
    if name in _lazy_imports:
        module_name, attr_name = _lazy_imports[name]
        import importlib
        module = importlib.import_module(module_name)
        return getattr(module, attr_name)
    raise AttributeError(f"module 'stereodelay' has no attribute {name!r}")


__all__ = [
    # Configuration
    "ErrorMode",
    "set_error_mode",
    "get_error_mode",
    "handle_error",
    "set_sample_rate",
    "get_sample_rate",
    # Engine
    "DelayLine",
    "DelayParams",
    "Param",
    "ParameterQueue",
    "StereoDelay",
    # I/O
    "LiveDelay",
    "read_audio",
    "write_audio",
    "render_file",
    # Conversions
    "ms_to_samples",
    "samples_to_ms",
    "percent_to_fraction",
    "fraction_to_percent",
    # Logging
    "set_global_logging",
    "get_logger",
]
