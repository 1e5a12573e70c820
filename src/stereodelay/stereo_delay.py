"""
StereoDelay - one DelayLine per channel driven by shared parameters.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from __future__ import annotations

import math
import threading
from typing import Any, Mapping, Optional, Union

import numpy as np

from stereodelay.config import get_sample_rate, handle_error
from stereodelay.control import ParameterQueue
from stereodelay.delay_line import DelayLine
from stereodelay.logger import get_logger
from stereodelay.params import DelayParams, Param

logger = get_logger(__name__)


class StereoDelay:
    """
    Multi-channel delay effect: each channel owns an independent DelayLine,
    all channels share the same four parameters.

    Channels never feed into each other. Parameter changes made with
    set_parameter() may come from any thread; they are queued and applied to
    every channel at the start of the next process_block() call, so a block
    is always processed with one consistent set of parameters.

    Lifecycle:
        1. prepare() - size the lines for the stream's sample rate, clear them
        2. process_block() - once per audio block, on the audio thread
        3. set_parameter() / set_state() - at any time, from any thread

    Args:
        sample_rate: Sample rate in Hz (default: config.get_sample_rate())
        channels: Number of audio channels (default: 2)
        params: Initial parameters (default: DelayParams())

    Example:
        fx = StereoDelay(48000, params=DelayParams(delay_ms=300.0, feedback_pct=35.0))
        fx.prepare()
        wet = fx.process_block(block)      # block shape (frames, 2)

        # From the GUI thread:
        fx.set_parameter(Param.MIX, 80.0)  # applied at the next block
    """

    def __init__(
        self,
        sample_rate: Optional[int] = None,
        channels: int = 2,
        params: Optional[DelayParams] = None,
    ):
        if channels < 1:
            handle_error(
                f"channels must be >= 1, got {channels}",
                fatal=True,
                exception_class=ValueError,
            )
        self._sample_rate = int(sample_rate) if sample_rate is not None else get_sample_rate()
        self._channels = int(channels)
        self._params = params if params is not None else DelayParams()
        self._commands = ParameterQueue()
        # Guards _params and the queue so both always agree
        self._lock = threading.Lock()
        self._lines = self._build_lines(self._sample_rate, self._params)

    def _build_lines(self, sample_rate: int, p: DelayParams) -> list[DelayLine]:
        lines = [
            DelayLine(sample_rate, p.delay_ms, p.feedback_pct, p.mix_pct)
            for _ in range(self._channels)
        ]
        for line in lines:
            line.set_bypass(p.bypass)
        return lines

    @property
    def sample_rate(self) -> int:
        """Sample rate in Hz."""
        return self._sample_rate

    @property
    def channels(self) -> int:
        """Number of channels (and DelayLines)."""
        return self._channels

    @property
    def lines(self) -> tuple[DelayLine, ...]:
        """The per-channel delay lines."""
        return tuple(self._lines)

    @property
    def params(self) -> DelayParams:
        """The most recently requested parameters (including queued ones)."""
        return self._params

    @property
    def num_parameters(self) -> int:
        return len(Param)

    # ------------------------------------------------------------------
    # Parameters (any thread)
    # ------------------------------------------------------------------

    def set_parameter(self, param: Union[Param, int], value: float) -> None:
        """
        Request a parameter change. Thread-safe.

        Args:
            param: A Param, or its position in Param (0=DELAY .. 3=BYPASS)
            value: Delay in ms, feedback/mix in percent, bypass as 0/1
        """
        resolved = self._resolve_param(param)
        if resolved is None:
            return
        value = float(value)
        if not self._check_finite(resolved, value):
            return
        with self._lock:
            self._params = self._params.with_value(resolved, value)
            self._commands.put(resolved, value)

    def get_parameter(self, param: Union[Param, int]) -> float:
        """Return the most recently requested value of a parameter."""
        resolved = self._resolve_param(param)
        if resolved is None:
            return 0.0
        return self._params.get(resolved)

    def set_params(self, params: DelayParams) -> None:
        """
        Request all four parameters at once. Thread-safe.

        Either every parameter is applied or, if any value is not finite,
        none is.
        """
        self._apply_values([(param, params.get(param)) for param in Param])

    def get_state(self) -> dict[str, float]:
        """Return the parameters as a tagged key/value mapping."""
        return self._params.to_state()

    def set_state(self, state: Mapping[str, Any]) -> None:
        """
        Restore parameters from a tagged mapping (see DelayParams.from_state).

        Tags missing from `state` keep their current values. Nothing is
        applied unless every present value is a finite number.

        Raises:
            ValueError: If a known tag holds a value that is not a number
        """
        # Raises on non-numeric values before anything is applied
        DelayParams.from_state(state)
        self._apply_values(
            [(param, float(state[param.value])) for param in Param if param.value in state]
        )

    def _apply_values(self, values: list[tuple[Param, float]]) -> None:
        for param, value in values:
            if not self._check_finite(param, value):
                return
        with self._lock:
            for param, value in values:
                self._params = self._params.with_value(param, value)
                self._commands.put(param, value)

    def _resolve_param(self, param: Union[Param, int]) -> Optional[Param]:
        if isinstance(param, Param):
            return param
        members = list(Param)
        if isinstance(param, int) and 0 <= param < len(members):
            return members[param]
        handle_error(f"Unknown parameter: {param!r}", exception_class=ValueError)
        return None

    @staticmethod
    def _check_finite(param: Param, value: float) -> bool:
        # Rejected here so the audio thread never has to
        if math.isfinite(value):
            return True
        handle_error(
            f"{param.name} value must be finite, got {value}",
            exception_class=ValueError,
        )
        return False

    # ------------------------------------------------------------------
    # Playback (audio thread)
    # ------------------------------------------------------------------

    def prepare(self, sample_rate: Optional[int] = None) -> None:
        """
        Get ready for a new stream: apply the current parameters and clear
        all buffered audio.

        A different sample rate rebuilds the delay lines (the only point where
        buffers are allocated). Call before playback starts, not from the
        audio callback.
        """
        with self._lock:
            self._commands.drain()
            params = self._params
        if sample_rate is not None and int(sample_rate) != self._sample_rate:
            self._sample_rate = int(sample_rate)
            self._lines = self._build_lines(self._sample_rate, params)
        else:
            for line in self._lines:
                line.set_params(params)
                line.reset()
        logger.info(
            f"Prepared {self._channels} channel(s) at {self._sample_rate} Hz: "
            f"{params}"
        )

    def reset(self) -> None:
        """Clear all channels' history. Call from the audio thread or while stopped."""
        for line in self._lines:
            line.reset()

    def apply_pending(self) -> int:
        """
        Apply queued parameter changes to every channel.

        Called automatically by process_block(). Returns the number of
        parameters that changed.
        """
        commands = self._commands.drain()
        for param, value in commands:
            for line in self._lines:
                if param is Param.DELAY:
                    line.set_delay(value)
                elif param is Param.FEEDBACK:
                    line.set_feedback(value)
                elif param is Param.MIX:
                    line.set_mix(value)
                else:
                    line.set_bypass(bool(value))
        return len(commands)

    def process_block(
        self,
        block: np.ndarray,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Process one block of audio.

        Args:
            block: Samples of shape (frames, channels). A 1-D array is
                   accepted when there is a single channel.
            out: Optional float64 output array of the same shape

        Returns:
            Processed samples (float64), same shape as `block`

        Raises:
            ValueError: If the channel count does not match
        """
        x = np.asarray(block, dtype=np.float64)
        mono_1d = x.ndim == 1
        if mono_1d:
            x = x.reshape(-1, 1)
        if x.ndim != 2 or x.shape[1] != self._channels:
            raise ValueError(
                f"block must have shape (frames, {self._channels}), "
                f"got {np.shape(block)}"
            )

        if out is None:
            out = np.empty(np.shape(block), dtype=np.float64)
        elif out.shape != np.shape(block) or out.dtype != np.float64:
            raise ValueError(
                f"out must be float64 with shape {np.shape(block)}, "
                f"got {out.dtype} with shape {out.shape}"
            )
        y = out[:, np.newaxis] if mono_1d else out

        self.apply_pending()
        for c, line in enumerate(self._lines):
            line.process_block(x[:, c], out=y[:, c])
        return out

    def __repr__(self) -> str:
        return (
            f"StereoDelay(sample_rate={self._sample_rate}, "
            f"channels={self._channels}, params={self._params})"
        )
