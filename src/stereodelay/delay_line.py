"""
DelayLine - single-channel feedback delay with fractional delay times.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
from numba import jit

from stereodelay.config import get_sample_rate, handle_error
from stereodelay.conversions import ms_to_samples
from stereodelay.logger import get_logger
from stereodelay.params import DelayParams

logger = get_logger(__name__)


@jit(nopython=True, cache=True)
def _delay_process_numba(
    x: np.ndarray,
    y: np.ndarray,
    buffer: np.ndarray,
    write_pos: int,
    read_pos: int,
    delay_samples_int: int,
    delay_fraction: float,
    feedback: float,
    mix: float,
) -> tuple:
    """
    Numba-accelerated block version of DelayLine.process_sample().

    Writes the output into `y` and mutates `buffer` in place.

    Returns (write_pos, read_pos).
    """
    capacity = buffer.shape[0]

    for n in range(x.shape[0]):
        sample = x[n]

        # Below one sample of delay the cursors coincide: nothing older than
        # the current input has been written yet.
        if delay_samples_int < 1:
            delayed = sample
        else:
            delayed = buffer[read_pos]

        prev_pos = read_pos - 1
        if prev_pos < 0:
            prev_pos += capacity
        delayed = delay_fraction * buffer[prev_pos] + (1.0 - delay_fraction) * delayed

        buffer[write_pos] = sample + feedback * delayed

        write_pos += 1
        if write_pos >= capacity:
            write_pos = 0
        read_pos += 1
        if read_pos >= capacity:
            read_pos = 0

        y[n] = mix * delayed + (1.0 - mix) * sample

    return write_pos, read_pos


class DelayLine:
    """
    Feedback delay line for one audio channel.

    A circular buffer holding MAX_DELAY_MS of audio is allocated once, at
    construction, and is never resized. The requested delay is split into an
    integer number of samples (the distance between the write and read
    cursors) and a fractional remainder, which linearly interpolates between
    the slot under the read cursor and the slot just before it.

    Per sample:
        delayed = interpolated buffer read
        buffer[write] = input + feedback * delayed
        output = mix * delayed + (1 - mix) * input

    Feedback and mix are given in percent (0-100) and clamped to that range;
    the delay is clamped to [0, max_delay_ms]. When bypassed, processing
    returns the input and leaves the buffer and cursors untouched.

    The setters are not thread-safe with respect to processing: call them
    from the thread that calls process_sample()/process_block(), or go
    through StereoDelay, which queues cross-thread updates.

    Args:
        sample_rate: Sample rate in Hz (default: config.get_sample_rate())
        delay_ms: Initial delay time in milliseconds
        feedback_pct: Initial feedback in percent
        mix_pct: Initial wet/dry mix in percent (0 = dry, 100 = wet)

    Example:
        dl = DelayLine(48000, delay_ms=250.0, feedback_pct=40.0, mix_pct=50.0)
        out = [dl.process_sample(x) for x in block]

        # or, compiled:
        out = dl.process_block(np.asarray(block, dtype=np.float64))
    """

    MAX_DELAY_MS = 2000.0

    def __init__(
        self,
        sample_rate: Optional[int] = None,
        delay_ms: float = 0.0,
        feedback_pct: float = 0.0,
        mix_pct: float = 50.0,
    ):
        if sample_rate is None:
            sample_rate = get_sample_rate()
        if sample_rate <= 0:
            handle_error(
                f"sample_rate must be positive, got {sample_rate}",
                fatal=True,
                exception_class=ValueError,
            )
        self._sample_rate = int(sample_rate)
        self._max_delay_samples = int(
            math.ceil(float(ms_to_samples(self.MAX_DELAY_MS, self._sample_rate)))
        )
        self._max_delay_ms = self._max_delay_samples * 1000.0 / self._sample_rate

        self._delay_ms = 0.0
        self._feedback = 0.0
        self._mix = 0.0
        self._bypassed = False

        self._write_pos = 0
        self._read_pos = 0
        self._delay_samples_int = 0
        self._delay_fraction = 0.0

        self._buffer = np.zeros(self._max_delay_samples, dtype=np.float64)

        self.set_delay(delay_ms)
        self.set_feedback(feedback_pct)
        self.set_mix(mix_pct)
        self.reset()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def sample_rate(self) -> int:
        """Sample rate in Hz."""
        return self._sample_rate

    @property
    def max_delay_samples(self) -> int:
        """Buffer capacity in samples."""
        return self._max_delay_samples

    @property
    def max_delay_ms(self) -> float:
        """Longest delay the buffer can hold, in milliseconds."""
        return self._max_delay_ms

    @property
    def delay_ms(self) -> float:
        """Current (clamped) delay time in milliseconds."""
        return self._delay_ms

    @property
    def feedback(self) -> float:
        """Feedback gain (0-1)."""
        return self._feedback

    @property
    def feedback_pct(self) -> float:
        """Feedback in percent (0-100)."""
        return self._feedback * 100.0

    @property
    def mix(self) -> float:
        """Wet/dry mix (0 = dry, 1 = wet)."""
        return self._mix

    @property
    def mix_pct(self) -> float:
        """Wet/dry mix in percent."""
        return self._mix * 100.0

    @property
    def bypassed(self) -> bool:
        """True when processing is the identity."""
        return self._bypassed

    @property
    def write_pos(self) -> int:
        return self._write_pos

    @property
    def read_pos(self) -> int:
        return self._read_pos

    @property
    def delay_samples_int(self) -> int:
        """Integer part of the delay, in samples."""
        return self._delay_samples_int

    @property
    def delay_fraction(self) -> float:
        """Fractional part of the delay, in samples (0 <= f < 1)."""
        return self._delay_fraction

    @property
    def buffer(self) -> np.ndarray:
        """
        The circular sample buffer.

        Note: Returns the actual array, not a copy. Treat as immutable.
        """
        return self._buffer

    @property
    def params(self) -> DelayParams:
        """Snapshot of the four user-facing parameters."""
        return DelayParams(
            delay_ms=self._delay_ms,
            feedback_pct=self.feedback_pct,
            mix_pct=self.mix_pct,
            bypass=self._bypassed,
        )

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """
        Discard all buffered audio and rewind both cursors.

        The buffer is zero-filled in place; its size never changes.
        """
        self._buffer.fill(0.0)
        self._write_pos = 0
        self._read_pos = 0
        self._recompute_read_position()

    def set_delay(self, delay_ms: float) -> None:
        """
        Set the delay time in milliseconds.

        Only the read cursor moves; buffered samples are left alone. The new
        delay applies from the next processed sample, without smoothing.
        """
        delay_ms = float(delay_ms)
        if not math.isfinite(delay_ms):
            if handle_error(
                f"delay_ms must be finite, got {delay_ms}",
                exception_class=ValueError,
            ):
                return
        clamped = min(max(delay_ms, 0.0), self._max_delay_ms)
        if clamped != delay_ms:
            logger.debug(
                f"delay_ms {delay_ms} clamped to {clamped} "
                f"(max {self._max_delay_ms} ms)"
            )
        self._delay_ms = clamped
        self._recompute_read_position()

    def set_feedback(self, feedback_pct: float) -> None:
        """Set feedback in percent, clamped to 0-100."""
        value = self._clamp_percent("feedback_pct", feedback_pct)
        if value is not None:
            self._feedback = value / 100.0

    def set_mix(self, mix_pct: float) -> None:
        """Set the wet/dry mix in percent, clamped to 0-100."""
        value = self._clamp_percent("mix_pct", mix_pct)
        if value is not None:
            self._mix = value / 100.0

    def set_bypass(self, bypass: bool) -> None:
        """Enable or disable bypass from the next processed sample."""
        self._bypassed = bool(bypass)

    def set_params(self, params: DelayParams) -> None:
        """Apply all four parameters from a snapshot."""
        self.set_delay(params.delay_ms)
        self.set_feedback(params.feedback_pct)
        self.set_mix(params.mix_pct)
        self.set_bypass(params.bypass)

    def _clamp_percent(self, name: str, pct: float) -> Optional[float]:
        pct = float(pct)
        if not math.isfinite(pct):
            handle_error(f"{name} must be finite, got {pct}", exception_class=ValueError)
            return None
        clamped = min(max(pct, 0.0), 100.0)
        if clamped != pct:
            logger.debug(f"{name} {pct} clamped to {clamped}")
        return clamped

    def _recompute_read_position(self) -> None:
        """Split the delay into integer and fractional samples and place the read cursor."""
        samples = float(ms_to_samples(self._delay_ms, self._sample_rate))
        # Float rounding at the ceiling must not push past the buffer
        samples = min(samples, float(self._max_delay_samples))
        self._delay_samples_int = int(math.floor(samples))
        self._delay_fraction = samples - self._delay_samples_int

        read_pos = self._write_pos - self._delay_samples_int
        if read_pos < 0:
            read_pos += self._max_delay_samples
        self._read_pos = read_pos

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_sample(self, sample: float) -> float:
        """
        Process one input sample and return one output sample.

        O(1), allocation-free, never raises for finite input.
        """
        if self._bypassed:
            return sample

        buffer = self._buffer
        read_pos = self._read_pos

        if self._delay_samples_int < 1:
            delayed = sample
        else:
            delayed = buffer[read_pos]

        # read_pos - 1 == -1 wraps to the last slot
        frac = self._delay_fraction
        delayed = frac * buffer[read_pos - 1] + (1.0 - frac) * delayed

        buffer[self._write_pos] = sample + self._feedback * delayed

        self._write_pos += 1
        if self._write_pos >= self._max_delay_samples:
            self._write_pos = 0
        read_pos += 1
        if read_pos >= self._max_delay_samples:
            read_pos = 0
        self._read_pos = read_pos

        return self._mix * delayed + (1.0 - self._mix) * sample

    def process_block(
        self,
        samples: np.ndarray,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Process a 1-D block of samples.

        Equivalent to calling process_sample() on each element in order.
        Pass a float64 `samples` array and a preallocated float64 `out` of
        the same length to avoid any allocation.

        Args:
            samples: Input samples, shape (n,)
            out: Optional output array, shape (n,), dtype float64

        Returns:
            Output samples (float64), `out` if it was given

        Raises:
            ValueError: If the block is not 1-D or `out` does not match
        """
        x = np.asarray(samples, dtype=np.float64)
        if x.ndim != 1:
            raise ValueError(f"samples must be 1-D, got shape {x.shape}")
        if out is None:
            out = np.empty_like(x)
        elif out.shape != x.shape or out.dtype != np.float64:
            raise ValueError(
                f"out must be float64 with shape {x.shape}, "
                f"got {out.dtype} with shape {out.shape}"
            )

        if self._bypassed:
            out[:] = x
            return out
        if x.shape[0] == 0:
            return out

        self._write_pos, self._read_pos = _delay_process_numba(
            x,
            out,
            self._buffer,
            int(self._write_pos),
            int(self._read_pos),
            int(self._delay_samples_int),
            float(self._delay_fraction),
            float(self._feedback),
            float(self._mix),
        )
        return out

    def __repr__(self) -> str:
        return (
            f"DelayLine(sample_rate={self._sample_rate}, delay_ms={self._delay_ms}, "
            f"feedback_pct={self.feedback_pct}, mix_pct={self.mix_pct}, "
            f"bypassed={self._bypassed})"
        )
