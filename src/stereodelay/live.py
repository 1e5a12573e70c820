"""
LiveDelay - runs a StereoDelay on a sound-device input/output stream.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np
import sounddevice as sd

from stereodelay.config import handle_error
from stereodelay.logger import get_logger
from stereodelay.params import DelayParams, Param
from stereodelay.stereo_delay import StereoDelay

logger = get_logger(__name__)


class LiveDelay:
    """
    Real-time delay on the system's audio input and output.

    Uses a sounddevice (PortAudio) duplex stream. The stream callback runs on
    PortAudio's audio thread and only calls StereoDelay.process_block();
    set_parameter() may be called from any other thread.

    Args:
        params: Initial delay parameters (default: DelayParams())
        sample_rate: Stream sample rate in Hz (default: 44100)
        channels: Input/output channel count (default: 2)
        device: Device index/name, or an (input, output) pair (default: system default)
        blocksize: Frames per callback (default: 512)
        latency: 'low', 'high', or seconds (default: 'low')
        max_blocksize: Largest callback block processed in one pass; larger
                       blocks are split (default: 4096)

    Example:
        with LiveDelay(DelayParams(delay_ms=350.0, feedback_pct=45.0)) as live:
            live.set_parameter(Param.MIX, 70.0)
            sd.sleep(10_000)
    """

    def __init__(
        self,
        params: Optional[DelayParams] = None,
        sample_rate: int = 44100,
        channels: int = 2,
        device: Union[int, str, tuple, None] = None,
        blocksize: int = 512,
        latency: Union[str, float] = "low",
        max_blocksize: int = 4096,
    ):
        self._effect = StereoDelay(sample_rate, channels=channels, params=params)
        self._device = device
        self._blocksize = blocksize
        self._latency = latency
        self._stream: Optional[sd.Stream] = None
        # Working buffers for the audio callback, allocated once
        capacity = max(blocksize, max_blocksize)
        self._in = np.zeros((capacity, channels), dtype=np.float64)
        self._out = np.zeros((capacity, channels), dtype=np.float64)
        self._frames_processed = 0

    @property
    def effect(self) -> StereoDelay:
        """The underlying StereoDelay."""
        return self._effect

    @property
    def blocksize(self) -> int:
        return self._blocksize

    @property
    def frames_processed(self) -> int:
        """Frames processed since start()."""
        return self._frames_processed

    @property
    def is_running(self) -> bool:
        """True while the stream is active."""
        return self._stream is not None and self._stream.active

    def set_parameter(self, param: Union[Param, int], value: float) -> None:
        """Thread-safe: applied at the start of the next audio block."""
        self._effect.set_parameter(param, value)

    def _callback(self, indata, outdata, frames, time_info, status) -> None:
        if status:
            logger.warning(f"Stream status: {status}")
        # Buffers are sized in __init__; oversized blocks go through in chunks
        capacity = self._in.shape[0]
        for start in range(0, frames, capacity):
            n = min(capacity, frames - start)
            x = self._in[:n]
            y = self._out[:n]
            np.copyto(x, indata[start:start + n])
            self._effect.process_block(x, out=y)
            np.copyto(outdata[start:start + n], y, casting="same_kind")
        self._frames_processed += frames

    def start(self) -> None:
        """
        Open the duplex stream and start processing.

        Raises:
            RuntimeError: If already running (in STRICT mode)
        """
        if self._stream is not None:
            if handle_error("Already running. Call stop() first."):
                return
        self._effect.prepare()
        self._frames_processed = 0
        self._stream = sd.Stream(
            samplerate=self._effect.sample_rate,
            channels=self._effect.channels,
            dtype="float32",
            device=self._device,
            blocksize=self._blocksize,
            latency=self._latency,
            callback=self._callback,
        )
        self._stream.start()
        logger.info(
            f"Live delay started: {self._effect.channels} channels, "
            f"{self._effect.sample_rate} Hz, blocksize {self._blocksize}"
        )

    def stop(self) -> None:
        """Stop and close the stream. Safe to call when not running."""
        if self._stream is None:
            return
        self._stream.stop()
        self._stream.close()
        self._stream = None
        logger.info(f"Live delay stopped after {self._frames_processed} frames")

    def __enter__(self) -> LiveDelay:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def __repr__(self) -> str:
        return (
            f"LiveDelay(sample_rate={self._effect.sample_rate}, "
            f"channels={self._effect.channels}, blocksize={self._blocksize})"
        )
