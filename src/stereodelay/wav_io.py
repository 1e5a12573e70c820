"""
Offline rendering: run audio files through a StereoDelay.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import soundfile as sf

from stereodelay.config import handle_error
from stereodelay.logger import get_logger
from stereodelay.params import DelayParams
from stereodelay.stereo_delay import StereoDelay

logger = get_logger(__name__)

# Common subtypes:
# 'PCM_16' - 16-bit signed integer (CD quality)
# 'PCM_24' - 24-bit signed integer (professional)
# 'FLOAT'  - 32-bit float
# 'DOUBLE' - 64-bit float
_FLOAT_SUBTYPES = frozenset({"FLOAT", "DOUBLE"})


def read_audio(path: str) -> tuple[np.ndarray, int]:
    """
    Read an audio file.

    Returns:
        (data, sample_rate) with data of shape (frames, channels), float32
    """
    data, sample_rate = sf.read(path, dtype="float32", always_2d=True)
    logger.info(f"Read {path}: {data.shape[0]} frames, {data.shape[1]} channels, {sample_rate} Hz")
    return data, int(sample_rate)


def write_audio(
    path: str,
    data: np.ndarray,
    sample_rate: int,
    subtype: str = "PCM_16",
) -> None:
    """
    Write audio of shape (frames, channels) or (frames,) to a file.

    Integer subtypes are clipped to [-1, 1] first; float subtypes are
    written as-is.
    """
    data = np.asarray(data)
    if subtype.upper() not in _FLOAT_SUBTYPES:
        data = np.clip(data, -1.0, 1.0)
    sf.write(path, data, sample_rate, subtype=subtype)
    logger.info(f"Wrote {path}: {data.shape[0]} frames, {sample_rate} Hz, {subtype}")


def render_file(
    in_path: str,
    out_path: str,
    params: Optional[DelayParams] = None,
    tail_ms: float = 0.0,
    block_size: int = 1024,
    subtype: str = "PCM_16",
) -> int:
    """
    Stream an audio file through a StereoDelay and write the result.

    The effect gets one delay line per channel of the input file and is fed
    in blocks of `block_size` frames, the way a host would drive it.

    Args:
        in_path: Input audio file
        out_path: Output audio file (same sample rate and channel count)
        params: Delay parameters (default: DelayParams())
        tail_ms: Milliseconds of silence appended to the input so the
                 echoes can ring out
        block_size: Frames per processing block
        subtype: Output subtype (e.g. 'PCM_16', 'FLOAT')

    Returns:
        Number of frames written
    """
    if block_size <= 0:
        handle_error(
            f"block_size must be positive, got {block_size}",
            fatal=True,
            exception_class=ValueError,
        )
    if tail_ms < 0:
        handle_error(
            f"tail_ms must be non-negative, got {tail_ms}",
            fatal=True,
            exception_class=ValueError,
        )
    clip = subtype.upper() not in _FLOAT_SUBTYPES

    frames_written = 0
    with sf.SoundFile(in_path) as src:
        fx = StereoDelay(src.samplerate, channels=src.channels, params=params)
        fx.prepare()
        tail_frames = int(round(tail_ms * src.samplerate / 1000.0))
        logger.info(
            f"Rendering {in_path} -> {out_path}: {src.frames} frames "
            f"+ {tail_frames} tail, {src.channels} channels, {src.samplerate} Hz"
        )

        with sf.SoundFile(
            out_path,
            mode="w",
            samplerate=src.samplerate,
            channels=src.channels,
            subtype=subtype,
        ) as dst:
            out = np.empty((block_size, src.channels), dtype=np.float64)

            def emit(block: np.ndarray) -> None:
                nonlocal frames_written
                y = fx.process_block(block, out=out[: block.shape[0]])
                dst.write(np.clip(y, -1.0, 1.0) if clip else y)
                frames_written += block.shape[0]

            for block in src.blocks(blocksize=block_size, dtype="float64", always_2d=True):
                emit(block)

            silence = np.zeros((block_size, src.channels), dtype=np.float64)
            remaining = tail_frames
            while remaining > 0:
                n = min(block_size, remaining)
                emit(silence[:n])
                remaining -= n

    logger.info(f"Closed {out_path}: {frames_written} frames written")
    return frames_written
