"""
Example 01: Render Echo - Offline delay to WAV

Synthesizes a few plucked notes, runs them through a StereoDelay with
three different settings and writes each result to a file.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from pathlib import Path

import numpy as np

from stereodelay import DelayParams, StereoDelay, write_audio

SAMPLE_RATE = 44100
DURATION_SECONDS = 4

OUTPUT_DIR = Path(__file__).parent / "audio"


def plucks(sample_rate: int, seconds: float) -> np.ndarray:
    """Three short decaying tones, left and right identical."""
    n = int(seconds * sample_rate)
    t = np.arange(n) / sample_rate
    signal = np.zeros(n)
    for onset, freq in ((0.0, 220.0), (0.5, 330.0), (1.0, 440.0)):
        start = int(onset * sample_rate)
        tt = t[: n - start]
        signal[start:] += 0.3 * np.sin(2 * np.pi * freq * tt) * np.exp(-tt * 12.0)
    return np.column_stack([signal, signal])


SETTINGS = {
    "slapback": DelayParams(delay_ms=90.0, feedback_pct=10.0, mix_pct=40.0),
    "quarter_note": DelayParams(delay_ms=375.0, feedback_pct=45.0, mix_pct=50.0),
    "fractional_chorus": DelayParams(delay_ms=12.34, feedback_pct=70.0, mix_pct=50.0),
}

print("=== stereodelay Example 01: Render Echo ===", flush=True)

OUTPUT_DIR.mkdir(exist_ok=True)
dry = plucks(SAMPLE_RATE, DURATION_SECONDS)

for name, params in SETTINGS.items():
    fx = StereoDelay(SAMPLE_RATE, params=params)
    wet = fx.process_block(dry)
    path = OUTPUT_DIR / f"echo_{name}.wav"
    write_audio(str(path), wet, SAMPLE_RATE)
    print(
        f"  {name}: {params.delay_ms} ms, {params.feedback_pct}% feedback "
        f"-> {path.name}",
        flush=True,
    )

print("\nDone!", flush=True)
