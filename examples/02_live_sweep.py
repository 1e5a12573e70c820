"""
Example 02: Live Sweep - Changing parameters while audio runs

Runs the sound card input through a LiveDelay and steps the delay time
from the main thread. Each change is picked up at the start of the next
audio block. Use headphones to avoid acoustic feedback.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import sounddevice as sd

import stereodelay as sdl
from stereodelay import DelayParams, LiveDelay, Param

sdl.set_global_logging("INFO")

STEP_SECONDS = 3
DELAY_STEPS_MS = [120.0, 250.0, 500.0, 1000.0]

print("=== stereodelay Example 02: Live Sweep ===", flush=True)

with LiveDelay(DelayParams(feedback_pct=40.0, mix_pct=50.0)) as live:
    for delay_ms in DELAY_STEPS_MS:
        print(f"  delay {delay_ms} ms", flush=True)
        live.set_parameter(Param.DELAY, delay_ms)
        sd.sleep(STEP_SECONDS * 1000)

    print("  bypass", flush=True)
    live.set_parameter(Param.BYPASS, 1)
    sd.sleep(STEP_SECONDS * 1000)

print("\nDone!", flush=True)
