"""
ParameterQueue - hands parameter changes from control threads to the audio thread.

Any thread (GUI, MIDI, network) calls ``put(param, value)``, which pushes onto
a ``queue.Queue``. The audio thread calls ``drain()`` at the start of each
block and applies the returned commands before touching any sample, so the
engine's derived cursor state is only ever written by the thread that reads
it.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from __future__ import annotations

import queue

from stereodelay.params import Param


class ParameterQueue:
    """
    Thread-safe FIFO of (Param, value) commands.

    Example:
        commands = ParameterQueue()

        # From the GUI thread:
        commands.put(Param.DELAY, 375.0)

        # In the audio callback, before processing the block:
        for param, value in commands.drain():
            apply(param, value)
    """

    def __init__(self):
        self._queue: queue.Queue[tuple[Param, float]] = queue.Queue()

    def put(self, param: Param, value: float) -> None:
        """Thread-safe: queue a parameter change from any thread."""
        self._queue.put_nowait((param, float(value)))

    def drain(self) -> list[tuple[Param, float]]:
        """
        Remove and return all pending commands, oldest first.

        Only the latest value per parameter is kept; the order of first
        appearance is preserved.
        """
        latest: dict[Param, float] = {}
        try:
            while True:
                param, value = self._queue.get_nowait()
                latest[param] = value
        except queue.Empty:
            pass
        return list(latest.items())

    def empty(self) -> bool:
        """True if no commands are pending (advisory across threads)."""
        return self._queue.empty()

    def __repr__(self) -> str:
        return f"ParameterQueue(pending={self._queue.qsize()})"
