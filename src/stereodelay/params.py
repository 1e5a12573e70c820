"""
Delay parameters and their persisted key/value form.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping


class Param(Enum):
    """
    Index of the four user-facing delay parameters.

    The value is the tag used in the persisted state mapping.
    """
    DELAY = "Delay"        # milliseconds
    FEEDBACK = "Feedback"  # percent
    MIX = "Mix"            # percent
    BYPASS = "Bypass"      # 0/1


@dataclass(frozen=True)
class DelayParams:
    """
    Immutable snapshot of the four delay parameters, in caller units.

    Defaults match a freshly loaded effect: no delay, no feedback, half wet.
    """
    delay_ms: float = 0.0
    feedback_pct: float = 0.0
    mix_pct: float = 50.0
    bypass: bool = False

    def get(self, param: Param) -> float:
        """Return a parameter value as a float (bypass as 0.0/1.0)."""
        if param is Param.DELAY:
            return float(self.delay_ms)
        if param is Param.FEEDBACK:
            return float(self.feedback_pct)
        if param is Param.MIX:
            return float(self.mix_pct)
        return 1.0 if self.bypass else 0.0

    def with_value(self, param: Param, value: float) -> DelayParams:
        """Return a copy with one parameter replaced."""
        if param is Param.DELAY:
            return replace(self, delay_ms=float(value))
        if param is Param.FEEDBACK:
            return replace(self, feedback_pct=float(value))
        if param is Param.MIX:
            return replace(self, mix_pct=float(value))
        return replace(self, bypass=bool(value))

    def to_state(self) -> dict[str, float]:
        """
        Flatten to a tagged key/value mapping.

        Example:
            >>> DelayParams(250.0, 40.0, 50.0, True).to_state()
            {'Delay': 250.0, 'Feedback': 40.0, 'Mix': 50.0, 'Bypass': 1.0}
        """
        return {param.value: self.get(param) for param in Param}

    @classmethod
    def from_state(
        cls,
        state: Mapping[str, Any],
        base: DelayParams | None = None,
    ) -> DelayParams:
        """
        Build parameters from a tagged mapping.

        Unknown tags are ignored and missing tags keep the value from `base`
        (or the defaults), so partial or newer state loads cleanly.

        Raises:
            ValueError: If a known tag holds a value that is not a number
        """
        params = base if base is not None else cls()
        for param in Param:
            if param.value not in state:
                continue
            raw = state[param.value]
            try:
                value = float(raw)
            except (TypeError, ValueError) as exc:
                raise ValueError(
                    f"State value for {param.value!r} is not a number: {raw!r}"
                ) from exc
            params = params.with_value(param, value)
        return params
