"""
Tests for DelayParams and Param.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import dataclasses

import pytest

from stereodelay import DelayParams, Param


class TestParam:
    def test_tags(self):
        assert [p.value for p in Param] == ["Delay", "Feedback", "Mix", "Bypass"]

    def test_index_order(self):
        assert list(Param)[0] is Param.DELAY
        assert list(Param)[3] is Param.BYPASS


class TestDelayParams:
    def test_defaults(self):
        p = DelayParams()
        assert p.delay_ms == 0.0
        assert p.feedback_pct == 0.0
        assert p.mix_pct == 50.0
        assert p.bypass is False

    def test_frozen(self):
        p = DelayParams()
        with pytest.raises(dataclasses.FrozenInstanceError):
            p.delay_ms = 10.0

    def test_get(self):
        p = DelayParams(250.0, 40.0, 75.0, True)
        assert p.get(Param.DELAY) == 250.0
        assert p.get(Param.FEEDBACK) == 40.0
        assert p.get(Param.MIX) == 75.0
        assert p.get(Param.BYPASS) == 1.0

    def test_with_value_returns_copy(self):
        p = DelayParams()
        q = p.with_value(Param.DELAY, 300)
        assert q.delay_ms == 300.0
        assert p.delay_ms == 0.0

    def test_with_value_bypass_from_number(self):
        assert DelayParams().with_value(Param.BYPASS, 1.0).bypass is True
        assert DelayParams(bypass=True).with_value(Param.BYPASS, 0.0).bypass is False


class TestDelayParamsState:
    def test_to_state(self):
        state = DelayParams(250.0, 40.0, 50.0, True).to_state()
        assert state == {"Delay": 250.0, "Feedback": 40.0, "Mix": 50.0, "Bypass": 1.0}

    def test_round_trip(self):
        p = DelayParams(1234.5, 12.5, 99.0, False)
        assert DelayParams.from_state(p.to_state()) == p

    def test_missing_tags_keep_base(self):
        base = DelayParams(100.0, 20.0, 30.0, False)
        p = DelayParams.from_state({"Mix": 80.0}, base=base)
        assert p == DelayParams(100.0, 20.0, 80.0, False)

    def test_missing_tags_keep_defaults(self):
        assert DelayParams.from_state({}) == DelayParams()

    def test_unknown_tags_ignored(self):
        p = DelayParams.from_state({"Delay": 5.0, "Tempo": 120.0})
        assert p.delay_ms == 5.0

    def test_numeric_strings_accepted(self):
        p = DelayParams.from_state({"Delay": "250", "Bypass": "1"})
        assert p.delay_ms == 250.0
        assert p.bypass is True

    def test_bad_value_raises(self):
        with pytest.raises(ValueError, match="'Feedback' is not a number"):
            DelayParams.from_state({"Feedback": "lots"})
