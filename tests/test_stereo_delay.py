"""
Tests for StereoDelay.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import math
import threading

import numpy as np
import pytest

from stereodelay import DelayLine, DelayParams, ErrorMode, Param, StereoDelay, set_error_mode

SR = 1000


def stereo_impulse(n: int, channel: int = 0) -> np.ndarray:
    x = np.zeros((n, 2), dtype=np.float64)
    x[0, channel] = 1.0
    return x


class TestStereoDelayBasics:
    def test_create_defaults(self):
        fx = StereoDelay()
        assert fx.sample_rate == 44100
        assert fx.channels == 2
        assert fx.params == DelayParams()
        assert fx.num_parameters == 4
        assert len(fx.lines) == 2
        assert all(isinstance(line, DelayLine) for line in fx.lines)

    def test_lines_are_independent_objects(self):
        fx = StereoDelay(SR)
        left, right = fx.lines
        assert left is not right
        assert left.buffer is not right.buffer

    def test_initial_params_reach_lines(self):
        fx = StereoDelay(SR, params=DelayParams(120.0, 30.0, 70.0, True))
        for line in fx.lines:
            assert line.delay_ms == 120.0
            assert line.feedback == pytest.approx(0.3)
            assert line.mix == pytest.approx(0.7)
            assert line.bypassed is True

    def test_invalid_channels(self):
        with pytest.raises(ValueError, match="channels must be >= 1"):
            StereoDelay(SR, channels=0)

    def test_invalid_sample_rate(self):
        with pytest.raises(ValueError, match="sample_rate must be positive"):
            StereoDelay(0)

    def test_repr(self):
        r = repr(StereoDelay(SR))
        assert "StereoDelay" in r
        assert "1000" in r


class TestStereoDelayParameters:
    def test_set_parameter_updates_requested_value(self):
        fx = StereoDelay(SR)
        fx.set_parameter(Param.DELAY, 250.0)
        assert fx.get_parameter(Param.DELAY) == 250.0
        assert fx.params.delay_ms == 250.0

    def test_set_parameter_by_index(self):
        fx = StereoDelay(SR)
        fx.set_parameter(1, 45.0)
        fx.set_parameter(3, 1)
        assert fx.get_parameter(Param.FEEDBACK) == 45.0
        assert fx.get_parameter(3) == 1.0

    def test_changes_wait_for_next_block(self):
        fx = StereoDelay(SR)
        fx.set_parameter(Param.DELAY, 10.0)
        fx.set_parameter(Param.MIX, 100.0)
        for line in fx.lines:
            assert line.delay_ms == 0.0
            assert line.mix == pytest.approx(0.5)

        fx.process_block(np.zeros((4, 2)))
        for line in fx.lines:
            assert line.delay_ms == 10.0
            assert line.mix == 1.0

    def test_apply_pending_counts_changes(self):
        fx = StereoDelay(SR)
        fx.set_parameter(Param.DELAY, 1.0)
        fx.set_parameter(Param.DELAY, 2.0)
        fx.set_parameter(Param.BYPASS, 1.0)
        assert fx.apply_pending() == 2
        assert fx.apply_pending() == 0
        assert fx.lines[0].delay_ms == 2.0
        assert fx.lines[1].bypassed is True

    def test_engine_clamps_but_request_is_kept(self):
        fx = StereoDelay(SR)
        fx.set_parameter(Param.DELAY, 9000.0)
        fx.set_parameter(Param.FEEDBACK, 130.0)
        fx.apply_pending()
        assert fx.get_parameter(Param.DELAY) == 9000.0
        assert fx.lines[0].delay_ms == pytest.approx(2000.0)
        assert fx.lines[0].feedback == 1.0

    def test_non_finite_value_strict_raises(self):
        fx = StereoDelay(SR)
        with pytest.raises(ValueError, match="DELAY value must be finite"):
            fx.set_parameter(Param.DELAY, math.nan)

    def test_non_finite_value_lenient_dropped(self):
        set_error_mode(ErrorMode.LENIENT)
        fx = StereoDelay(SR, params=DelayParams(delay_ms=5.0))
        fx.set_parameter(Param.DELAY, math.inf)
        assert fx.get_parameter(Param.DELAY) == 5.0
        assert fx.apply_pending() == 0

    def test_set_params(self):
        fx = StereoDelay(SR)
        fx.set_params(DelayParams(10.0, 20.0, 30.0, True))
        fx.apply_pending()
        assert fx.lines[1].params == DelayParams(10.0, 20.0, 30.0, True)

    def test_set_parameter_from_thread(self):
        fx = StereoDelay(SR)
        done = threading.Event()

        def writer():
            fx.set_parameter(Param.DELAY, 42.0)
            done.set()

        t = threading.Thread(target=writer)
        t.start()
        done.wait(timeout=2.0)
        t.join(timeout=2.0)

        fx.process_block(np.zeros((1, 2)))
        assert fx.lines[0].delay_ms == 42.0

    def test_concurrent_writers_agree_with_engine(self):
        for _ in range(10):
            fx = StereoDelay(SR)
            start = threading.Barrier(3)

            def writer(param, values):
                start.wait()
                for v in values:
                    fx.set_parameter(param, v)

            threads = [
                threading.Thread(target=writer, args=(Param.DELAY, np.linspace(1, 1000, 2000))),
                threading.Thread(target=writer, args=(Param.FEEDBACK, np.linspace(1, 99, 2000))),
                threading.Thread(target=writer, args=(Param.MIX, np.linspace(99, 1, 2000))),
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=10.0)

            fx.apply_pending()
            engine = fx.lines[0].params
            for param in (Param.DELAY, Param.FEEDBACK, Param.MIX):
                assert engine.get(param) == pytest.approx(fx.params.get(param))
            assert fx.params == DelayParams(1000.0, 99.0, 1.0, False)

    def test_concurrent_writers_and_prepare(self):
        fx = StereoDelay(SR)
        done = threading.Event()

        def writer():
            for v in np.linspace(1, 500, 3000):
                fx.set_parameter(Param.DELAY, v)
            done.set()

        t = threading.Thread(target=writer)
        t.start()
        while not done.is_set():
            fx.prepare()
        t.join(timeout=10.0)

        fx.apply_pending()
        assert fx.params.delay_ms == 500.0
        assert fx.lines[1].delay_ms == 500.0


class TestStereoDelayState:
    def test_get_state(self):
        fx = StereoDelay(SR, params=DelayParams(250.0, 40.0, 60.0, False))
        assert fx.get_state() == {"Delay": 250.0, "Feedback": 40.0, "Mix": 60.0, "Bypass": 0.0}

    def test_state_round_trip(self):
        a = StereoDelay(SR, params=DelayParams(321.0, 12.0, 88.0, True))
        b = StereoDelay(SR)
        b.set_state(a.get_state())
        assert b.params == a.params
        b.apply_pending()
        assert b.lines[0].params == a.params

    def test_partial_state_keeps_current(self):
        fx = StereoDelay(SR, params=DelayParams(100.0, 10.0, 20.0, False))
        fx.set_state({"Feedback": 55.0, "Color": 3})
        assert fx.params == DelayParams(100.0, 55.0, 20.0, False)

    def test_non_finite_state_applies_nothing_strict(self):
        fx = StereoDelay(SR, params=DelayParams(10.0, 20.0, 30.0, False))
        with pytest.raises(ValueError, match="FEEDBACK value must be finite"):
            fx.set_state({"Delay": 100, "Feedback": "nan"})
        assert fx.params == DelayParams(10.0, 20.0, 30.0, False)
        assert fx.apply_pending() == 0

    def test_non_finite_state_applies_nothing_lenient(self):
        set_error_mode(ErrorMode.LENIENT)
        fx = StereoDelay(SR, params=DelayParams(10.0, 20.0, 30.0, False))
        fx.set_state({"Delay": 100, "Mix": 50, "Bypass": math.inf})
        assert fx.params == DelayParams(10.0, 20.0, 30.0, False)
        assert fx.apply_pending() == 0

    def test_non_numeric_state_applies_nothing(self):
        fx = StereoDelay(SR, params=DelayParams(10.0, 20.0, 30.0, False))
        with pytest.raises(ValueError, match="not a number"):
            fx.set_state({"Delay": 100, "Mix": "loud"})
        assert fx.params == DelayParams(10.0, 20.0, 30.0, False)

    def test_set_params_non_finite_applies_nothing(self):
        fx = StereoDelay(SR)
        with pytest.raises(ValueError, match="MIX value must be finite"):
            fx.set_params(DelayParams(100.0, 10.0, math.nan))
        assert fx.params == DelayParams()
        assert fx.apply_pending() == 0


class TestStereoDelayProcessing:
    def test_output_shape_and_dtype(self):
        fx = StereoDelay(SR, params=DelayParams(delay_ms=3.0))
        y = fx.process_block(np.zeros((64, 2), dtype=np.float32))
        assert y.shape == (64, 2)
        assert y.dtype == np.float64

    def test_channels_independent(self):
        fx = StereoDelay(SR, params=DelayParams(delay_ms=10.0, feedback_pct=50.0, mix_pct=100.0))
        y = fx.process_block(stereo_impulse(40, channel=0))
        assert y[10, 0] == pytest.approx(1.0)
        assert y[20, 0] == pytest.approx(0.5)
        assert not y[:, 1].any()

    def test_matches_single_delay_line(self):
        params = DelayParams(delay_ms=7.5, feedback_pct=40.0, mix_pct=60.0)
        fx = StereoDelay(SR, params=params)
        ref = DelayLine(SR, 7.5, 40.0, 60.0)
        x = np.random.default_rng(9).uniform(-1, 1, (500, 2))
        y = fx.process_block(x)
        expected = np.array([ref.process_sample(s) for s in x[:, 1]])
        np.testing.assert_allclose(y[:, 1], expected, atol=1e-12)

    def test_bypass_parameter_is_identity(self):
        fx = StereoDelay(SR, params=DelayParams(delay_ms=10.0, feedback_pct=50.0))
        fx.set_parameter(Param.BYPASS, 1)
        x = np.random.default_rng(10).uniform(-1, 1, (128, 2))
        np.testing.assert_array_equal(fx.process_block(x), x)

    def test_into_preallocated_out(self):
        fx = StereoDelay(SR, params=DelayParams(delay_ms=2.0, mix_pct=100.0))
        out = np.zeros((8, 2))
        result = fx.process_block(stereo_impulse(8, channel=1), out=out)
        assert result is out
        assert out[2, 1] == pytest.approx(1.0)

    def test_mono_1d_block(self):
        fx = StereoDelay(SR, channels=1, params=DelayParams(delay_ms=2.0, mix_pct=100.0))
        x = np.zeros(8)
        x[0] = 1.0
        y = fx.process_block(x)
        assert y.shape == (8,)
        assert y[2] == pytest.approx(1.0)

    def test_channel_mismatch_raises(self):
        fx = StereoDelay(SR)
        with pytest.raises(ValueError, match="block must have shape"):
            fx.process_block(np.zeros((16, 3)))
        with pytest.raises(ValueError, match="block must have shape"):
            fx.process_block(np.zeros(16))

    def test_out_mismatch_raises(self):
        fx = StereoDelay(SR)
        with pytest.raises(ValueError, match="out must be float64"):
            fx.process_block(np.zeros((16, 2)), out=np.zeros((8, 2)))


class TestStereoDelayLifecycle:
    def test_prepare_clears_history(self):
        fx = StereoDelay(SR, params=DelayParams(delay_ms=10.0, feedback_pct=90.0, mix_pct=100.0))
        fx.process_block(np.random.default_rng(11).uniform(-1, 1, (300, 2)))
        fx.prepare()
        y = fx.process_block(np.zeros((2100, 2)))
        assert not y.any()

    def test_prepare_applies_pending_params(self):
        fx = StereoDelay(SR)
        fx.set_parameter(Param.DELAY, 77.0)
        fx.prepare()
        assert fx.lines[0].delay_ms == 77.0
        assert fx.apply_pending() == 0

    def test_prepare_new_sample_rate_rebuilds(self):
        fx = StereoDelay(SR, params=DelayParams(delay_ms=10.0))
        old = fx.lines
        fx.prepare(48000)
        assert fx.sample_rate == 48000
        assert fx.lines[0] is not old[0]
        assert fx.lines[0].max_delay_samples == 96000
        assert fx.lines[0].delay_samples_int == 480

    def test_prepare_same_sample_rate_keeps_lines(self):
        fx = StereoDelay(SR)
        old = fx.lines
        fx.prepare(SR)
        assert fx.lines == old

    def test_reset(self):
        fx = StereoDelay(SR, params=DelayParams(delay_ms=5.0, mix_pct=100.0))
        fx.process_block(stereo_impulse(2))
        fx.reset()
        assert not fx.process_block(np.zeros((10, 2))).any()
