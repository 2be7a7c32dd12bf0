import pytest

from ghostlooper.button import ButtonEvent
from ghostlooper.models import DEFAULT_BPM
from ghostlooper.tap_tempo import (
    MAX_BPM,
    MIN_BPM,
    TIMEOUT_US,
    TapResult,
    TapTempo,
    calc_bpm,
)

CLICK = ButtonEvent.CLICK_RELEASE
HALF_SECOND = 500_000


def test_calc_bpm_half_second_is_default_tempo():
    assert calc_bpm(0, HALF_SECOND, 1) == DEFAULT_BPM
    assert calc_bpm(1_000, 1_000 + 3 * HALF_SECOND, 3) == DEFAULT_BPM


def test_calc_bpm_zero_delta_is_minimum():
    assert calc_bpm(5, 5, 1) == MIN_BPM


@pytest.mark.parametrize("delta", [1, 100, 10_000, 100_000])
def test_calc_bpm_fast_taps_clamped_to_max(delta):
    assert calc_bpm(0, delta, 1) == MAX_BPM


def test_calc_bpm_slow_taps_clamped_to_min():
    assert calc_bpm(0, 10 * TIMEOUT_US, 1) == MIN_BPM


@pytest.mark.parametrize("delta", range(250_000, 1_500_001, 50_000))
def test_calc_bpm_in_range(delta):
    assert MIN_BPM <= calc_bpm(0, delta, 1) <= MAX_BPM


def _entered():
    tt = TapTempo()
    assert tt.handle_event(CLICK, 0) is TapResult.NONE
    return tt


def test_first_click_enters_collect():
    tt = TapTempo()
    assert tt.active() is False
    tt.handle_event(CLICK, 0)
    assert tt.active() is True


def test_tap_sequence():
    tt = _entered()
    t0 = 100_000
    assert tt.handle_event(CLICK, t0) is TapResult.NONE
    assert tt.handle_event(CLICK, t0 + HALF_SECOND) is TapResult.PRELIM
    assert tt.bpm == DEFAULT_BPM
    assert tt.handle_event(CLICK, t0 + 2 * HALF_SECOND) is TapResult.FINAL
    assert tt.handle_event(CLICK, t0 + 3 * HALF_SECOND) is TapResult.FINAL
    assert tt.bpm == DEFAULT_BPM
    # Count reset after four taps: the next tap starts a new series.
    assert tt.handle_event(CLICK, t0 + 4 * HALF_SECOND) is TapResult.NONE
    assert tt.active() is True


def test_prelim_bpm_matches_calc():
    tt = _entered()
    tt.handle_event(CLICK, 10_000)
    tt.handle_event(CLICK, 410_000)
    assert tt.bpm == calc_bpm(10_000, 410_000, 1)


def test_timeout_returns_to_idle():
    tt = _entered()
    tt.handle_event(CLICK, 0)
    assert tt.handle_event(ButtonEvent.NONE, TIMEOUT_US) is TapResult.NONE
    assert tt.active() is True
    assert tt.handle_event(ButtonEvent.NONE, TIMEOUT_US + 1) is TapResult.NONE
    assert tt.active() is False


def test_timeout_ignored_without_taps():
    tt = _entered()
    tt.handle_event(ButtonEvent.NONE, 100 * TIMEOUT_US)
    assert tt.active() is True


@pytest.mark.parametrize("event", [ButtonEvent.HOLD_RELEASE, ButtonEvent.LONG_HOLD_RELEASE])
def test_exit_from_idle(event):
    tt = TapTempo()
    assert tt.handle_event(event, 0) is TapResult.EXIT
    assert tt.active() is False


@pytest.mark.parametrize("event", [ButtonEvent.HOLD_RELEASE, ButtonEvent.LONG_HOLD_RELEASE])
def test_exit_from_collect(event):
    tt = _entered()
    tt.handle_event(CLICK, 10)
    assert tt.handle_event(event, 20) is TapResult.EXIT
    assert tt.active() is False


def test_other_events_ignored_in_collect():
    tt = _entered()
    assert tt.handle_event(ButtonEvent.DOWN, 10) is TapResult.NONE
    assert tt.handle_event(ButtonEvent.HOLD_BEGIN, 20) is TapResult.NONE
    assert tt.active() is True
    assert tt.bpm == DEFAULT_BPM