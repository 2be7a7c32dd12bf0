"""Tap-tempo detection and BPM estimation."""

from __future__ import annotations

import enum

from .button import ButtonEvent
from .models import DEFAULT_BPM

MIN_BPM = 40
MAX_BPM = 240
MAX_TAPS = 4
TIMEOUT_US = 1000 * 1000

_EXIT_EVENTS = (ButtonEvent.HOLD_RELEASE, ButtonEvent.LONG_HOLD_RELEASE)


class TapResult(enum.Enum):
    """Outcome of feeding one button event to the tap-tempo detector."""

    NONE = 0
    PRELIM = 1  # two taps: provisional tempo
    FINAL = 2  # three or four taps: averaged tempo
    EXIT = 3  # hold released: leave tap-tempo mode


def calc_bpm(first_us: int, last_us: int, intervals: int) -> int:
    """Tempo implied by ``intervals`` beats between two timestamps, clamped to range."""
    delta_us = last_us - first_us
    if delta_us == 0:
        return MIN_BPM
    delta_ms = (delta_us + 500) // 1000
    if delta_ms == 0:
        return MAX_BPM
    bpm = (60000 * intervals + delta_ms // 2) // delta_ms
    return max(MIN_BPM, min(MAX_BPM, bpm))


class _Phase(enum.Enum):
    IDLE = 0
    COLLECT = 1


class TapTempo:
    """Collects taps and estimates a tempo from their spacing."""

    def __init__(self) -> None:
        self._phase = _Phase.IDLE
        self._stamps = [0] * MAX_TAPS
        self._count = 0
        self.bpm = DEFAULT_BPM

    def active(self) -> bool:
        """True while taps are being collected."""
        return self._phase is _Phase.COLLECT

    def handle_event(self, event: ButtonEvent, now_us: int) -> TapResult:
        """Feed a button event observed at ``now_us``."""
        if self._phase is _Phase.IDLE:
            if event in _EXIT_EVENTS:
                return TapResult.EXIT
            if event is ButtonEvent.CLICK_RELEASE:
                self._count = 0
                self._phase = _Phase.COLLECT
                self._stamps[0] = now_us
            return TapResult.NONE

        if event in _EXIT_EVENTS:
            self._phase = _Phase.IDLE
            return TapResult.EXIT
        if self._count and now_us - self._stamps[self._count - 1] > TIMEOUT_US:
            self._count = 0
            self._phase = _Phase.IDLE
            return TapResult.NONE
        if event is not ButtonEvent.CLICK_RELEASE:
            return TapResult.NONE

        if self._count < MAX_TAPS:
            self._stamps[self._count] = now_us
            self._count += 1
        if self._count >= 2:
            self.bpm = calc_bpm(self._stamps[0], self._stamps[self._count - 1], self._count - 1)
        if self._count == 2:
            return TapResult.PRELIM
        if self._count == 3:
            return TapResult.FINAL
        if self._count == MAX_TAPS:
            self._count = 0
            return TapResult.FINAL
        return TapResult.NONE