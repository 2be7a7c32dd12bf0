"""Button debouncing and press-duration classification into logical events."""

from __future__ import annotations

import enum

DEBOUNCE_COUNT = 5
PRESS_DURATION_US = 500 * 1000
LONG_PRESS_DURATION_US = 2000 * 1000
VERY_LONG_PRESS_DURATION_US = 5000 * 1000


class ButtonEvent(enum.Enum):
    """Logical events produced from the physical button."""

    NONE = 0
    DOWN = 1
    CLICK_RELEASE = 2
    HOLD_BEGIN = 3
    HOLD_RELEASE = 4
    LONG_HOLD_BEGIN = 5
    LONG_HOLD_RELEASE = 6
    VERY_LONG_HOLD_BEGIN = 7
    VERY_LONG_HOLD_RELEASE = 8


class _State(enum.Enum):
    IDLE = 0
    PRESS_DOWN = 1
    HOLD_ACTIVE = 2
    LONG_HOLD_ACTIVE = 3
    VERY_LONG_HOLD_ACTIVE = 4


class Debouncer:
    """Integrating debouncer: the state flips only after a run of agreeing reads."""

    def __init__(self, count: int = DEBOUNCE_COUNT) -> None:
        if count < 1:
            raise ValueError("debounce count must be at least 1")
        self.count = count
        self._counter = 0
        self.stable = False

    def update(self, raw: bool) -> bool:
        """Feed one raw reading and return the debounced state."""
        if raw:
            self._counter = min(self._counter + 1, self.count)
        else:
            self._counter = max(self._counter - 1, 0)
        if self._counter == self.count:
            self.stable = True
        elif self._counter == 0:
            self.stable = False
        return self.stable


# For each held state: (threshold to advance, next state, event on advance, event on release)
_HOLD_STEPS = {
    _State.PRESS_DOWN: (
        PRESS_DURATION_US, _State.HOLD_ACTIVE,
        ButtonEvent.HOLD_BEGIN, ButtonEvent.CLICK_RELEASE,
    ),
    _State.HOLD_ACTIVE: (
        LONG_PRESS_DURATION_US, _State.LONG_HOLD_ACTIVE,
        ButtonEvent.LONG_HOLD_BEGIN, ButtonEvent.HOLD_RELEASE,
    ),
    _State.LONG_HOLD_ACTIVE: (
        VERY_LONG_PRESS_DURATION_US, _State.VERY_LONG_HOLD_ACTIVE,
        ButtonEvent.VERY_LONG_HOLD_BEGIN, ButtonEvent.LONG_HOLD_RELEASE,
    ),
    _State.VERY_LONG_HOLD_ACTIVE: (
        None, None, None, ButtonEvent.VERY_LONG_HOLD_RELEASE,
    ),
}


class ButtonStateMachine:
    """Turns a debounced button level into press, hold and release events."""

    def __init__(self) -> None:
        self._state = _State.IDLE
        self.press_start_us = 0

    @property
    def pressed(self) -> bool:
        return self._state is not _State.IDLE

    def update(self, down: bool, now_us: int) -> ButtonEvent:
        """Advance with the current level at time ``now_us`` and return the event."""
        if self._state is _State.IDLE:
            if down:
                self.press_start_us = now_us
                self._state = _State.PRESS_DOWN
                return ButtonEvent.DOWN
            return ButtonEvent.NONE

        threshold, next_state, begin_event, release_event = _HOLD_STEPS[self._state]
        if not down:
            self._state = _State.IDLE
            return release_event
        if threshold is not None and now_us - self.press_start_us > threshold:
            self._state = next_state
            return begin_event
        return ButtonEvent.NONE


class Button:
    """Debounced button producing logical events from raw readings."""

    def __init__(self, debounce_count: int = DEBOUNCE_COUNT) -> None:
        self.debouncer = Debouncer(debounce_count)
        self.machine = ButtonStateMachine()

    def poll(self, raw: bool, now_us: int) -> ButtonEvent:
        """Feed one raw reading taken at ``now_us`` and return the resulting event."""
        return self.machine.update(self.debouncer.update(raw), now_us)