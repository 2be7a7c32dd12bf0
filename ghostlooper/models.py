"""Core data types shared by the sequencer: tracks, playback status and timing constants."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

DEFAULT_BPM = 120
BARS = 2
BEATS_PER_BAR = 4
STEPS_PER_BEAT = 4  # 16th-note resolution

TOTAL_STEPS = STEPS_PER_BEAT * BEATS_PER_BAR * BARS
CLICK_DIV = TOTAL_STEPS // BARS // STEPS_PER_BEAT


class LooperState(enum.Enum):
    """Playback or recording mode of the looper."""

    WAITING = 0
    PLAYING = 1
    RECORDING = 2
    TRACK_SWITCH = 3
    TAP_TEMPO = 4
    CLEAR_TRACKS = 5


def _empty_pattern() -> list[bool]:
    return [False] * TOTAL_STEPS


@dataclass
class Track:
    """A drum track: the note it plays and its step patterns."""

    name: str
    note: int
    channel: int
    pattern: list[bool] = field(default_factory=_empty_pattern)
    hold_pattern: list[bool] = field(default_factory=_empty_pattern)
    ghost_pattern: list[bool] = field(default_factory=_empty_pattern)
    fill_pattern: list[bool] = field(default_factory=_empty_pattern)

    def __post_init__(self) -> None:
        for label in ("pattern", "hold_pattern", "ghost_pattern", "fill_pattern"):
            steps = getattr(self, label)
            if len(steps) != TOTAL_STEPS:
                raise ValueError(
                    f"{label} must have {TOTAL_STEPS} steps, got {len(steps)}"
                )

    def clear(self) -> None:
        """Erase the recorded, ghost and fill patterns."""
        self.pattern[:] = _empty_pattern()
        self.ghost_pattern[:] = _empty_pattern()
        self.fill_pattern[:] = _empty_pattern()


@dataclass
class LooperStatus:
    """Runtime playback state of the looper."""

    bpm: int = DEFAULT_BPM
    step_duration_ms: int = 0
    state: LooperState = LooperState.WAITING
    current_track: int = 0
    current_step: int = 0
    recording_step_count: int = 0
    last_step_time_us: int = 0
    button_press_start_us: int = 0
    ghost_bar_counter: int = 0

    def update_bpm(self, bpm: int) -> None:
        """Set the tempo and recompute the duration of one step."""
        if bpm <= 0:
            raise ValueError(f"bpm must be positive, got {bpm}")
        self.bpm = bpm
        self.step_duration_ms = 60000 // (bpm * STEPS_PER_BEAT)