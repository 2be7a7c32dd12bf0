"""Text console rendering of the looper state and per-track step patterns."""

from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

from .models import CLICK_DIV, TOTAL_STEPS, LooperState, LooperStatus, Track

BLACK = "\x1b[30m"
BRIGHT_BLACK = "\x1b[90m"
BRIGHT_BLUE = "\x1b[94m"
BRIGHT_MAGENTA = "\x1b[95m"
CALM_GREEN = "\x1b[38;5;64m"
SOFT_RED = "\x1b[38;5;160m"
BG_WHITE = "\x1b[47m"
BOLD = "\x1b[1m"
RESET = "\x1b[0m"

CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"
CLEAR_HOME = CURSOR_HOME + CLEAR_SCREEN
HIDE_CURSOR = "\x1b[?25l"
CLEAR_EOL = "\x1b[K"
ENABLE_ALTSCREEN = "\x1b[?1049h"
DISABLE_ALTSCREEN = "\x1b[?1049l"

TITLE = '#Pico_MIDI_Looper "Ghost"'
STEP_RULER = "                1   2   3   4   5   6   7   8"

_CURSOR_MARK = BG_WHITE + BLACK
_AFTER_CURSOR = RESET + BOLD

# Label and colour per state when an output is connected.
_STATE_LABELS = {
    LooperState.PLAYING: ("[PLAYING]", CALM_GREEN),
    LooperState.TRACK_SWITCH: ("[PLAYING]", CALM_GREEN),
    LooperState.RECORDING: ("[RECORDING]", SOFT_RED),
    LooperState.TAP_TEMPO: ("[TAP TEMPO]", BRIGHT_MAGENTA),
}
_WAITING_LABEL = ("[WAITING]", BRIGHT_BLUE)


def _cursor_to(row: int, column: int) -> str:
    return f"\x1b[{row};{column}H"


def _step_cell(track: Track, step: int, current_step: int) -> str:
    hit = track.pattern[step] or track.fill_pattern[step]
    ghost = track.ghost_pattern[step]
    if step == current_step:
        symbol = "*" if hit else "." if ghost else " "
        return _CURSOR_MARK + symbol + _AFTER_CURSOR
    if hit:
        return "*"
    if ghost:
        return "."
    return "_"


def render_track(track: Track, current_step: int, selected: bool) -> str:
    """One track row: name, then a cell per step with the playhead highlighted."""
    if selected:
        head = f"  {BOLD}>{track.name:<11} ["
    else:
        head = f"  {BRIGHT_BLACK} {track.name:<11} {RESET}{BOLD}["
    cells = "".join(_step_cell(track, step, current_step) for step in range(TOTAL_STEPS))
    return head + cells + "]\n" + RESET


def render_status(connected: bool, status: LooperStatus, tracks: Sequence[Track]) -> str:
    """The whole screen: title, state, tempo and every track, top track first."""
    parts = [ENABLE_ALTSCREEN]
    if status.current_step % TOTAL_STEPS == 0:
        parts.append(CLEAR_HOME)
    parts.append(HIDE_CURSOR)
    parts.append(_cursor_to(1, 1) + CLEAR_EOL)
    parts.append(f"{BOLD}\n                    {TITLE}\n\n{RESET}")

    label, color = _WAITING_LABEL
    if connected:
        label, color = _STATE_LABELS.get(status.state, _WAITING_LABEL)
    parts.append(f"   {color}{label:<12}{RESET}")

    beat_color = BOLD if status.current_step % CLICK_DIV == 0 else BRIGHT_BLACK
    parts.append(f" {beat_color}\u2669={status.bpm}\n{RESET}")
    parts.append(f"{BOLD}{STEP_RULER}\n{RESET}")

    # Cymbals at the top, basses at the bottom, as on a drum machine.
    for index in reversed(range(len(tracks))):
        parts.append(
            render_track(tracks[index], status.current_step, index == status.current_track)
        )
    return "".join(parts)


def update(
    connected: bool,
    status: LooperStatus,
    tracks: Sequence[Track],
    stream: Optional[TextIO] = None,
) -> None:
    """Draw the status screen to ``stream`` (standard output by default)."""
    out = stream if stream is not None else sys.stdout
    out.write(render_status(connected, status, tracks))
    out.flush()