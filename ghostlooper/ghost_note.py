"""Generation of quiet ghost notes and fills around a recorded pattern."""

from __future__ import annotations

import random

from .models import TOTAL_STEPS, LooperStatus, Track

# Ghost-note velocity per track: kick, snare, closed hi-hat, open hi-hat.
GHOST_VELOCITIES = (0x20, 0x25, 0x30, 0x25)

FILL_START = int(TOTAL_STEPS * (3.0 / 4))

_DEFAULT_RNG = random.Random()


def _chance(rng, p: float) -> bool:
    return rng.random() < p


def add_ghost_euclidean(track: Track, rng=None) -> None:
    """Spread ghost notes evenly over the loop, as many as there are real hits."""
    rng = rng or _DEFAULT_RNG
    k = sum(track.pattern)
    if k == 0 or k >= TOTAL_STEPS:
        return
    density = k / TOTAL_STEPS
    phase = rng.randrange(TOTAL_STEPS // k)

    bucket = 0
    for i in range(TOTAL_STEPS):
        bucket += k
        if bucket >= TOTAL_STEPS:
            bucket -= TOTAL_STEPS
            pos = (i + phase) % TOTAL_STEPS
            if not track.pattern[pos] and not track.ghost_pattern[pos]:
                track.ghost_pattern[pos] = _chance(rng, 0.80 * (1.0 - density))


def add_ghost_flams(track: Track, rng=None) -> None:
    """Place ghost notes on the 16th steps just before and after each hit."""
    rng = rng or _DEFAULT_RNG
    for i, hit in enumerate(track.pattern):
        if not hit:
            continue
        after = (i + 1) % TOTAL_STEPS
        before = (i - 1) % TOTAL_STEPS
        if not track.pattern[after] and not track.ghost_pattern[i]:
            track.ghost_pattern[after] = _chance(rng, 0.30)
        if not track.pattern[before] and not track.ghost_pattern[i]:
            track.ghost_pattern[before] = _chance(rng, 0.30)


def create_ghost_notes(track: Track, rng=None) -> None:
    """Replace the track's ghost pattern with a freshly generated one."""
    rng = rng or _DEFAULT_RNG
    track.ghost_pattern[:] = [False] * TOTAL_STEPS
    add_ghost_euclidean(track, rng)
    add_ghost_flams(track, rng)


def maintenance_step(status: LooperStatus, tracks: list[Track], rng=None) -> None:
    """Per-step housekeeping: regenerate ghosts every four bars, add fills in bar three."""
    rng = rng or _DEFAULT_RNG
    if status.current_step % (TOTAL_STEPS // 2) == 0:
        status.ghost_bar_counter = (status.ghost_bar_counter + 1) % 4

    if status.current_step != 0:
        return
    if status.ghost_bar_counter == 0:
        for track in tracks:
            create_ghost_notes(track, rng)
            track.fill_pattern[:] = [False] * TOTAL_STEPS
    elif status.ghost_bar_counter == 2:
        for track in tracks:
            for f in range(FILL_START, TOTAL_STEPS):
                if track.ghost_pattern[f]:
                    track.fill_pattern[f] = _chance(rng, 0.90)