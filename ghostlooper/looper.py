"""The two-bar step sequencer driven by timer ticks and button events."""

from __future__ import annotations

import math
import random
from typing import Callable, Optional

from .button import ButtonEvent
from .ghost_note import GHOST_VELOCITIES, create_ghost_notes, maintenance_step
from .led import StatusLed
from .midi import MultiOutput, NoteOutput
from .models import CLICK_DIV, DEFAULT_BPM, TOTAL_STEPS, LooperState, LooperStatus, Track
from .tap_tempo import TapResult, TapTempo

MIDI_CHANNEL_1 = 0
MIDI_CHANNEL_10 = 9

BASS_DRUM = 36
RIM_SHOT = 37
SNARE_DRUM = 38
HAND_CLAP = 39
CLOSED_HIHAT = 42
OPEN_HIHAT = 46
CYMBAL = 49

FULL_VELOCITY = 0x7F
DOWNBEAT_CLICK_VELOCITY = 0x30
BEAT_CLICK_VELOCITY = 0x10

DisplayCallback = Callable[[bool, LooperStatus, list], None]


def default_tracks() -> list[Track]:
    """The four drum tracks, from bass drum up to open hi-hat."""
    return [
        Track("Bass", BASS_DRUM, MIDI_CHANNEL_10),
        Track("Snare", SNARE_DRUM, MIDI_CHANNEL_10),
        Track("Hi-hat", CLOSED_HIHAT, MIDI_CHANNEL_10),
        Track("Open Hi-hat", OPEN_HIHAT, MIDI_CHANNEL_10),
    ]


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class Looper:
    """Step sequencer state machine with recording, track switching and tap tempo."""

    def __init__(
        self,
        output: Optional[NoteOutput] = None,
        led: Optional[StatusLed] = None,
        tap_tempo: Optional[TapTempo] = None,
        rng: Optional[random.Random] = None,
        display: Optional[DisplayCallback] = None,
    ) -> None:
        self.output = output if output is not None else MultiOutput()
        self.led = led if led is not None else StatusLed()
        self.tap_tempo = tap_tempo if tap_tempo is not None else TapTempo()
        self.rng = rng if rng is not None else random.Random()
        self.display = display
        self.status = LooperStatus()
        self.tracks = default_tracks()
        self.update_bpm(DEFAULT_BPM)

    @property
    def current_track(self) -> Track:
        return self.tracks[self.status.current_track]

    def update_bpm(self, bpm: int) -> None:
        """Set the tempo and the step duration that follows from it."""
        self.status.update_bpm(bpm)

    def _note(self, channel: int, note: int, velocity: int) -> None:
        self.output.send_note(channel, note, velocity)

    def _send_click_if_needed(self) -> None:
        step = self.status.current_step
        if step % CLICK_DIV != 0:
            return
        velocity = DOWNBEAT_CLICK_VELOCITY if step == 0 else BEAT_CLICK_VELOCITY
        self._note(MIDI_CHANNEL_1, RIM_SHOT, velocity)

    def _perform_step(self) -> None:
        step = self.status.current_step
        for index, track in enumerate(self.tracks):
            note_on = track.pattern[step]
            if note_on:
                self._note(track.channel, track.note, FULL_VELOCITY)
                if index == self.status.current_track:
                    self.led.set(True)
            elif index == self.status.current_track:
                self.led.set(False)

            ghost_on = track.ghost_pattern[step]
            fill_on = track.fill_pattern[step]
            if ghost_on and not fill_on:
                self._note(track.channel, track.note, GHOST_VELOCITIES[index])
            if fill_on and not note_on:
                self._note(track.channel, track.note, FULL_VELOCITY)

    def _perform_step_recording(self) -> None:
        self.led.set(True)
        step = self.status.current_step
        for track in self.tracks:
            if track.pattern[step]:
                self._note(track.channel, track.note, FULL_VELOCITY)

    def _next_step(self, now_us: int) -> None:
        self.status.last_step_time_us = now_us
        self.status.current_step = (self.status.current_step + 1) % TOTAL_STEPS

    def quantize_step(self) -> int:
        """Step nearest to the last button press, relative to the last tick."""
        status = self.status
        delta_us = status.button_press_start_us - status.last_step_time_us
        relative = _round_half_away(delta_us / 1000.0 / status.step_duration_ms)
        previous = (status.current_step - 1) % TOTAL_STEPS
        return (previous + relative) % TOTAL_STEPS

    def _clear_all_tracks(self) -> None:
        for track in self.tracks:
            track.clear()

    def process_state(self, start_us: int) -> None:
        """Run one sequencer step at time ``start_us``."""
        status = self.status
        ready = self.output.is_connected()
        if self.display is not None:
            self.display(ready, status, self.tracks)
        if not ready:
            status.state = LooperState.WAITING

        state = status.state
        if state is LooperState.WAITING:
            if ready:
                status.state = LooperState.PLAYING
                status.current_step = 0
            self.led.set(status.current_step % (CLICK_DIV * 4) == 0)
            self._next_step(start_us)
        elif state is LooperState.PLAYING:
            self._send_click_if_needed()
            self._perform_step()
            self._next_step(start_us)
        elif state is LooperState.RECORDING:
            self._send_click_if_needed()
            self._perform_step_recording()
            if status.recording_step_count >= TOTAL_STEPS:
                self.led.set(False)
                status.state = LooperState.PLAYING
                create_ghost_notes(self.current_track, self.rng)
            self._next_step(start_us)
            status.recording_step_count += 1
        elif state is LooperState.TRACK_SWITCH:
            status.current_track = (status.current_track + 1) % len(self.tracks)
            self._note(MIDI_CHANNEL_10, HAND_CLAP, FULL_VELOCITY)
            self._next_step(start_us)
            status.state = LooperState.PLAYING
        elif state is LooperState.TAP_TEMPO:
            self._send_click_if_needed()
            self.led.set(status.current_step % CLICK_DIV == 0)
            self._next_step(start_us)
        elif state is LooperState.CLEAR_TRACKS:
            self._clear_all_tracks()
            status.current_track = 0
            self.update_bpm(DEFAULT_BPM)
            self._next_step(start_us)
            status.state = LooperState.PLAYING

        maintenance_step(status, self.tracks, self.rng)

    def handle_button_event(self, event: ButtonEvent, now_us: int) -> None:
        """Apply a button event observed at ``now_us`` to the looper state."""
        status = self.status
        track = self.current_track

        if event is ButtonEvent.DOWN:
            status.button_press_start_us = now_us
            self._note(track.channel, track.note, FULL_VELOCITY)
            track.hold_pattern[:] = track.pattern
        elif event is ButtonEvent.CLICK_RELEASE:
            if status.state is not LooperState.RECORDING:
                status.recording_step_count = 0
                status.state = LooperState.RECORDING
                track.pattern[:] = [False] * TOTAL_STEPS
                track.ghost_pattern[:] = [False] * TOTAL_STEPS
            track.pattern[self.quantize_step()] = True
        elif event is ButtonEvent.HOLD_RELEASE:
            track.pattern[:] = track.hold_pattern
            status.state = LooperState.TRACK_SWITCH
        elif event is ButtonEvent.LONG_HOLD_RELEASE:
            status.state = LooperState.TAP_TEMPO
            self._note(MIDI_CHANNEL_10, HAND_CLAP, FULL_VELOCITY)
        elif event is ButtonEvent.VERY_LONG_HOLD_RELEASE:
            status.state = LooperState.CLEAR_TRACKS
            self._note(MIDI_CHANNEL_10, HAND_CLAP, FULL_VELOCITY)

    def handle_input(self, event: ButtonEvent, now_us: int) -> None:
        """Route a polled button event, then refresh the status LED."""
        if self.status.state is LooperState.TAP_TEMPO:
            result = self.tap_tempo.handle_event(event, now_us)
            if result in (TapResult.PRELIM, TapResult.FINAL):
                self.update_bpm(self.tap_tempo.bpm)
            elif result is TapResult.EXIT:
                self.status.state = LooperState.PLAYING
        else:
            self.handle_button_event(event, now_us)
        self.led.update()

    def next_delay_ms(self, elapsed_us: int) -> int:
        """Delay until the next tick, given how long the current one took."""
        handler_delay_ms = elapsed_us // 1000
        step_ms = self.status.step_duration_ms
        if handler_delay_ms >= step_ms:
            return 1
        return step_ms - handler_delay_ms