"""Main loop: polls the button, ticks the sequencer on time and drives the outputs."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from typing import Callable, Optional, TextIO

import mido

from . import display
from .button import Button, ButtonEvent
from .looper import Looper
from .midi import MidoOutput
from .models import DEFAULT_BPM

POLL_INTERVAL_S = 0.0005


def _monotonic_us() -> int:
    return time.monotonic_ns() // 1000


def _never_pressed() -> bool:
    return False


class Runner:
    """Couples a looper with a button and a clock and runs them together."""

    def __init__(
        self,
        looper: Optional[Looper] = None,
        button: Optional[Button] = None,
        read_button: Optional[Callable[[], bool]] = None,
        clock: Optional[Callable[[], int]] = None,
        sleep: Optional[Callable[[float], None]] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.looper = looper if looper is not None else Looper()
        self.button = button if button is not None else Button()
        self.read_button = read_button if read_button is not None else _never_pressed
        self.clock = clock if clock is not None else _monotonic_us
        self.sleep = sleep if sleep is not None else time.sleep
        if stream is not None:
            self.looper.display = lambda ready, status, tracks: display.update(
                ready, status, tracks, stream
            )

    def tick(self, now_us: int) -> int:
        """Run one sequencer step started at ``now_us``; return the delay to the next, in ms."""
        self.looper.process_state(now_us)
        return self.looper.next_delay_ms(self.clock() - now_us)

    def poll(self, raw: bool, now_us: int) -> ButtonEvent:
        """Feed one raw button reading and let the looper react to the event."""
        event = self.button.poll(raw, now_us)
        self.looper.handle_input(event, now_us)
        return event

    def run(self, stop: Callable[[], bool]) -> int:
        """Loop until ``stop()`` is true; return the number of sequencer steps run."""
        self.looper.update_bpm(DEFAULT_BPM)
        next_tick_us = self.clock() + self.looper.status.step_duration_ms * 1000
        ticks = 0
        while not stop():
            now = self.clock()
            self.poll(self.read_button(), now)
            if now >= next_tick_us:
                delay_ms = self.tick(now)
                ticks += 1
                next_tick_us = now + delay_ms * 1000
            self.sleep(POLL_INTERVAL_S)
        return ticks


class _KeyboardButton:
    """Button emulated from typed lines: Enter taps, 'h', 'l' and 'v' hold longer."""

    HOLD_SECONDS = {"": 0.1, "h": 1.0, "l": 3.0, "v": 6.0}

    def __init__(self, stream: TextIO, clock: Callable[[], int]) -> None:
        self._clock = clock
        self._release_at_us = 0
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._read, args=(stream,), daemon=True)
        self._thread.start()

    def _read(self, stream: TextIO) -> None:
        for line in stream:
            seconds = self.HOLD_SECONDS.get(line.strip().lower())
            if seconds is None:
                continue
            with self._lock:
                self._release_at_us = self._clock() + int(seconds * 1_000_000)

    def __call__(self) -> bool:
        with self._lock:
            return self._clock() < self._release_at_us


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghostlooper",
        description="Two-bar drum looper with ghost notes, played from a single button.",
    )
    parser.add_argument("--port", help="MIDI output port name (default: system default)")
    parser.add_argument("--list-ports", action="store_true", help="list MIDI output ports")
    parser.add_argument("--duration", type=float, help="stop after this many seconds")
    parser.add_argument("--no-display", action="store_true", help="do not draw the screen")
    return parser


def main(argv=None) -> int:
    args = _parser().parse_args(argv)
    try:
        if args.list_ports:
            for name in mido.get_output_names():
                print(name)
            return 0
        output = MidoOutput(args.port if args.port else mido.open_output())
    except (OSError, ImportError, ValueError) as exc:
        print(f"error: cannot open MIDI output: {exc}", file=sys.stderr)
        return 1

    stream = None if args.no_display else sys.stdout
    runner = Runner(
        looper=Looper(output=output),
        read_button=_KeyboardButton(sys.stdin, _monotonic_us),
        stream=stream,
    )

    if args.duration is not None:
        deadline = time.monotonic() + args.duration

        def stop() -> bool:
            return time.monotonic() >= deadline
    else:
        def stop() -> bool:
            return False

    print("[MAIN] Pico MIDI Looper start")
    try:
        runner.run(stop)
    except KeyboardInterrupt:
        pass
    finally:
        output.close()
        if stream is not None:
            stream.write(display.DISABLE_ALTSCREEN)
            stream.flush()
    return 0