import io

import pytest

from ghostlooper.app import Runner, main
from ghostlooper.button import ButtonEvent
from ghostlooper.looper import BASS_DRUM, MIDI_CHANNEL_10, Looper
from ghostlooper.midi import RecordingOutput
from ghostlooper.models import TOTAL_STEPS, LooperState


class FakeClock:
    def __init__(self, start=0):
        self.now = start

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += int(seconds * 1_000_000)


def _runner(connected=True, stream=None, read_button=None):
    clock = FakeClock()
    output = RecordingOutput(connected=connected)
    runner = Runner(
        looper=Looper(output=output),
        read_button=read_button,
        clock=clock,
        sleep=clock.sleep,
        stream=stream,
    )
    return runner, clock, output


def test_tick_starts_playing_when_connected():
    runner, clock, _ = _runner()
    delay = runner.tick(clock())
    assert runner.looper.status.state is LooperState.PLAYING
    assert runner.looper.status.current_step == 1
    assert delay == runner.looper.status.step_duration_ms


def test_tick_waits_when_disconnected():
    runner, clock, _ = _runner(connected=False)
    runner.tick(clock())
    assert runner.looper.status.state is LooperState.WAITING


def test_slow_tick_reschedules_after_one_ms():
    runner, clock, _ = _runner()
    start = clock()

    def slow_display(ready, status, tracks):
        clock.now += (runner.looper.status.step_duration_ms + 10) * 1000

    runner.looper.display = slow_display
    assert runner.tick(start) == 1


def test_poll_debounces_and_previews_note():
    runner, clock, output = _runner()
    events = [runner.poll(True, clock.now + i) for i in range(5)]
    assert events[:4] == [ButtonEvent.NONE] * 4
    assert events[4] is ButtonEvent.DOWN
    assert output.notes == [(MIDI_CHANNEL_10, BASS_DRUM, 0x7F)]


def test_poll_click_starts_recording():
    runner, clock, _ = _runner()
    for i in range(5):
        runner.poll(True, i)
    events = [runner.poll(False, 10 + i) for i in range(5)]
    assert ButtonEvent.CLICK_RELEASE in events
    assert runner.looper.status.state is LooperState.RECORDING
    assert sum(runner.looper.tracks[0].pattern) == 1


def test_run_advances_steps_until_stopped():
    runner, clock, _ = _runner()
    loops = iter(range(2000))
    ticks = runner.run(lambda: next(loops, None) is None)
    assert ticks >= 3
    assert runner.looper.status.current_step == ticks % TOTAL_STEPS


def test_run_with_stop_immediately_runs_nothing():
    runner, _, output = _runner()
    assert runner.run(lambda: True) == 0
    assert output.notes == []


def test_display_drawn_on_each_tick():
    stream = io.StringIO()
    runner, clock, _ = _runner(stream=stream)
    runner.tick(clock())
    assert "[WAITING]" in stream.getvalue()
    runner.tick(clock())
    assert "[PLAYING]" in stream.getvalue()


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit) as info:
        main(["--no-such-option"])
    assert info.value.code == 2