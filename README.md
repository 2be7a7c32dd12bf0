# ghostlooper

A small two-bar MIDI drum looper that you play with a single button. You tap
in a pattern for one track and the looper plays it back on a loop. It then
adds quiet "ghost" notes around your hits, and every few bars it turns some
of them into full-velocity fills.

## Features

- A 2-bar loop of 32 sixteenth-note steps, at 120 BPM on start.
- Four drum tracks on MIDI channel 10: Bass (36), Snare (38), Hi-hat (42)
  and Open Hi-hat (46).
- A rim-shot click on MIDI channel 1 on every beat, louder on the first step.
- Each recorded hit is placed on the step nearest to the moment the button
  went down.
- Ghost notes are spread over the loop in a Euclidean pattern, with flams on
  the steps either side of your hits. They are generated again every four
  bars; two bars later some of the ghost notes in the last quarter of the
  loop become fills.
- Tap tempo sets the BPM from two to four taps, kept between 40 and 240 BPM.
- The terminal shows the state, the tempo and every track's pattern, with
  the playhead highlighted.
- Notes go out through any MIDI output port that `mido` can open.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

Opening a MIDI port needs a backend for `mido` (for example `python-rtmidi`)
to be installed separately.

## Running

```
ghostlooper
```

This opens the default MIDI output, starts the looper and draws its status
in the terminal. Options:

| Option             | Effect                                    |
|--------------------|-------------------------------------------|
| `--port NAME`      | Send to this MIDI output port             |
| `--list-ports`     | Print the available output ports and exit |
| `--duration SECS`  | Stop after this many seconds              |
| `--no-display`     | Do not draw the status screen             |

If the port cannot be opened, the command prints an error and exits with
status 1.

### The button from the keyboard

The command stands in for the button with lines typed on standard input:

| Line typed      | Button held for |
|-----------------|-----------------|
| (just Enter)    | 0.1 s           |
| `h`             | 1 s             |
| `l`             | 3 s             |
| `v`             | 6 s             |

## The one button

| Gesture                   | Effect                                             |
|---------------------------|----------------------------------------------------|
| Short press               | Record a hit on the current track (starts a take)  |
| Hold > 0.5 s, release     | Undo that press and move to the next track         |
| Hold > 2 s, release       | Enter tap-tempo mode                               |
| Hold > 5 s, release       | Clear all tracks and reset the tempo to 120 BPM    |

A take lasts one full loop; when it ends, ghost notes are generated for the
track just recorded. In tap-tempo mode short presses are taps, and a hold of
more than 0.5 s but not more than 5 s, when released, leaves the mode. If no
tap comes for more than a second, the tap count starts over.

## Using it as a library

- `ghostlooper.models`: `Track`, `LooperStatus`, `LooperState` and the
  timing constants (`TOTAL_STEPS`, `DEFAULT_BPM`, ...).
- `ghostlooper.button`: `ButtonEvent`, `Debouncer`, `ButtonStateMachine`,
  `Button` (`Button.poll(raw, now_us)` turns raw readings into events).
- `ghostlooper.tap_tempo`: `TapTempo`, `TapResult`, `calc_bpm`.
- `ghostlooper.ghost_note`: `add_ghost_euclidean`, `add_ghost_flams`,
  `create_ghost_notes`, `maintenance_step`; each takes an optional
  `random.Random` for repeatable results.
- `ghostlooper.led`: `StatusLed`, which latches the wanted state and passes
  it to an optional callback on `update()`.
- `ghostlooper.midi`: the outputs `MidoOutput`, `MultiOutput` and
  `RecordingOutput`, and byte helpers `note_on_off_bytes`,
  `ble_midi_packet`, `ble_device_name` and `usb_string_descriptor`.
- `ghostlooper.looper`: `Looper`, with `process_state`,
  `handle_button_event`, `handle_input`, `quantize_step`, `update_bpm` and
  `next_delay_ms`.
- `ghostlooper.display`: `render_track`, `render_status`, `update`.
- `ghostlooper.app`: `Runner` (`tick`, `poll`, `run`) and `main`.

`RecordingOutput` keeps every note sent to it while connected, which lets
you drive a `Looper` in tests without any MIDI port:

```python
from ghostlooper.button import ButtonEvent
from ghostlooper.looper import Looper
from ghostlooper.midi import RecordingOutput

out = RecordingOutput()
looper = Looper(output=out)
looper.handle_button_event(ButtonEvent.DOWN, 0)
print(out.notes)  # [(9, 36, 127)]
```

## What it does not do

- It does not read a physical button; the command takes its button presses
  from lines typed on standard input.
- It does not act as a USB MIDI device or a Bluetooth LE MIDI peripheral.
  The `midi` module only builds the byte layouts those links use; notes are
  sent through `mido` ports.
- The status LED is a state held in memory; nothing is lit unless you give
  `StatusLed` a callback.
- Patterns are not saved; they live only as long as the program runs.