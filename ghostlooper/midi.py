"""MIDI note outputs and the wire formats used by the USB and BLE links."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Union

import mido

NOTE_ON = 0x90
NOTE_OFF = 0x80

STRING_DESCRIPTOR_TYPE = 3
LANGID_ENGLISH = 0x0409
MAX_STRING_CHARS = 32

STRID_LANGID = 0
STRID_MANUFACTURER = 1
STRID_PRODUCT = 2
STRID_SERIAL = 3
STRID_MIDI_IFACE = 4
STRID_CDC_IFACE = 5

_USB_STRINGS = (
    "",
    "TinyUSB",
    "Pico MIDI Looper",
    "",
    "Pico USB MIDI Interface",
    "Pico USB CDC Console",
)

DEVICE_NAME_PREFIX = "Pico "


def _check_note(channel: int, note: int, velocity: int) -> None:
    if not 0 <= channel <= 15:
        raise ValueError(f"channel must be in 0..15, got {channel}")
    if not 0 <= note <= 127:
        raise ValueError(f"note must be in 0..127, got {note}")
    if not 0 <= velocity <= 127:
        raise ValueError(f"velocity must be in 0..127, got {velocity}")


def note_on_off_bytes(channel: int, note: int, velocity: int) -> bytes:
    """Raw MIDI stream for a percussion hit: Note-On followed by Note-Off."""
    _check_note(channel, note, velocity)
    return bytes([NOTE_ON | channel, note, velocity, NOTE_OFF | channel, note, 0])


def ble_midi_packet(channel: int, note: int, velocity: int) -> bytes:
    """BLE-MIDI notification carrying a Note-On and a Note-Off with zero timestamps."""
    _check_note(channel, note, velocity)
    channel &= 0x0F
    return bytes([
        0x80, 0x80, NOTE_ON | channel, note, velocity,
        0x80, NOTE_OFF | channel, note, 0x00,
    ])


def ble_device_name(address: Union[bytes, bytearray, str]) -> str:
    """GAP device name advertised for a controller address."""
    if isinstance(address, str):
        text = address
    else:
        if len(address) != 6:
            raise ValueError(f"a device address has 6 bytes, got {len(address)}")
        text = ":".join(f"{octet:02X}" for octet in address)
    return DEVICE_NAME_PREFIX + text


def usb_string_descriptor(index: int, serial: str = "") -> Optional[bytes]:
    """USB string descriptor for ``index``, or None when there is no such string."""
    if index == STRID_LANGID:
        payload = LANGID_ENGLISH.to_bytes(2, "little")
    elif index == STRID_SERIAL:
        payload = serial[:MAX_STRING_CHARS].encode("utf-16-le")
    elif 0 <= index < len(_USB_STRINGS):
        payload = _USB_STRINGS[index][:MAX_STRING_CHARS].encode("utf-16-le")
    else:
        return None
    return bytes([len(payload) + 2, STRING_DESCRIPTOR_TYPE]) + payload


class NoteOutput(Protocol):
    """Destination for percussion hits."""

    def is_connected(self) -> bool: ...

    def send_note(self, channel: int, note: int, velocity: int) -> None: ...


@dataclass
class RecordingOutput:
    """Output that keeps every hit sent while connected."""

    connected: bool = True
    notes: list[tuple[int, int, int]] = field(default_factory=list)

    def is_connected(self) -> bool:
        return self.connected

    def send_note(self, channel: int, note: int, velocity: int) -> None:
        _check_note(channel, note, velocity)
        if self.connected:
            self.notes.append((channel, note, velocity))


class MidoOutput:
    """Sends hits to a mido output port as Note-On/Note-Off pairs."""

    def __init__(self, port) -> None:
        if isinstance(port, str):
            port = mido.open_output(port)
        self.port = port

    def is_connected(self) -> bool:
        return not getattr(self.port, "closed", False)

    def send_note(self, channel: int, note: int, velocity: int) -> None:
        _check_note(channel, note, velocity)
        if not self.is_connected():
            return
        self.port.send(mido.Message("note_on", channel=channel, note=note, velocity=velocity))
        self.port.send(mido.Message("note_off", channel=channel, note=note, velocity=0))

    def close(self) -> None:
        """Close the underlying port."""
        self.port.close()

    def __enter__(self) -> "MidoOutput":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class MultiOutput:
    """Fans each hit out to several outputs; ready when any of them is."""

    def __init__(self, outputs: Iterable[NoteOutput] = ()) -> None:
        self.outputs = list(outputs)

    def is_connected(self) -> bool:
        return any(output.is_connected() for output in self.outputs)

    def send_note(self, channel: int, note: int, velocity: int) -> None:
        for output in self.outputs:
            output.send_note(channel, note, velocity)