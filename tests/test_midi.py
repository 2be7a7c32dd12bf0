import mido
import pytest

from ghostlooper.midi import (
    MidoOutput,
    MultiOutput,
    RecordingOutput,
    ble_device_name,
    ble_midi_packet,
    note_on_off_bytes,
    usb_string_descriptor,
)


class FakePort:
    def __init__(self):
        self.sent = []
        self.closed = False

    def send(self, message):
        self.sent.append(message)

    def close(self):
        self.closed = True


def test_note_on_off_bytes_layout():
    data = note_on_off_bytes(9, 36, 0x7F)
    assert data[:3] == bytes([0x90 | 9, 36, 0x7F])
    assert data[3:] == bytes([0x80 | 9, 36, 0])


def test_note_on_off_bytes_parse_with_mido():
    data = note_on_off_bytes(3, 42, 0x30)
    parser = mido.Parser()
    parser.feed(data)
    messages = list(parser)
    assert [m.type for m in messages] == ["note_on", "note_on"]
    assert messages[0].velocity == 0x30
    assert messages[1].velocity == 0
    assert all(m.channel == 3 and m.note == 42 for m in messages)


@pytest.mark.parametrize("channel,note,velocity", [(16, 36, 1), (0, 128, 1), (0, 36, 128), (-1, 36, 1)])
def test_out_of_range_values_rejected(channel, note, velocity):
    with pytest.raises(ValueError):
        note_on_off_bytes(channel, note, velocity)
    with pytest.raises(ValueError):
        ble_midi_packet(channel, note, velocity)


def test_ble_midi_packet_layout():
    packet = ble_midi_packet(9, 38, 0x25)
    assert packet[:2] == bytes([0x80, 0x80])
    assert packet[2:5] == bytes([0x90 | 9, 38, 0x25])
    assert packet[5:] == bytes([0x80, 0x80 | 9, 38, 0x00])


def test_ble_device_name_from_bytes():
    assert ble_device_name(bytes.fromhex("020000000001")) == "Pico 02:00:00:00:00:01"


def test_ble_device_name_from_text():
    assert ble_device_name("02:00:00:00:00:AB") == "Pico 02:00:00:00:00:AB"


def test_ble_device_name_rejects_short_address():
    with pytest.raises(ValueError):
        ble_device_name(b"\x01\x02")


def test_language_descriptor():
    assert usb_string_descriptor(0) == bytes([4, 3, 0x09, 0x04])


@pytest.mark.parametrize(
    "index,text",
    [(1, "TinyUSB"), (2, "Pico MIDI Looper"), (4, "Pico USB MIDI Interface"), (5, "Pico USB CDC Console")],
)
def test_string_descriptors(index, text):
    descriptor = usb_string_descriptor(index)
    assert descriptor[0] == len(descriptor)
    assert descriptor[1] == 3
    assert descriptor[2:].decode("utf-16-le") == text


def test_serial_descriptor_is_capped():
    descriptor = usb_string_descriptor(3, "A" * 40)
    assert descriptor[2:].decode("utf-16-le") == "A" * 32
    assert descriptor[0] == len(descriptor)


def test_serial_descriptor_uses_given_serial():
    descriptor = usb_string_descriptor(3, "E661TEST")
    assert descriptor[2:].decode("utf-16-le") == "E661TEST"


def test_unknown_descriptor_is_none():
    assert usb_string_descriptor(6) is None
    assert usb_string_descriptor(0xEE) is None


def test_recording_output_records_when_connected():
    output = RecordingOutput()
    output.send_note(9, 36, 0x7F)
    assert output.is_connected() is True
    assert output.notes == [(9, 36, 0x7F)]


def test_recording_output_drops_when_disconnected():
    output = RecordingOutput(connected=False)
    output.send_note(9, 36, 0x7F)
    assert output.is_connected() is False
    assert output.notes == []


def test_mido_output_sends_pair():
    port = FakePort()
    output = MidoOutput(port)
    output.send_note(9, 46, 0x7F)
    assert [m.type for m in port.sent] == ["note_on", "note_off"]
    assert port.sent[0].velocity == 0x7F
    assert all(m.channel == 9 and m.note == 46 for m in port.sent)


def test_mido_output_close():
    port = FakePort()
    with MidoOutput(port) as output:
        assert output.is_connected() is True
    assert port.closed is True
    assert output.is_connected() is False
    output.send_note(9, 36, 1)
    assert port.sent == []


def test_multi_output_fans_out():
    first, second = RecordingOutput(), RecordingOutput(connected=False)
    multi = MultiOutput([first, second])
    assert multi.is_connected() is True
    multi.send_note(0, 37, 0x10)
    assert first.notes == [(0, 37, 0x10)]
    assert second.notes == []


def test_multi_output_without_connections():
    assert MultiOutput().is_connected() is False
    assert MultiOutput([RecordingOutput(connected=False)]).is_connected() is False