"""One-button two-bar MIDI drum looper with ghost notes, fills and tap tempo."""

__version__ = "0.1.0"