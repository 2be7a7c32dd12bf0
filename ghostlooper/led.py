"""Status LED whose requested state is latched and pushed out on update."""

from __future__ import annotations

from typing import Callable, Optional


class StatusLed:
    """Holds the wanted LED state; ``update`` drives it to the output sink."""

    def __init__(self, sink: Optional[Callable[[bool], None]] = None) -> None:
        self._sink = sink
        self.wanted = False
        self.lit = False

    def set(self, on: bool) -> None:
        """Request the LED on or off; takes effect on the next update."""
        self.wanted = bool(on)

    def update(self) -> None:
        """Push the requested state to the LED."""
        self.lit = self.wanted
        if self._sink is not None:
            self._sink(self.lit)