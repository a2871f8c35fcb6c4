"""Frame tickers: a "run until cancelled" callback driving the trace animation."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

FrameCallback = Callable[[], None]

_LOGGER = logging.getLogger(__name__)


class FrameTicker:
    """Calls a callback once per frame until :meth:`cancel`."""

    @property
    def active(self) -> bool:
        raise NotImplementedError

    def start(self, callback: FrameCallback) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError


class QtFrameTicker(FrameTicker):
    """Ticker backed by a repeating ``QTimer`` on the Qt event loop."""

    def __init__(self, parent: Optional[QObject] = None, interval_ms: int = 16) -> None:
        self._interval_ms = max(1, int(interval_ms))
        self._timer = QTimer(parent)
        self._callback: Optional[FrameCallback] = None
        self._timer.timeout.connect(self._on_timeout)

    @property
    def active(self) -> bool:
        return self._timer.isActive()

    def start(self, callback: FrameCallback) -> None:
        self._callback = callback
        if not self._timer.isActive():
            self._timer.start(self._interval_ms)

    def cancel(self) -> None:
        self._timer.stop()
        self._callback = None

    def _on_timeout(self) -> None:
        # Un timeout déjà en file après stop() ne doit rien déclencher.
        if self._callback is None:
            return
        self._callback()


class ManualClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualFrameTicker(FrameTicker):
    """
    Ticker piloté à la main, pour rejouer des images de façon déterministe
    (tests, rendu hors écran). ``fire`` avance l'horloge puis appelle le
    callback, tant que le ticker n'est pas annulé.
    """

    def __init__(self, clock: Optional[ManualClock] = None, frame_seconds: float = 1.0 / 60.0) -> None:
        self.clock = clock or ManualClock()
        self.frame_seconds = frame_seconds
        self._callback: Optional[FrameCallback] = None
        self.fired = 0

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: FrameCallback) -> None:
        self._callback = callback

    def cancel(self) -> None:
        self._callback = None

    def fire(self, frames: int = 1, seconds: Optional[float] = None) -> int:
        count = 0
        for _ in range(frames):
            if self._callback is None:
                break
            self.clock.advance(self.frame_seconds if seconds is None else seconds)
            self._callback()
            count += 1
        self.fired += count
        return count


__all__ = [
    "FrameCallback",
    "FrameTicker",
    "ManualClock",
    "ManualFrameTicker",
    "QtFrameTicker",
]
