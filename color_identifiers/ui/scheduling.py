from __future__ import annotations

from typing import Callable, Optional

try:
    from PySide6.QtCore import QCoreApplication, QObject, QTimer  # type: ignore
except Exception:
    from PySide2.QtCore import QCoreApplication, QObject, QTimer  # type: ignore

from ..backends.session import SharedRefreshTimer, shared_timer


class QtTimerHandle:
    """Repeating QTimer with the ``cancel()`` the shared refresh timer expects."""

    def __init__(self, interval: float, callback: Callable[[], None], parent: Optional[QObject] = None):
        self.timer = QTimer(parent)
        self.timer.setInterval(max(1, int(interval * 1000)))
        self.timer.timeout.connect(callback)
        self.timer.start()

    def cancel(self) -> None:
        self.timer.stop()
        self.timer.deleteLater()


def qt_timer_factory(interval: float, callback: Callable[[], None]) -> QtTimerHandle:
    return QtTimerHandle(interval, callback)


def install_qt_timer(interval: Optional[float] = None, timer: Optional[SharedRefreshTimer] = None) -> SharedRefreshTimer:
    """Drive the process-wide periodic refresh with a QTimer."""
    t = timer if timer is not None else shared_timer
    t.install_factory(qt_timer_factory, interval)
    return t


class IdleTrigger:
    """Fires ``callback`` once the document has been quiet for ``delay`` seconds."""

    def __init__(self, delay: float, callback: Callable[[], None], parent: Optional[QObject] = None):
        self.timer = QTimer(parent)
        self.timer.setSingleShot(True)
        self.timer.setInterval(max(1, int(delay * 1000)))
        self.timer.timeout.connect(callback)

    def poke(self) -> None:
        self.timer.start()

    def stop(self) -> None:
        self.timer.stop()


class InputMonitor:
    """``input_pending`` callable for refresh scans.

    Every ``poll_every`` calls it lets Qt process queued events; if any of
    them edited the document (or rebuilt the snapshot being scanned, which
    block highlighting does after an edit), the scan is told to stop.
    """

    def __init__(self, source, poll_every: int = 512):
        self.source = source
        self.poll_every = max(1, int(poll_every))
        self._calls = 0

    def __call__(self) -> bool:
        self._calls += 1
        if self._calls % self.poll_every == 0:
            generation = self.source.generation
            QCoreApplication.processEvents()
            if self.source.generation != generation:
                return True
        return self.source.stale
