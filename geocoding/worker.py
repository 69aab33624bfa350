"""
geocoding/worker.py

Background execution for geocoding calls.
Runs each network call in a separate thread to avoid blocking the UI.
"""

from __future__ import annotations

import traceback
from typing import Any, Callable, List, Optional, Tuple

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from debug_trace import trace
from geocoding.client import GeocodingError


class GeocodeWorker(QObject):
    """
    Background worker that runs a single geocoding call.

    Signals:
        finished(object): Emitted with the call's return value on success
        failed(str): Emitted with an error message on failure
    """

    finished = pyqtSignal(object)
    failed = pyqtSignal(str)

    def __init__(self, fn: Callable[[], Any]):
        super().__init__()
        self.fn = fn

    @pyqtSlot()
    def run(self):
        """Execute the geocoding call."""
        try:
            result = self.fn()
            self.finished.emit(result)
        except GeocodingError as e:
            self.failed.emit(str(e))
        except Exception as e:
            trace(f"geocode worker crashed: {e}\n{traceback.format_exc()}", "ERROR")
            self.failed.emit(str(e) or "Geocoding service unavailable")


class _Job(QObject):
    """Main-thread receiver so callbacks run on the UI thread."""

    def __init__(self, on_finished, on_failed, on_release, parent=None):
        super().__init__(parent)
        self.on_finished = on_finished
        self.on_failed = on_failed
        self.on_release = on_release

    @pyqtSlot(object)
    def deliver(self, result):
        if self.on_finished:
            self.on_finished(result)

    @pyqtSlot(str)
    def fail(self, message: str):
        if self.on_failed:
            self.on_failed(message)

    @pyqtSlot()
    def release(self):
        self.on_release(self)


class GeocodeTaskRunner(QObject):
    """
    Owns the threads of in-flight geocoding calls.

    Lives as long as the main window so a thread is never destroyed while
    still running, even when the popup that started it is already gone.
    Callers must check liveness of their target inside the callbacks.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._active: List[Tuple[QThread, GeocodeWorker, _Job]] = []

    def run(
        self,
        fn: Callable[[], Any],
        on_finished: Optional[Callable[[Any], None]] = None,
        on_failed: Optional[Callable[[str], None]] = None,
    ) -> None:
        thread = QThread()
        worker = GeocodeWorker(fn)
        worker.moveToThread(thread)
        job = _Job(on_finished, on_failed, self._release, self)
        self._active.append((thread, worker, job))

        thread.started.connect(worker.run)
        worker.finished.connect(job.deliver)
        worker.failed.connect(job.fail)

        worker.finished.connect(thread.quit)
        worker.failed.connect(thread.quit)

        thread.finished.connect(job.release)
        thread.finished.connect(thread.deleteLater)

        thread.start()

    def _release(self, job: _Job) -> None:
        remaining = []
        for thread, worker, owner in self._active:
            if owner is job:
                # finished is emitted just before the thread exits
                thread.wait()
            else:
                remaining.append((thread, worker, owner))
        self._active = remaining
        job.deleteLater()

    def active_count(self) -> int:
        return len(self._active)

    def shutdown(self, timeout_ms: int = 2000) -> None:
        """Wait for running calls to finish. Called when the app quits."""
        for thread, _, _ in list(self._active):
            thread.quit()
            thread.wait(timeout_ms)
