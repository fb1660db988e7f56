"""
Background Workers (Threading)
==============================
QThread subclasses for network fetches.

Why is this file needed?
------------------------
1. Responsiveness: If we call the backend on the main thread, the GUI freezes
   for the length of every request.
2. Signals: Results travel back to the GUI thread through Qt Signals, so the
   controllers are only ever mutated from one thread.

Classes:
    TaskWorker: Runs one callable and reports its result or error.
    WorkerPool: Keeps running workers alive until they finish.
"""
import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QThread, Signal

logger = logging.getLogger(__name__)


class TaskWorker(QThread):
    # Signals to update the UI from the background
    result_ready = Signal(object, object)  # (tag, result)
    error_occurred = Signal(object, str)   # (tag, message)

    def __init__(self, task: Callable[[], Any], tag: Any = None) -> None:
        super().__init__()
        self.task = task
        self.tag = tag

    def run(self) -> None:
        try:
            result = self.task()
        except Exception as e:
            logger.error(f"Error in TaskWorker ({self.tag}): {e}")
            self.error_occurred.emit(self.tag, str(e))
            return
        self.result_ready.emit(self.tag, result)


class WorkerPool(QObject):
    """Owns TaskWorkers so they are not garbage collected mid-run."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._workers: set[TaskWorker] = set()

    def submit(
        self,
        task: Callable[[], Any],
        on_result: Callable[[Any, Any], None],
        on_error: Callable[[Any, str], None],
        tag: Any = None,
    ) -> TaskWorker:
        worker = TaskWorker(task, tag)
        worker.result_ready.connect(on_result)
        worker.error_occurred.connect(on_error)
        worker.finished.connect(lambda: self._release(worker))
        self._workers.add(worker)
        worker.start()
        return worker

    def _release(self, worker: TaskWorker) -> None:
        self._workers.discard(worker)
        worker.deleteLater()

    def wait_all(self, msecs: int = 2000) -> None:
        for worker in list(self._workers):
            worker.wait(msecs)
