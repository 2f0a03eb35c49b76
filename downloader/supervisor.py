"""
Cancellable execution of a single download.

The download runs on a worker thread while the calling thread waits on a
completion channel. The worker posts FINISHED when it returns; SIGINT and
SIGTERM post INTERRUPT and TERMINATE. Whichever marker arrives first decides
the outcome.
"""

import logging
import queue
import signal
import threading
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from utils.errors import DownloadCancelledError
from utils.logging import fields

logger = logging.getLogger(__name__)

T = TypeVar("T")

CANCELLED_MESSAGE = "Download cancelled manually"
PARTIAL_FILES_WARNINGS = (
    "Please note that when cancelling the model, partial files may have been downloaded.",
    "Please remove the related model directory or the cache if you want to clean up the partial files.",
)


class Marker(str, Enum):
    """Messages posted on the completion channel."""
    FINISHED = "finished"
    INTERRUPT = "interrupt"
    TERMINATE = "terminate"


class ExecutionState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CancellationToken:
    """Cancellation flag shared with the worker, with cancel callbacks."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], Any]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel the token. Runs the registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(f"Cancellation callback failed: {e}")

    def add_callback(self, callback: Callable[[], Any]) -> None:
        """Register a callback, run immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], Any]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class CancellableExecution:
    """
    Runs one function on a worker thread and races it against signals.

    Args:
        handle_signals: Install SIGINT/SIGTERM handlers while running. Only
            effective on the main thread.
        notify: Receives the user-facing cancellation notice, line by line.
    """

    def __init__(
        self,
        handle_signals: bool = True,
        notify: Optional[Callable[[str], Any]] = None
    ):
        self.handle_signals = handle_signals
        self.notify = notify or logger.warning
        self.state = ExecutionState.RUNNING
        self._done: queue.SimpleQueue = queue.SimpleQueue()

    def interrupt(self) -> None:
        """Request cancellation as if SIGINT was received."""
        self._done.put(Marker.INTERRUPT)

    def terminate(self) -> None:
        """Request cancellation as if SIGTERM was received."""
        self._done.put(Marker.TERMINATE)

    def _on_signal(self, signum, frame) -> None:
        # SimpleQueue.put is reentrant, safe inside a signal handler
        if signum == signal.SIGTERM:
            self._done.put(Marker.TERMINATE)
        else:
            self._done.put(Marker.INTERRUPT)

    def _install_signal_handlers(self) -> dict:
        if not self.handle_signals or threading.current_thread() is not threading.main_thread():
            return {}
        previous = {}
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, self._on_signal)
        return previous

    @staticmethod
    def _restore_signal_handlers(previous: dict) -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    def run(self, fn: Callable[[CancellationToken], T]) -> T:
        """
        Run `fn(token)` until it finishes or a cancellation marker arrives.

        Returns:
            The value returned by `fn`

        Raises:
            DownloadCancelledError: an interrupt or terminate marker won
            Exception: whatever `fn` raised when it finished first
        """
        self.state = ExecutionState.RUNNING
        token = CancellationToken()
        outcome: dict[str, Any] = {}
        # A cancelled worker may still post FINISHED later, on its own channel
        done = self._done = queue.SimpleQueue()

        def worker():
            try:
                outcome["result"] = fn(token)
            except BaseException as e:
                outcome["error"] = e
            finally:
                done.put(Marker.FINISHED)

        previous = self._install_signal_handlers()
        try:
            thread = threading.Thread(target=worker, name="download-worker", daemon=True)
            thread.start()
            marker = done.get()
        finally:
            token.cancel()
            self._restore_signal_handlers(previous)

        if marker == Marker.FINISHED:
            self.state = ExecutionState.COMPLETED
            if "error" in outcome:
                raise outcome["error"]
            return outcome.get("result")

        self.state = ExecutionState.CANCELLED
        logger.info("Download cancelled", extra=fields(marker=marker.value))
        self.notify(CANCELLED_MESSAGE)
        for line in PARTIAL_FILES_WARNINGS:
            self.notify(line)
        raise DownloadCancelledError(CANCELLED_MESSAGE)
