"""
Thread-based scheduler for deferred and background work.

Timers run on short-lived daemon threads; background work (remote fetches
and writes) runs on a small persistent worker pool so it never blocks the
interaction thread.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Set

from ..utils.logger import get_logger

logger = get_logger(__name__)


class TimerHandle:
    """Cancellable handle for a scheduled callback."""

    def __init__(self, scheduler: "ThreadScheduler"):
        self._scheduler = scheduler
        self._timer: Optional[threading.Timer] = None
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()
        if self._timer is not None:
            self._timer.cancel()
        self._scheduler._forget(self)


class ThreadScheduler:
    """Scheduler backed by ``threading.Timer`` and a thread pool.

    Example:
        scheduler = ThreadScheduler()
        handle = scheduler.call_later(1.0, flush)
        handle.cancel()
        scheduler.submit(client.save, identity, record)
        scheduler.call_soon(apply_result, record)
        scheduler.shutdown()
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="AccessibilitySync",
        )
        self._handles: Set[TimerHandle] = set()
        self._lock = threading.Lock()
        self._closed = False

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds on a timer thread."""
        handle = TimerHandle(self)

        def _fire():
            self._forget(handle)
            if handle.cancelled:
                return
            try:
                callback()
            except Exception as e:
                logger.error(f"Scheduled callback failed: {e}", exc_info=True)

        timer = threading.Timer(delay, _fire)
        timer.daemon = True
        handle._timer = timer

        with self._lock:
            if self._closed:
                raise RuntimeError("Scheduler has been shut down")
            self._handles.add(handle)
        timer.start()
        return handle

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Run ``fn(*args)`` on the worker pool."""
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._report_failure)
        return future

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> None:
        """
        Run ``fn(*args)`` right away on the calling thread.

        Without an event loop there is no interaction thread to hand work
        back to; callers serialize through the store lock instead.
        """
        try:
            fn(*args)
        except Exception as e:
            logger.error(f"Posted callback failed: {e}", exc_info=True)

    def shutdown(self, wait: bool = True) -> None:
        """
        Cancel pending timers and stop the worker pool.

        Args:
            wait: Block until already-submitted work finishes
        """
        with self._lock:
            self._closed = True
            handles = list(self._handles)
        for handle in handles:
            handle.cancel()
        self._executor.shutdown(wait=wait)

    @property
    def pending_timers(self) -> int:
        with self._lock:
            return len(self._handles)

    def _forget(self, handle: TimerHandle) -> None:
        with self._lock:
            self._handles.discard(handle)

    @staticmethod
    def _report_failure(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(f"Background task failed: {type(exc).__name__}: {exc}")
