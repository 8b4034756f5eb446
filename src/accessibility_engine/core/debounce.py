"""
Debounced callback: schedule, cancel-and-reschedule, fire.
"""

import threading
from typing import Any, Callable, Optional, Tuple

from .ports import Cancellable, Scheduler


class Debouncer:
    """Collapse a burst of ``schedule`` calls into one callback.

    Every ``schedule`` cancels the pending timer and starts a new one carrying
    the latest arguments, so only the final call of a burst fires.
    """

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[..., None]):
        self._scheduler = scheduler
        self._delay = delay
        self._callback = callback
        self._lock = threading.Lock()
        self._handle: Optional[Cancellable] = None
        self._args: Tuple[Any, ...] = ()
        self._generation = 0

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._handle is not None

    def schedule(self, *args: Any) -> None:
        """(Re)start the timer with the given callback arguments."""
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            generation = self._generation
            self._args = args
            self._handle = self._scheduler.call_later(
                self._delay, lambda: self._fire(generation)
            )

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            self._cancel_locked()

    def flush(self) -> bool:
        """
        Run the pending call immediately.

        Returns:
            True if a call was pending and has been run
        """
        with self._lock:
            if self._handle is None:
                return False
            args = self._args
            self._cancel_locked()
        self._callback(*args)
        return True

    def _cancel_locked(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._args = ()
        self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._handle is None:
                return
            args = self._args
            self._handle = None
            self._args = ()
        self._callback(*args)
