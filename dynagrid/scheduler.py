"""
Auto-run driver — calls a step callback at a fixed interval.

The engine knows nothing about time. An AutoRunner owns the timer: a
single background thread, the interval, and a cancellation event. Calls
to the callback never overlap because they all come from that one thread.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional


class AutoRunner:
    """Invoke ``callback`` every ``interval`` seconds until stopped."""

    def __init__(self, callback: Callable[[], object], interval: float = 0.2):
        if interval < 0:
            raise ValueError(f"interval must be non-negative, got {interval}")
        self.callback = callback
        self._interval = interval
        self._cancel = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"interval must be non-negative, got {value}")
        self._interval = value

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start ticking; waits for a stopped thread still inside a callback."""
        thread = self._thread
        if thread is not None and thread.is_alive():
            if not self._cancel.is_set():
                return
            if thread is threading.current_thread():
                raise RuntimeError("Cannot restart an AutoRunner from its own callback")
            thread.join()
        self._cancel = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._cancel,),
                                        daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Cancel the loop and wait for the current tick to finish."""
        self._cancel.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is not None and not thread.is_alive():
            self._thread = None

    def _run(self, cancel: threading.Event) -> None:
        while not cancel.wait(self._interval):
            self.callback()
            self.ticks += 1
