"""Periodic tick producer for sidegauge."""

import threading
from enum import Enum
from queue import Queue


class SessionEvent(Enum):
    """Events produced for the owning session."""

    TICK = "tick"
    RELOAD = "reload"


class Ticker:
    """
    Puts a TICK event onto a queue at a fixed period.

    Runs in a separate daemon thread. It never samples anything itself: the
    consumer of the queue runs the sampler on its own thread.
    """

    def __init__(
        self,
        events: Queue[SessionEvent],
        interval: float = 1.0,
    ) -> None:
        """
        Initialize the Ticker.

        Args:
            events: Thread-safe queue to push ticks to.
            interval: Tick period in seconds. Default 1.0s.
        """
        self._queue = events
        self._interval = max(0.1, interval)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        """Get the current tick period."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the tick period."""
        self._interval = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the ticker thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the ticker thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._tick_loop,
            daemon=True,
            name="Ticker",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the ticker thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _tick_loop(self) -> None:
        """Main loop running in the background thread."""
        # Wait for interval seconds or until stop is requested
        while not self._stop_event.wait(timeout=self._interval):
            self._queue.put(SessionEvent.TICK)
