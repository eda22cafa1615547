"""Change detection for the command document."""

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

# (mtime_ns, size, inode), or None when the file does not exist
FileSignature = tuple[int, int, int] | None


def file_signature(path: Path) -> FileSignature:
    """Cheap fingerprint of a file that changes on write, resize or rename."""
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size, st.st_ino)


class CommandFileWatcher:
    """
    Polls the command document and reports every change.

    Runs in a daemon thread. ``on_change`` is called from that thread, so it
    should only hand the event over to the owning context (e.g. enqueue it).
    """

    def __init__(
        self,
        path: Path,
        on_change: Callable[[Path], None],
        interval: float = 0.5,
    ) -> None:
        """
        Initialize the CommandFileWatcher.

        Args:
            path: File to watch. It does not need to exist yet.
            on_change: Called with ``path`` whenever the file changes.
            interval: Seconds between polls.
        """
        self._path = Path(path)
        self._on_change = on_change
        self._interval = max(0.05, interval)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._signature: FileSignature = file_signature(self._path)

    @property
    def is_running(self) -> bool:
        """Check if the watcher thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the watcher thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._signature = file_signature(self._path)
        self._thread = threading.Thread(
            target=self._watch_loop,
            daemon=True,
            name="CommandFileWatcher",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the watcher thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def poll(self) -> bool:
        """Check the file once. Returns True and fires the callback on change."""
        signature = file_signature(self._path)
        if signature == self._signature:
            return False
        self._signature = signature
        try:
            self._on_change(self._path)
        except Exception:
            logger.exception("Change callback failed for %s", self._path)
        return True

    def _watch_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.wait(timeout=self._interval):
            self.poll()
