"""Tests for the CommandFileWatcher."""

import os
import threading

from sidegauge.watcher import CommandFileWatcher, file_signature


class Recorder:
    def __init__(self) -> None:
        self.calls = []
        self.event = threading.Event()

    def __call__(self, path) -> None:
        self.calls.append(path)
        self.event.set()


def test_signature_of_missing_file_is_none(tmp_path):
    """Test a missing file has no signature."""
    assert file_signature(tmp_path / "missing.json") is None


class TestPoll:
    """Tests for single-shot change detection."""

    def test_no_change(self, tmp_path):
        """Test an unchanged file reports nothing."""
        path = tmp_path / "commands.json"
        path.write_text("{}", encoding="utf-8")
        recorder = Recorder()
        watcher = CommandFileWatcher(path, recorder)

        assert not watcher.poll()
        assert recorder.calls == []

    def test_creation(self, tmp_path):
        """Test creating the file is a change."""
        path = tmp_path / "commands.json"
        recorder = Recorder()
        watcher = CommandFileWatcher(path, recorder)

        path.write_text("{}", encoding="utf-8")

        assert watcher.poll()
        assert recorder.calls == [path]

    def test_size_change(self, tmp_path):
        """Test a size change is reported."""
        path = tmp_path / "commands.json"
        path.write_text("{}", encoding="utf-8")
        recorder = Recorder()
        watcher = CommandFileWatcher(path, recorder)

        path.write_text('{"A": "A.ps1"}', encoding="utf-8")

        assert watcher.poll()
        # Reported once per change
        assert not watcher.poll()

    def test_modification_time_change(self, tmp_path):
        """Test a modification time change is reported."""
        path = tmp_path / "commands.json"
        path.write_text("{}", encoding="utf-8")
        recorder = Recorder()
        watcher = CommandFileWatcher(path, recorder)

        st = os.stat(path)
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 5_000_000_000))

        assert watcher.poll()

    def test_rename_into_place(self, tmp_path):
        """Test renaming a file into place is reported."""
        path = tmp_path / "commands.json"
        path.write_text("{}", encoding="utf-8")
        recorder = Recorder()
        watcher = CommandFileWatcher(path, recorder)

        replacement = tmp_path / "incoming.json"
        replacement.write_text("{}", encoding="utf-8")
        os.replace(replacement, path)

        assert watcher.poll()

    def test_deletion(self, tmp_path):
        """Test deleting the file is reported."""
        path = tmp_path / "commands.json"
        path.write_text("{}", encoding="utf-8")
        recorder = Recorder()
        watcher = CommandFileWatcher(path, recorder)

        path.unlink()

        assert watcher.poll()

    def test_callback_error_is_contained(self, tmp_path):
        """Test a failing callback does not stop the watcher."""
        path = tmp_path / "commands.json"

        def broken(_path):
            raise RuntimeError("boom")

        watcher = CommandFileWatcher(path, broken)
        path.write_text("{}", encoding="utf-8")

        assert watcher.poll()


class TestWatcherThread:
    """Tests for the background thread."""

    def test_start_stop(self, tmp_path):
        """Test starting and stopping the watcher thread."""
        watcher = CommandFileWatcher(tmp_path / "commands.json", Recorder(), interval=0.05)

        watcher.start()
        assert watcher.is_running
        thread = watcher._thread
        watcher.start()
        assert watcher._thread is thread

        watcher.stop()
        assert not watcher.is_running

    def test_detects_change_in_background(self, tmp_path):
        """Test the background thread detects a change."""
        path = tmp_path / "commands.json"
        recorder = Recorder()
        watcher = CommandFileWatcher(path, recorder, interval=0.05)

        watcher.start()
        try:
            path.write_text('{"A": "A.ps1"}', encoding="utf-8")
            assert recorder.event.wait(timeout=2.0)
            assert recorder.calls[0] == path
        finally:
            watcher.stop()

    def test_daemon_thread(self, tmp_path):
        """Test the watcher runs as a daemon thread."""
        watcher = CommandFileWatcher(tmp_path / "commands.json", Recorder(), interval=0.05)

        watcher.start()
        try:
            assert watcher._thread.daemon is True
            assert watcher._thread.name == "CommandFileWatcher"
        finally:
            watcher.stop()
