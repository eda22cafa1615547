"""Tests for sidegauge data models."""

from pathlib import Path

from sidegauge.models import (
    CommandResult,
    CpuTimeSample,
    LaunchRequest,
    LoadLevel,
    MetricSnapshot,
    load_level,
)


def make_snapshot(**overrides) -> MetricSnapshot:
    values = dict(
        cpu_percent=12.5,
        ram_percent=40.0,
        ram_used_mb=6553,
        ram_total_mb=16384,
        disk_percent=3.0,
        net_sent_kbps=1.5,
        net_recv_kbps=20.0,
    )
    values.update(overrides)
    return MetricSnapshot(**values)


def test_metric_snapshot_creation():
    """Test MetricSnapshot dataclass creation."""
    snapshot = make_snapshot()

    assert snapshot.cpu_percent == 12.5
    assert snapshot.ram_percent == 40.0
    assert snapshot.ram_used_mb == 6553
    assert snapshot.ram_total_mb == 16384
    assert snapshot.disk_percent == 3.0
    assert snapshot.net_sent_kbps == 1.5
    assert snapshot.net_recv_kbps == 20.0


def test_metric_snapshot_allows_unavailable_metrics():
    """Test None marks an unavailable metric."""
    snapshot = make_snapshot(net_sent_kbps=None, net_recv_kbps=None)
    assert snapshot.net_sent_kbps is None
    assert snapshot.net_recv_kbps is None


def test_metric_snapshot_is_frozen():
    """Test that MetricSnapshot is immutable (frozen)."""
    snapshot = make_snapshot()

    try:
        snapshot.cpu_percent = 99.0
        raise AssertionError("Should have raised FrozenInstanceError")
    except AttributeError:
        pass  # Expected behavior for frozen dataclass


def test_cpu_time_sample_uses_slots():
    """Test that CpuTimeSample uses __slots__ for memory efficiency."""
    sample = CpuTimeSample(idle=1, kernel=2, user=3)

    # Slots-based dataclasses don't have __dict__
    assert not hasattr(sample, "__dict__")


def test_launch_request_argv():
    """Test argv puts the interpreter first."""
    request = LaunchRequest(
        executable="pwsh",
        arguments=("-File", "/tmp/A.ps1"),
        script_path=Path("/tmp/A.ps1"),
        working_directory=Path("/tmp"),
    )
    assert request.argv == ["pwsh", "-File", "/tmp/A.ps1"]


def test_command_result_defaults():
    """Test an empty CommandResult reports nothing."""
    result = CommandResult()
    assert result.status is None
    assert result.mutated is False
    assert result.launch is None


class TestLoadLevel:
    """Tests for the display colour hint."""

    def test_low(self):
        """Test the low band."""
        assert load_level(0.0) is LoadLevel.LOW
        assert load_level(49.9) is LoadLevel.LOW

    def test_medium(self):
        """Test the medium band."""
        assert load_level(50.0) is LoadLevel.MEDIUM
        assert load_level(84.9) is LoadLevel.MEDIUM

    def test_high(self):
        """Test the high band."""
        assert load_level(85.0) is LoadLevel.HIGH
        assert load_level(100.0) is LoadLevel.HIGH
