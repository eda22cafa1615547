"""Shared fixtures for sidegauge tests."""

from collections.abc import Iterable

import pytest

from sidegauge.config import WidgetConfig
from sidegauge.errors import CounterError
from sidegauge.models import CpuTimeSample, LaunchRequest, MemoryInfo, NetworkRates

MB = 1024 * 1024


class FakeCounters:
    """Counter source fed from scripted sequences.

    A sequence item that is an exception instance is raised instead of returned.
    """

    def __init__(
        self,
        cpu: Iterable = (),
        memory: Iterable = (),
        disk: Iterable = (),
        network: Iterable = (),
        interface: str | None = "eth0",
    ) -> None:
        self.cpu = list(cpu)
        self.memory = list(memory)
        self.disk = list(disk)
        self.network = list(network)
        self.interface = interface
        self.bind_calls = 0

    @staticmethod
    def _next(items: list, name: str):
        if not items:
            raise CounterError(f"{name} exhausted")
        item = items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def sample_cpu_times(self) -> CpuTimeSample:
        return self._next(self.cpu, "cpu")

    def sample_memory(self) -> MemoryInfo:
        return self._next(self.memory, "memory")

    def sample_disk_busy_percent(self) -> float:
        return self._next(self.disk, "disk")

    def bind_network_interface(self) -> str | None:
        self.bind_calls += 1
        return self.interface

    def sample_network_rates(self) -> NetworkRates | None:
        return self._next(self.network, "network")


class RecordingSpawner:
    """Spawn callable that records requests instead of starting processes."""

    def __init__(self, error: Exception | None = None) -> None:
        self.requests: list[LaunchRequest] = []
        self.error = error

    def __call__(self, request: LaunchRequest) -> int:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return 4242


def cpu(idle: int, kernel: int, user: int) -> CpuTimeSample:
    """Shorthand for a CPU sample."""
    return CpuTimeSample(idle=idle, kernel=kernel, user=user)


def memory(total_mb: int, available_mb: int, percent: float) -> MemoryInfo:
    """Shorthand for a memory status in MB."""
    return MemoryInfo(total=total_mb * MB, available=available_mb * MB, load_percent=percent)


@pytest.fixture
def spawner() -> RecordingSpawner:
    """A recording spawn callable."""
    return RecordingSpawner()


@pytest.fixture
def scripts_dir(tmp_path):
    """Desktop application folder holding the scripts."""
    path = tmp_path / "Desktop" / "PPSA"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def config(tmp_path, scripts_dir) -> WidgetConfig:
    """Config pointing at temporary paths with fast intervals."""
    return WidgetConfig(
        commands_file=tmp_path / "commands.json",
        scripts_dir=scripts_dir,
        interpreter="pwsh",
        tick_interval=0.1,
        watch_interval=0.05,
    )


class SteadyCounters:
    """Counter source that reports a steady 25% CPU load forever."""

    def __init__(self) -> None:
        self.ticks = 0

    def sample_cpu_times(self) -> CpuTimeSample:
        self.ticks += 1
        return CpuTimeSample(idle=75 * self.ticks, kernel=100 * self.ticks, user=0)

    def sample_memory(self) -> MemoryInfo:
        return memory(8192, 2048, 75.0)

    def sample_disk_busy_percent(self) -> float:
        return 10.0

    def bind_network_interface(self) -> str | None:
        return "eth0"

    def sample_network_rates(self) -> NetworkRates:
        return NetworkRates(1024.0, 2048.0)
