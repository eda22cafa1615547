"""Data models for sidegauge."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(slots=True, frozen=True)
class CpuTimeSample:
    """Cumulative CPU time counters since boot, in 100-ns ticks.

    Kernel time includes idle time, so busy time is ``kernel + user - idle``.
    """

    idle: int
    kernel: int
    user: int


@dataclass(slots=True, frozen=True)
class MemoryInfo:
    """Physical memory status as reported by the OS."""

    total: int  # Bytes
    available: int  # Bytes
    load_percent: float  # 0.0 - 100.0


@dataclass(slots=True, frozen=True)
class NetworkRates:
    """Byte rates of the bound network interface."""

    sent_bytes_per_sec: float
    recv_bytes_per_sec: float


@dataclass(slots=True, frozen=True)
class MetricSnapshot:
    """Normalized metrics for one tick. ``None`` marks an unavailable metric."""

    cpu_percent: float | None
    ram_percent: float | None
    ram_used_mb: int | None
    ram_total_mb: int | None
    disk_percent: float | None
    net_sent_kbps: float | None
    net_recv_kbps: float | None


@dataclass(slots=True, frozen=True)
class LaunchRequest:
    """Everything needed to spawn one external script."""

    executable: str
    arguments: tuple[str, ...]
    script_path: Path
    working_directory: Path

    @property
    def argv(self) -> list[str]:
        """Full argument vector, interpreter first."""
        return [self.executable, *self.arguments]


@dataclass(slots=True, frozen=True)
class LaunchResult:
    """Outcome of a launch request. The spawned process is not tracked."""

    request: LaunchRequest
    ok: bool
    error: str | None = None
    pid: int | None = None


@dataclass(slots=True, frozen=True)
class CommandResult:
    """Externally visible effect of one handled input line."""

    status: str | None = None
    mutated: bool = False
    launch: LaunchResult | None = None


class LoadLevel(Enum):
    """Display colour hint for a percentage gauge."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def load_level(value: float) -> LoadLevel:
    """Map a percentage to its colour hint."""
    if value < 50:
        return LoadLevel.LOW
    if value < 85:
        return LoadLevel.MEDIUM
    return LoadLevel.HIGH
