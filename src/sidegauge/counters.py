"""OS counter boundary for sidegauge.

The sampler only talks to a ``CounterSource``. ``PsutilCounters`` is the real
implementation; tests hand the sampler synthetic sources instead.
"""

import logging
import time
from collections.abc import Callable
from typing import Protocol

import psutil

from sidegauge.errors import CounterError
from sidegauge.models import CpuTimeSample, MemoryInfo, NetworkRates

logger = logging.getLogger(__name__)

TICKS_PER_SECOND = 10_000_000  # 100-ns ticks

_IDLE_FIELDS = ("idle", "iowait")
_USER_FIELDS = ("user", "nice")
# Linux already accounts guest time inside user time
_EXCLUDED_FIELDS = ("guest", "guest_nice")
_LOOPBACK_PREFIXES = ("lo", "loopback")


class CounterSource(Protocol):
    """Capability interface over the platform's raw counters."""

    def sample_cpu_times(self) -> CpuTimeSample: ...

    def sample_memory(self) -> MemoryInfo: ...

    def sample_disk_busy_percent(self) -> float: ...

    def bind_network_interface(self) -> str | None: ...

    def sample_network_rates(self) -> NetworkRates | None: ...


def _to_ticks(seconds: float) -> int:
    return int(seconds * TICKS_PER_SECOND)


class PsutilCounters:
    """
    Counter source backed by psutil.

    Disk and network counters are cumulative in psutil, so this class keeps
    the previous reading and reports rates over wall time, which is what the
    sampler expects from an instantaneous counter. The first read of each
    reports zero.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Initialize the PsutilCounters.

        Args:
            clock: Monotonic clock used to measure the interval between reads.
        """
        self._clock = clock
        self._interface: str | None = None
        self._prev_disk: tuple[float, float] | None = None  # (busy ms, time)
        self._prev_net: tuple[int, int, float] | None = None  # (sent, recv, time)

    @property
    def interface(self) -> str | None:
        """Name of the bound network interface, if any."""
        return self._interface

    def sample_cpu_times(self) -> CpuTimeSample:
        """Read cumulative idle/kernel/user time."""
        try:
            fields = psutil.cpu_times()._asdict()
        except Exception as exc:
            raise CounterError(f"cpu times unavailable: {exc}") from exc

        idle = sum(fields.get(name, 0.0) for name in _IDLE_FIELDS)
        user = sum(fields.get(name, 0.0) for name in _USER_FIELDS)
        total = sum(value for name, value in fields.items() if name not in _EXCLUDED_FIELDS)
        # Kernel is derived in ticks so idle never exceeds kernel + user by rounding
        user_ticks = _to_ticks(user)
        total_ticks = max(_to_ticks(total), user_ticks + _to_ticks(idle))
        return CpuTimeSample(
            idle=_to_ticks(idle),
            kernel=total_ticks - user_ticks,
            user=user_ticks,
        )

    def sample_memory(self) -> MemoryInfo:
        """Read physical memory status in one call."""
        try:
            mem = psutil.virtual_memory()
        except Exception as exc:
            raise CounterError(f"memory status unavailable: {exc}") from exc
        return MemoryInfo(total=mem.total, available=mem.available, load_percent=mem.percent)

    def sample_disk_busy_percent(self) -> float:
        """Percentage of wall time any physical disk was busy since the last read."""
        try:
            io = psutil.disk_io_counters(perdisk=False)
        except Exception as exc:
            raise CounterError(f"disk counters unavailable: {exc}") from exc
        if io is None:
            raise CounterError("no physical disks reported")

        busy_ms = getattr(io, "busy_time", None)
        if busy_ms is None:
            busy_ms = getattr(io, "read_time", 0) + getattr(io, "write_time", 0)

        now = self._clock()
        previous = self._prev_disk
        self._prev_disk = (float(busy_ms), now)
        if previous is None:
            return 0.0

        elapsed_ms = (now - previous[1]) * 1000.0
        if elapsed_ms <= 0:
            return 0.0
        percent = (busy_ms - previous[0]) * 100.0 / elapsed_ms
        return min(max(percent, 0.0), 100.0)

    def bind_network_interface(self) -> str | None:
        """Bind to the first non-loopback interface. Returns its name or None."""
        try:
            names = list(psutil.net_io_counters(pernic=True))
        except Exception:
            logger.warning("Could not enumerate network interfaces", exc_info=True)
            names = []

        for name in names:
            if not name.lower().startswith(_LOOPBACK_PREFIXES):
                self._interface = name
                logger.info("Bound network interface %s", name)
                return name

        logger.info("No network interface available, network metrics disabled")
        return None

    def sample_network_rates(self) -> NetworkRates | None:
        """Byte rates of the bound interface, or None if none is bound."""
        if self._interface is None:
            return None
        try:
            stats = psutil.net_io_counters(pernic=True)[self._interface]
        except KeyError as exc:
            raise CounterError(f"interface {self._interface} disappeared") from exc
        except Exception as exc:
            raise CounterError(f"network counters unavailable: {exc}") from exc

        now = self._clock()
        previous = self._prev_net
        self._prev_net = (stats.bytes_sent, stats.bytes_recv, now)
        if previous is None:
            return NetworkRates(sent_bytes_per_sec=0.0, recv_bytes_per_sec=0.0)

        elapsed = now - previous[2]
        if elapsed <= 0:
            return NetworkRates(sent_bytes_per_sec=0.0, recv_bytes_per_sec=0.0)
        # Counters can wrap or reset when the interface restarts
        sent = max(stats.bytes_sent - previous[0], 0) / elapsed
        recv = max(stats.bytes_recv - previous[1], 0) / elapsed
        return NetworkRates(sent_bytes_per_sec=sent, recv_bytes_per_sec=recv)
