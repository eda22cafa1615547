"""Metric sampler: turns raw OS counters into normalized metrics."""

import logging

from sidegauge.counters import CounterSource
from sidegauge.models import CpuTimeSample, MetricSnapshot

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


def cpu_percent(previous: CpuTimeSample, current: CpuTimeSample) -> float:
    """
    CPU busy percentage between two cumulative samples.

    Args:
        previous: Sample from the previous tick.
        current: Sample from this tick.

    Returns:
        ``busy * 100 / total``, or 0.0 when no time elapsed. Busy time is
        kept within ``[0, total]`` so rounding in the counters never shows
        up as a negative or above-100 reading.
    """
    d_idle = current.idle - previous.idle
    d_kernel = current.kernel - previous.kernel
    d_user = current.user - previous.user

    total = d_kernel + d_user
    if total <= 0:
        return 0.0
    busy = min(max(total - d_idle, 0), total)
    return busy * 100.0 / total


class MetricSampler:
    """
    Samples CPU, memory, disk and network once per tick.

    Each metric is read independently. A failed read keeps the metric's
    previous value (or None if it never succeeded) and never stops the tick.
    Not thread-safe: call ``sample()`` from one owning thread only.
    """

    def __init__(self, counters: CounterSource) -> None:
        """
        Initialize the MetricSampler.

        Takes the baseline CPU sample and binds the network interface once.

        Args:
            counters: Source of raw OS counters.
        """
        self._counters = counters
        self._previous_cpu: CpuTimeSample | None = self._read_cpu_baseline()
        self._network_enabled = self._bind_network()
        self._last = MetricSnapshot(
            cpu_percent=None,
            ram_percent=None,
            ram_used_mb=None,
            ram_total_mb=None,
            disk_percent=None,
            net_sent_kbps=None,
            net_recv_kbps=None,
        )

    @property
    def last(self) -> MetricSnapshot:
        """The most recent snapshot (all None before the first tick)."""
        return self._last

    @property
    def network_enabled(self) -> bool:
        """Whether a network interface was bound at startup."""
        return self._network_enabled

    def _read_cpu_baseline(self) -> CpuTimeSample | None:
        try:
            return self._counters.sample_cpu_times()
        except Exception:
            logger.warning("Baseline CPU sample failed", exc_info=True)
            return None

    def _bind_network(self) -> bool:
        try:
            return self._counters.bind_network_interface() is not None
        except Exception:
            logger.warning("Network interface binding failed", exc_info=True)
            return False

    def sample(self) -> MetricSnapshot:
        """Run one tick and return the fresh snapshot."""
        cpu = self._sample_cpu()
        ram_percent, ram_used_mb, ram_total_mb = self._sample_memory()
        disk = self._sample_disk()
        net_sent, net_recv = self._sample_network()

        self._last = MetricSnapshot(
            cpu_percent=cpu,
            ram_percent=ram_percent,
            ram_used_mb=ram_used_mb,
            ram_total_mb=ram_total_mb,
            disk_percent=disk,
            net_sent_kbps=net_sent,
            net_recv_kbps=net_recv,
        )
        return self._last

    def _sample_cpu(self) -> float | None:
        try:
            current = self._counters.sample_cpu_times()
        except Exception as exc:
            logger.debug("CPU read failed: %s", exc)
            return self._last.cpu_percent

        previous = self._previous_cpu
        # Replaced even when the delta is zero so the next tick starts here
        self._previous_cpu = current
        if previous is None:
            return 0.0
        return cpu_percent(previous, current)

    def _sample_memory(self) -> tuple[float | None, int | None, int | None]:
        try:
            mem = self._counters.sample_memory()
        except Exception as exc:
            logger.debug("Memory read failed: %s", exc)
            return self._last.ram_percent, self._last.ram_used_mb, self._last.ram_total_mb

        used_mb = (mem.total - mem.available) // BYTES_PER_MB
        total_mb = mem.total // BYTES_PER_MB
        return float(mem.load_percent), used_mb, total_mb

    def _sample_disk(self) -> float | None:
        try:
            return float(self._counters.sample_disk_busy_percent())
        except Exception as exc:
            logger.debug("Disk read failed: %s", exc)
            return self._last.disk_percent

    def _sample_network(self) -> tuple[float | None, float | None]:
        if not self._network_enabled:
            return None, None
        try:
            rates = self._counters.sample_network_rates()
        except Exception as exc:
            logger.debug("Network read failed: %s", exc)
            return self._last.net_sent_kbps, self._last.net_recv_kbps

        if rates is None:
            return None, None
        return rates.sent_bytes_per_sec / 1024, rates.recv_bytes_per_sec / 1024
