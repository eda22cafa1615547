"""Widget session: the single context that owns sampler and registry state."""

import logging
from pathlib import Path
from queue import Empty, Queue

from sidegauge.config import WidgetConfig
from sidegauge.counters import CounterSource, PsutilCounters
from sidegauge.launcher import ScriptLauncher, Spawner
from sidegauge.models import CommandResult, MetricSnapshot
from sidegauge.protocol import CommandProtocol
from sidegauge.registry import CommandRegistry, CommandStore
from sidegauge.sampler import MetricSampler
from sidegauge.ticker import SessionEvent, Ticker
from sidegauge.watcher import CommandFileWatcher

logger = logging.getLogger(__name__)


class WidgetSession:
    """
    Owns the sampler, the registry and the threads that drive them.

    The ticker and the file watcher only put events on a queue. All state
    changes happen in ``process_pending()`` and ``submit()``, which must be
    called from one owning thread (the UI loop).
    """

    def __init__(
        self,
        config: WidgetConfig,
        counters: CounterSource | None = None,
        spawn: Spawner | None = None,
    ) -> None:
        """
        Initialize the WidgetSession.

        Args:
            config: Session settings.
            counters: OS counter source. Defaults to ``PsutilCounters``.
            spawn: Process-spawning callable passed to the launcher.
        """
        self._config = config
        self._events: Queue[SessionEvent] = Queue()
        self._sampler = MetricSampler(counters or PsutilCounters())
        self._registry = CommandRegistry(CommandStore(config.commands_file))
        self._launcher = ScriptLauncher(config.scripts_dir, config.interpreter, spawn=spawn)
        self._protocol = CommandProtocol(self._registry, self._launcher)
        self._ticker = Ticker(self._events, interval=config.tick_interval)
        self._watcher = CommandFileWatcher(
            config.commands_file,
            self._on_file_change,
            interval=config.watch_interval,
        )
        self._registry.load()

    @property
    def config(self) -> WidgetConfig:
        """Session settings."""
        return self._config

    @property
    def registry(self) -> CommandRegistry:
        """The command registry."""
        return self._registry

    @property
    def sampler(self) -> MetricSampler:
        """The metric sampler."""
        return self._sampler

    @property
    def is_running(self) -> bool:
        """Check if the background producers are running."""
        return self._ticker.is_running and self._watcher.is_running

    def start(self) -> None:
        """Start the ticker and the file watcher, then reload the registry.

        The watcher takes its baseline first, so an edit made between
        construction and start is either loaded here or reported by the watcher.
        """
        self._watcher.start()
        self._registry.load()
        self._ticker.start()
        logger.info("Session started, commands file %s", self._config.commands_file)

    def stop(self) -> None:
        """Stop the background producers."""
        self._ticker.stop()
        self._watcher.stop()

    def _on_file_change(self, path: Path) -> None:
        """Watcher-thread callback: hand the change over to the owning thread."""
        logger.debug("Command document changed: %s", path)
        self.request_reload()

    def request_reload(self) -> None:
        """Ask the owning thread to reload the registry. Thread-safe."""
        self._events.put(SessionEvent.RELOAD)

    def process_pending(self) -> MetricSnapshot | None:
        """
        Drain queued events on the calling (owning) thread.

        Ticks that piled up are coalesced into one sample, and any number of
        reload requests into one reload.

        Returns:
            The fresh snapshot if a tick ran, else None.
        """
        tick = False
        reload = False
        while True:
            try:
                event = self._events.get_nowait()
            except Empty:
                break
            if event is SessionEvent.TICK:
                tick = True
            elif event is SessionEvent.RELOAD:
                reload = True

        if reload:
            self._registry.load()
        if tick:
            return self.tick()
        return None

    def tick(self) -> MetricSnapshot:
        """Run one sampler tick."""
        return self._sampler.sample()

    def submit(self, line: str) -> CommandResult:
        """Handle one line of user input."""
        return self._protocol.handle(line)
