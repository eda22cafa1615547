"""sidegauge - Textual sidebar application."""

import argparse
import json
import logging
import time
from dataclasses import asdict, replace
from pathlib import Path

from textual.app import App, ComposeResult
from textual.widgets import Footer, Input, Static

from sidegauge.config import WidgetConfig
from sidegauge.models import LoadLevel, MetricSnapshot, load_level
from sidegauge.session import WidgetSession

logger = logging.getLogger(__name__)

BAR_WIDTH = 20
LEVEL_COLORS = {
    LoadLevel.LOW: "green",
    LoadLevel.MEDIUM: "yellow",
    LoadLevel.HIGH: "red",
}


def render_bar(value: float | None) -> str:
    """Render a percentage as a coloured bar."""
    if value is None:
        return "[dim]" + "░" * BAR_WIDTH + "[/dim]"
    bar_len = min(max(int(value * BAR_WIDTH / 100), 0), BAR_WIDTH)
    color = LEVEL_COLORS[load_level(value)]
    return f"[{color}]" + "█" * bar_len + f"[/{color}]" + "[dim]" + "░" * (BAR_WIDTH - bar_len) + "[/dim]"


def format_percent(value: float | None) -> str:
    """Format a percentage, or n/a when unavailable."""
    return "  n/a" if value is None else f"{value:5.1f}%"


def format_network(snapshot: MetricSnapshot) -> str:
    """Format the network line."""
    if snapshot.net_sent_kbps is None or snapshot.net_recv_kbps is None:
        return "Net  n/a"
    return f"Net  ↑ {snapshot.net_sent_kbps:.0f} KB/s | ↓ {snapshot.net_recv_kbps:.0f} KB/s"


def format_ram(snapshot: MetricSnapshot) -> str:
    """Format the memory detail line."""
    if snapshot.ram_used_mb is None or snapshot.ram_total_mb is None:
        return format_percent(snapshot.ram_percent)
    return f"{format_percent(snapshot.ram_percent)} ({snapshot.ram_used_mb} MB / {snapshot.ram_total_mb} MB)"


class GaugePanel(Static):
    """Panel showing CPU, RAM, disk and network gauges."""

    DEFAULT_CSS = """
    GaugePanel {
        height: auto;
        min-height: 7;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize GaugePanel."""
        super().__init__(*args, **kwargs)
        self._snapshot: MetricSnapshot | None = None

    @property
    def snapshot(self) -> MetricSnapshot | None:
        """The snapshot currently displayed."""
        return self._snapshot

    def on_mount(self) -> None:
        """Show the placeholder text."""
        self.update(self._gauge_markup())

    def update_metrics(self, snapshot: MetricSnapshot) -> None:
        """Update the gauges from a metric snapshot."""
        self._snapshot = snapshot
        self.update(self._gauge_markup())

    def _gauge_markup(self) -> str:
        """Build the panel markup."""
        snapshot = self._snapshot
        if snapshot is None:
            return "Loading metrics..."
        # Escaped brackets for the bar containers
        return (
            f"CPU  \\[{render_bar(snapshot.cpu_percent)}] {format_percent(snapshot.cpu_percent)}\n"
            f"RAM  \\[{render_bar(snapshot.ram_percent)}] {format_ram(snapshot)}\n"
            f"Disk \\[{render_bar(snapshot.disk_percent)}] {format_percent(snapshot.disk_percent)}\n"
            f"{format_network(snapshot)}"
        )


class SidegaugeApp(App):
    """Main sidegauge application."""

    TITLE = "sidegauge"
    SUB_TITLE = "System gauge & script launcher"

    CSS = """
    Screen {
        layout: vertical;
    }

    #gauges {
        height: auto;
    }

    #command-input {
        margin-top: 1;
    }

    #status {
        height: auto;
        padding: 0 1;
        color: $warning;
    }
    """

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, session: WidgetSession | None = None) -> None:
        """Initialize the SidegaugeApp."""
        super().__init__()
        self._session = session or WidgetSession(WidgetConfig.from_env())
        self._last_status = ""

    @property
    def session(self) -> WidgetSession:
        """The widget session driving this app."""
        return self._session

    @property
    def last_status(self) -> str:
        """Status string of the last handled command."""
        return self._last_status

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield GaugePanel(id="gauges")
        yield Input(placeholder="command, NEW:<name>, DELETE:<name>, INFO", id="command-input")
        yield Static("", id="status", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        """Start the session when the app is mounted."""
        self._session.start()
        # Drain the session queue on the UI thread
        self.set_interval(0.25, self._check_for_updates)

    def on_unmount(self) -> None:
        """Stop the session threads when the app goes away."""
        self._session.stop()

    def _check_for_updates(self) -> None:
        """Process queued ticks and reloads and refresh the gauges."""
        try:
            snapshot = self._session.process_pending()
            if snapshot is not None:
                self.query_one("#gauges", GaugePanel).update_metrics(snapshot)
        except Exception:
            # The widget keeps running whatever a single tick does
            logger.exception("Update cycle failed")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle one submitted command line."""
        try:
            result = self._session.submit(event.value)
            self._last_status = result.status or ""
            self.query_one("#status", Static).update(self._last_status)
        except Exception:
            logger.exception("Command handling failed")
        event.input.value = ""

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._session.stop()
        self.exit()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(prog="sidegauge", description="System gauge and script launcher")
    ap.add_argument("--commands-file", type=Path, help="JSON command document")
    ap.add_argument("--scripts-dir", type=Path, help="Directory holding the scripts")
    ap.add_argument("--interpreter", help="Shell binary used to run scripts")
    ap.add_argument("--interval", type=float, help="Sampling period in seconds")
    ap.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    ap.add_argument("--headless-check", action="store_true", help="Print one sample as JSON and exit.")
    return ap.parse_args(argv)


def build_config(args: argparse.Namespace) -> WidgetConfig:
    """Environment-based config overridden by command line arguments."""
    config = WidgetConfig.from_env()
    if args.commands_file is not None:
        config = replace(config, commands_file=args.commands_file.expanduser())
    if args.scripts_dir is not None:
        config = replace(config, scripts_dir=args.scripts_dir.expanduser())
    if args.interpreter:
        config = replace(config, interpreter=args.interpreter)
    if args.interval is not None:
        config = replace(config, tick_interval=args.interval)
    return config


def configure_logging(log_file: Path, level: str) -> None:
    """Log to a file so the terminal UI stays clean; stderr if it can't be opened."""
    handler: logging.Handler
    try:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        handler = logging.StreamHandler()
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        handlers=[handler],
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for sidegauge application."""
    args = parse_args(argv)
    config = build_config(args)
    configure_logging(config.commands_file.with_name("sidegauge.log"), args.log_level)

    session = WidgetSession(config)
    if args.headless_check:
        time.sleep(config.tick_interval)
        print(json.dumps(asdict(session.tick()), indent=2))
        return

    app = SidegaugeApp(session)
    app.run()


if __name__ == "__main__":
    main()
