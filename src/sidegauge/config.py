"""Configuration for sidegauge."""

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

logger = logging.getLogger(__name__)

APP_FOLDER = "PPSA"
COMMANDS_FILENAME = "commands.json"
ENV_PREFIX = "SIDEGAUGE_"


def default_commands_file() -> Path:
    """``commands.json`` next to the running entry point."""
    entry = sys.argv[0] if sys.argv and sys.argv[0] else ""
    base = Path(entry).resolve().parent if entry else Path.cwd()
    return base / COMMANDS_FILENAME


def default_scripts_dir() -> Path:
    """The application's folder on the user's desktop."""
    return Path.home() / "Desktop" / APP_FOLDER


def default_interpreter() -> str:
    """PowerShell binary for the current platform."""
    return "powershell.exe" if sys.platform == "win32" else "pwsh"


@dataclass(slots=True, frozen=True)
class WidgetConfig:
    """Settings for one widget session."""

    commands_file: Path = field(default_factory=default_commands_file)
    scripts_dir: Path = field(default_factory=default_scripts_dir)
    interpreter: str = field(default_factory=default_interpreter)
    tick_interval: float = 1.0
    watch_interval: float = 0.5

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WidgetConfig":
        """
        Build a config from defaults overridden by ``SIDEGAUGE_*`` variables.

        Args:
            environ: Environment mapping. Defaults to ``os.environ``.
        """
        env = os.environ if environ is None else environ
        config = cls()

        if value := env.get(f"{ENV_PREFIX}COMMANDS_FILE"):
            config = replace(config, commands_file=Path(value).expanduser())
        if value := env.get(f"{ENV_PREFIX}SCRIPTS_DIR"):
            config = replace(config, scripts_dir=Path(value).expanduser())
        if value := env.get(f"{ENV_PREFIX}INTERPRETER"):
            config = replace(config, interpreter=value)
        if value := env.get(f"{ENV_PREFIX}TICK_INTERVAL"):
            try:
                config = replace(config, tick_interval=float(value))
            except ValueError:
                logger.warning("Ignoring invalid %sTICK_INTERVAL=%r", ENV_PREFIX, value)
        return config
