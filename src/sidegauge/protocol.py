"""Line-oriented command protocol."""

import logging

from sidegauge.launcher import ScriptLauncher
from sidegauge.models import CommandResult
from sidegauge.registry import CommandRegistry, canonicalize

logger = logging.getLogger(__name__)

ADD_PREFIX = "NEW:"
REMOVE_PREFIX = "DELETE:"
LIST_TOKEN = "INFO"
HELP_TEXT = f"Commands: {ADD_PREFIX}<name>, {REMOVE_PREFIX}<name>, {LIST_TOKEN}"


class CommandProtocol:
    """
    Stateless parser mapping one input line to a registry change or a launch.

    Precedence: ``NEW:``, ``DELETE:``, ``INFO``, then command invocation.
    """

    def __init__(self, registry: CommandRegistry, launcher: ScriptLauncher) -> None:
        self._registry = registry
        self._launcher = launcher

    def handle(self, line: str) -> CommandResult:
        """Handle one input line and report its effect."""
        text = line.strip()
        if not text:
            return CommandResult()
        logger.debug("Handling input %r", text)

        upper = text.upper()
        if upper.startswith(ADD_PREFIX):
            return self._add(text[len(ADD_PREFIX):])
        if upper.startswith(REMOVE_PREFIX):
            return self._remove(text[len(REMOVE_PREFIX):])
        if upper == LIST_TOKEN:
            return self._list()
        return self._invoke(text)

    def _add(self, name: str) -> CommandResult:
        key = canonicalize(name)
        if not key:
            return CommandResult()
        if key in self._registry:
            return CommandResult(status=f"Command {key} already exists")
        self._registry.add(key)
        return CommandResult(status=f"Added {key}", mutated=True)

    def _remove(self, name: str) -> CommandResult:
        key = canonicalize(name)
        if not key:
            return CommandResult()
        if not self._registry.remove(key):
            return CommandResult(status=f"Command {key} not found")
        return CommandResult(status=f"Deleted {key}", mutated=True)

    def _list(self) -> CommandResult:
        names = self._registry.names()
        if not names:
            return CommandResult(status="No commands defined")
        return CommandResult(status=f"{HELP_TEXT}\nDefined: {', '.join(names)}")

    def _invoke(self, text: str) -> CommandResult:
        key = canonicalize(text)
        filename = self._registry.get(key)
        if filename is None:
            return CommandResult(status=f"Unknown command: {text}")

        result = self._launcher.launch(filename)
        if not result.ok:
            return CommandResult(status=f"Failed to start {key}: {result.error}", launch=result)
        return CommandResult(status=f"Started {key}", launch=result)
