"""Command registry and its JSON persistence."""

import json
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from sidegauge.errors import MalformedDocumentError, PersistenceError

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".ps1"


def canonicalize(name: str) -> str:
    """Canonical form of a command name: trimmed and upper-cased."""
    return name.strip().upper()


class CommandStore:
    """
    Reads and writes the command document.

    The document is a JSON object mapping command names to script filenames.
    Errors are raised as ``PersistenceError``; the registry decides how to
    degrade.
    """

    def __init__(self, path: Path) -> None:
        """
        Initialize the CommandStore.

        Args:
            path: Location of the JSON document.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Location of the JSON document."""
        return self._path

    def read(self) -> dict[str, str]:
        """
        Read and validate the document.

        Raises:
            PersistenceError: The file is missing, unreadable or not JSON.
            MalformedDocumentError: The JSON is not a string-to-string object.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"cannot read {self._path}: {exc}") from exc

        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as exc:
            raise PersistenceError(f"invalid JSON in {self._path}: {exc}") from exc

        if not isinstance(data, dict):
            raise MalformedDocumentError(f"{self._path} is not a JSON object")
        for key, value in data.items():
            if not isinstance(value, str):
                raise MalformedDocumentError(f"{self._path}: value for {key!r} is not a string")
        return data

    def write(self, commands: dict[str, str]) -> None:
        """
        Write the full mapping as indented JSON.

        The document is written to a sibling temp file and moved into place so
        a concurrent reader never sees a half-written file.

        Raises:
            PersistenceError: The document could not be written.
        """
        text = json.dumps(commands, indent=4, ensure_ascii=False) + "\n"
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceError(f"cannot write {self._path}: {exc}") from exc


class CommandRegistry:
    """
    In-memory command table mirrored to a ``CommandStore``.

    The in-memory mapping is authoritative. Every mutation is persisted; a
    failed write is logged and the mapping is kept. Not thread-safe: the
    owning session serializes all calls.
    """

    def __init__(self, store: CommandStore) -> None:
        """
        Initialize the CommandRegistry with an empty table.

        Args:
            store: Persistence backend.
        """
        self._store = store
        self._commands: dict[str, str] = {}

    @property
    def store(self) -> CommandStore:
        """The persistence backend."""
        return self._store

    def load(self) -> None:
        """Replace the table with the document's contents, or empty it on failure."""
        try:
            commands = self._store.read()
        except MalformedDocumentError as exc:
            logger.warning("Ignoring malformed command document: %s", exc)
            commands = {}
        except PersistenceError as exc:
            logger.info("No usable command document: %s", exc)
            commands = {}
        self._commands = commands
        logger.debug("Loaded %d commands", len(commands))

    def save(self) -> bool:
        """Persist the table. Returns False if the write failed."""
        try:
            self._store.write(self._commands)
        except PersistenceError as exc:
            logger.warning("Failed to save commands: %s", exc)
            return False
        return True

    def add(self, name: str) -> bool:
        """
        Register ``name`` with the default script ``<NAME>.ps1``.

        Returns:
            False if the canonical name is empty or already registered.
        """
        key = canonicalize(name)
        if not key or key in self._commands:
            return False
        self._commands[key] = key + SCRIPT_SUFFIX
        self.save()
        logger.info("Added command %s", key)
        return True

    def remove(self, name: str) -> bool:
        """Unregister ``name``. Returns False if it was not registered."""
        key = canonicalize(name)
        if key not in self._commands:
            return False
        del self._commands[key]
        self.save()
        logger.info("Deleted command %s", key)
        return True

    def get(self, name: str) -> str | None:
        """Script filename registered for ``name``, if any."""
        return self._commands.get(canonicalize(name))

    def names(self) -> list[str]:
        """Registered command names in registry order."""
        return list(self._commands)

    def as_dict(self) -> dict[str, str]:
        """Copy of the table."""
        return dict(self._commands)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and canonicalize(name) in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._commands))
