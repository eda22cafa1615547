"""Exceptions raised inside sidegauge.

None of these are fatal: every one is caught at the component boundary and
turned into a degraded value, an empty registry, or a status string.
"""


class SidegaugeError(Exception):
    """Base class for all sidegauge errors."""


class CounterError(SidegaugeError):
    """A single OS counter read failed for this tick."""


class PersistenceError(SidegaugeError):
    """The command document could not be read or written."""


class MalformedDocumentError(PersistenceError):
    """The command document parsed but is not a string-to-string mapping."""


class LaunchError(SidegaugeError):
    """An external script could not be started."""
