"""sidegauge - system gauge sidebar with a script command launcher."""

__version__ = "0.1.0"
