"""SAILROUTE - time-dependent minimum-time sailing router."""

__version__ = "0.1.0"
