"""Wakedeck: register network devices and wake them with magic packets."""

__version__ = "0.1.0"
