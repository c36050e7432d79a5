"""Metadata extraction for software-evolution proposal documents."""

__version__ = "0.4.0"
