"""Whisperbox: anonymous messages for verified accounts."""

__version__ = "0.1.0"
