"""User interface components for vaultscribe."""

from .console import RecordingConsoleUI

__all__ = ["RecordingConsoleUI"]
