"""
Fixer Errors
============

Exception hierarchy for the fixing pipeline. Every failure that aborts a run
derives from BPMNFixerError so the CLI can report it and pick an exit code.
"""

from pathlib import Path
from typing import Optional


class BPMNFixerError(Exception):
    """Base class for all fatal fixer errors."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(BPMNFixerError):
    """Invalid configuration, e.g. an illegal QName prefix character."""


class DiscoveryError(BPMNFixerError):
    """The path to scan could not be listed."""


class ParseError(BPMNFixerError):
    """An input file could not be read or is not well-formed XML."""


class WriteError(BPMNFixerError):
    """The output folder or a fixed file could not be created or written."""
