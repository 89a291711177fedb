"""designer_lint/errors.py — exception hierarchy.

Findings about the analysed code are *diagnostics*, never exceptions.
The classes here cover failures of the tool itself::

    DesignerLintError
    ├── ConfigError    - unreadable or invalid configuration
    └── SourceError    - input file could not be read
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class DesignerLintError(Exception):
    """Base class for all designer-lint failures."""


class ConfigError(DesignerLintError):
    """Raised for a configuration file or value that cannot be used."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        self.path = str(path) if path is not None else None
        super().__init__(f"{self.path}: {message}" if self.path else message)


class SourceError(DesignerLintError):
    """Raised when a source file cannot be read."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


__all__ = ["DesignerLintError", "ConfigError", "SourceError"]
