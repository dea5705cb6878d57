"""TMPrep Exceptions

Custom exceptions for the template preparation pipeline.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class PrepError(Exception):
    """Base exception for all tmprep errors.

    The CLI prints `message` and exits with `exit_code`. Subclasses that carry
    the offending name or path build the message from it.
    """

    exit_code = 1

    def __init__(self, message: str, exit_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(PrepError):
    """Raised when configuration or the stylesheet cannot be loaded."""


class SourceNotFoundError(PrepError):
    """Raised when a template or layout source cannot be loaded."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Template source not found: {name}")


class SourceDecodeError(PrepError):
    """Raised when a template or layout source exists but cannot be read."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"Could not read template source {name}: {reason}")


class CyclicInheritanceError(PrepError):
    """Raised when an extends chain refers back to a template already in it."""

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"Cyclic template inheritance: {' -> '.join(self.chain)}")


class MarkupParseError(PrepError):
    """Raised when the layout-tag transform cannot process a document."""


class InlineError(PrepError):
    """Raised when CSS inlining fails."""


class CorruptPlaceholderError(PrepError):
    """A protected token whose payload does not decode."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Corrupt placeholder: {token[:60]}")


class WriteError(PrepError):
    """Raised when a compiled template cannot be written."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not write {path}{detail}")


class ValidationError(PrepError):
    """Raised when client input fails local validation."""


class ClientError(PrepError):
    """Raised when the mailer API answers with an error status."""

    def __init__(self, status: int, message: str):
        self.status = status
        super().__init__(f"FETCH FAILED: {status} {message}")
