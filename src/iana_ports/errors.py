"""Exception hierarchy for registry compilation.

Every fatal condition derives from RegistryError so callers can catch
compilation failure in one place.  Row-level noise (empty names, port
ranges, section headers) never raises; it is skipped by the compiler.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for all registry compilation failures."""


class SourceUnavailableError(RegistryError):
    """The row source is missing, unreadable, or of an unsupported type."""


class SchemaViolationError(RegistryError):
    """A row does not match the expected registry schema."""

    def __init__(self, message: str, *, row_number: int | None = None) -> None:
        self.row_number = row_number
        if row_number is not None:
            message = f"Row {row_number}: {message}"
        super().__init__(message)


class PerfectHashError(RegistryError):
    """No perfect hash could be generated for a key set."""
