"""
Exception hierarchy for gf-patterns.

Every failure the core reports to the front end is a ``GfError`` subclass; the
CLI turns any of them into a one-line message and ``ERROR_EXIT_CODE``.
"""

from __future__ import annotations

from typing import Iterable, Optional

__all__ = [
    "ERROR_EXIT_CODE",
    "GfError",
    "InvalidPatternError",
    "PatternNotFoundError",
    "SpawnError",
    "StorageError",
    "UnknownEngineError",
]

ERROR_EXIT_CODE = 1


class GfError(Exception):
    """Root exception for all gf-patterns errors."""


class InvalidPatternError(GfError):
    """Raised when a save request or a stored flag string is not well-formed."""


class PatternNotFoundError(GfError):
    """Raised when no pattern is stored under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No such pattern '{name}'")
        self.name = name


class UnknownEngineError(GfError):
    """Raised when an engine identifier is not in the registry."""

    def __init__(self, engine_id: str, known: Iterable[str] = ()) -> None:
        self.engine_id = engine_id
        self.known = tuple(known)
        message = f"Unknown engine '{engine_id}'"
        if self.known:
            message += f" (known engines: {', '.join(self.known)})"
        super().__init__(message)


class StorageError(GfError):
    """Raised when a pattern record cannot be read or written."""

    def __init__(self, name: str, cause: str, original: Optional[BaseException] = None) -> None:
        super().__init__(cause)
        self.name = name
        self.cause = cause
        self.original = original


class SpawnError(GfError):
    """Raised when the engine executable cannot be started."""

    def __init__(self, executable: str, cause: str) -> None:
        super().__init__(f"Failed to execute '{executable}': {cause}")
        self.executable = executable
        self.cause = cause
