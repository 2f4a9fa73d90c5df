"""Shared data models for gf-patterns."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestMode(str, Enum):
    """Operations the front end can ask the core to perform."""

    SAVE = "save"
    LIST = "list"
    USE = "use"
    DUMP = "dump"
    DELETE = "delete"


class PatternRecord(BaseModel):
    """A named search: which engine to run, with which flags, for which expression."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique, case-sensitive key within the store.")
    engine: Optional[str] = Field(
        default=None,
        description="Engine identifier; None falls back to the configured default engine.",
    )
    flags: str = Field(default="", description="Opaque flag string, split with shell-word rules.")
    expression: str = Field(..., min_length=1, description="Search expression, always passed as one argument.")


class PatternFile(BaseModel):
    """On-disk JSON layout of a single pattern, compatible with existing gf pattern files."""

    model_config = ConfigDict(extra="ignore")

    flags: Optional[str] = None
    pattern: Optional[str] = None
    patterns: Optional[List[str]] = None
    engine: Optional[str] = None

    def expression(self) -> Optional[str]:
        """Return the search expression, joining legacy ``patterns`` lists as an alternation.

        A present ``pattern`` key always wins; an empty one means no expression.
        """
        if self.pattern is not None:
            return self.pattern or None
        if self.patterns:
            return "(" + "|".join(self.patterns) + ")"
        return None

    def to_record(self, name: str) -> Optional[PatternRecord]:
        expression = self.expression()
        if expression is None:
            return None
        return PatternRecord(
            name=name,
            engine=self.engine or None,
            flags=self.flags or "",
            expression=expression,
        )

    @classmethod
    def from_record(cls, record: PatternRecord) -> "PatternFile":
        return cls(
            flags=record.flags or None,
            pattern=record.expression,
            engine=record.engine,
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Request(BaseModel):
    """Parsed front-end invocation handed to the dispatcher."""

    mode: RequestMode
    name: Optional[str] = None
    engine: Optional[str] = Field(default=None, description="Engine override supplied with --engine.")
    flags: str = ""
    pattern: Optional[str] = None
    args: List[str] = Field(default_factory=list, description="Runtime arguments appended to the command.")
