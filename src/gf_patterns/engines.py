"""Search engines a pattern can be replayed with."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from .config import DEFAULT_ENGINE
from .errors import UnknownEngineError

logger = logging.getLogger("gf_patterns.engines")


@dataclass(frozen=True)
class EngineSpec:
    """Identifier and executable of a search engine. Flags are never translated."""

    identifier: str
    executable: str


ENGINES: Dict[str, str] = {
    "grep": "grep",
    "egrep": "egrep",
    "fgrep": "fgrep",
    "rg": "rg",
    "ag": "ag",
    "ack": "ack",
    "ugrep": "ugrep",
}


class EngineRegistry:
    """Resolve engine identifiers to executables, falling back to a configured default."""

    def __init__(self, default_engine: str = DEFAULT_ENGINE, engines: Optional[Mapping[str, str]] = None) -> None:
        self._engines = dict(ENGINES if engines is None else engines)
        self._default_engine = default_engine

    @property
    def default_engine(self) -> str:
        return self._default_engine

    def identifiers(self) -> List[str]:
        return sorted(self._engines)

    def is_known(self, identifier: str) -> bool:
        return identifier in self._engines

    def resolve(self, identifier: Optional[str] = None) -> EngineSpec:
        engine_id = self._default_engine if identifier is None else identifier
        try:
            executable = self._engines[engine_id]
        except KeyError:
            raise UnknownEngineError(engine_id, self.identifiers()) from None
        logger.debug("Resolved engine %s -> %s", engine_id, executable)
        return EngineSpec(identifier=engine_id, executable=executable)
