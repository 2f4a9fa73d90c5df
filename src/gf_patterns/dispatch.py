from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .builder import Command, build_command, tokenize_flags
from .engines import EngineRegistry
from .errors import InvalidPatternError
from .executor import CommandExecutor
from .persistence.store import JsonPatternStore, PatternListing, validate_name
from .schemas import PatternRecord, Request, RequestMode


LOGGER = logging.getLogger("gf_patterns.dispatch")


@dataclass
class DispatchResult:
    """Outcome of a handled request: what to print and which status to exit with."""

    exit_code: int = 0
    output: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class PatternDispatcher:
    """Coordinate the store, engine registry and executor for each request mode."""

    def __init__(
        self,
        store: JsonPatternStore,
        registry: EngineRegistry,
        executor: Optional[CommandExecutor] = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._executor = executor or CommandExecutor()

    def handle(self, request: Request) -> DispatchResult:
        LOGGER.debug("Handling %s request for %r", request.mode.value, request.name)
        if request.mode is RequestMode.SAVE:
            self.save(request.name, request.flags, request.pattern, engine=request.engine)
            return DispatchResult()

        if request.mode is RequestMode.LIST:
            listing = self.list_patterns()
            return DispatchResult(output=listing.names, warnings=[str(error) for error in listing.skipped])

        if request.mode is RequestMode.DELETE:
            self.delete(self._require_name(request.name))
            return DispatchResult()

        name = self._require_name(request.name, message="Pattern name is required")
        if request.mode is RequestMode.DUMP:
            return DispatchResult(output=[self.dump(name, request.args, engine=request.engine)])
        return DispatchResult(exit_code=self.use(name, request.args, engine=request.engine))

    def save(
        self,
        name: Optional[str],
        flags: str,
        pattern: Optional[str],
        engine: Optional[str] = None,
    ) -> PatternRecord:
        name = self._require_name(name)
        validate_name(name)
        if not pattern:
            raise InvalidPatternError("Pattern cannot be empty")
        if engine is not None:
            # Unknown engines are rejected before anything is written.
            self._registry.resolve(engine)
        # Flags must split cleanly now, not on first use.
        tokenize_flags(flags or "")

        record = PatternRecord(name=name, engine=engine, flags=flags or "", expression=pattern)
        self._store.save(record)
        LOGGER.info("Saved pattern %s", name)
        return record

    def list_patterns(self) -> PatternListing:
        return self._store.scan()

    def delete(self, name: str) -> None:
        self._store.delete(name)
        LOGGER.info("Deleted pattern %s", name)

    def materialize(self, name: str, args: Iterable[str] = (), engine: Optional[str] = None) -> Command:
        """Load *name* and build the command both ``use`` and ``dump`` act on."""
        record = self._store.load(name)
        spec = self._registry.resolve(engine if engine is not None else record.engine)
        return build_command(record, spec, list(args))

    def dump(self, name: str, args: Iterable[str] = (), engine: Optional[str] = None) -> str:
        return self._executor.dump(self.materialize(name, args, engine=engine))

    def use(self, name: str, args: Iterable[str] = (), engine: Optional[str] = None) -> int:
        return self._executor.run(self.materialize(name, args, engine=engine))

    @staticmethod
    def _require_name(name: Optional[str], message: str = "Name cannot be empty") -> str:
        if not name:
            raise InvalidPatternError(message)
        return name
