"""Turn a stored pattern into the argument vector of an engine invocation."""
from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .engines import EngineSpec
from .errors import InvalidPatternError
from .schemas import PatternRecord


@dataclass(frozen=True)
class Command:
    """A materialized engine invocation.

    ``expression_index`` points at the argv element holding the search
    expression so renderers can treat it specially without re-deriving it.
    """

    argv: Tuple[str, ...]
    expression_index: int

    @property
    def executable(self) -> str:
        return self.argv[0]

    @property
    def expression(self) -> str:
        return self.argv[self.expression_index]


def tokenize_flags(flags: str) -> List[str]:
    """Split a flag string with POSIX shell-word rules; blank input yields no tokens."""
    if not flags.strip():
        return []
    try:
        return shlex.split(flags)
    except ValueError as exc:
        raise InvalidPatternError(f"Cannot parse flags {flags!r}: {exc}") from exc


def build_command(record: PatternRecord, engine: EngineSpec, runtime_args: Iterable[str] = ()) -> Command:
    """
    Build ``[executable] + flags + [expression] + runtime_args``.

    The expression is always a single element, even when it looks like an
    option, and runtime arguments are appended verbatim. No arguments means the
    engine reads standard input.
    """
    flag_tokens = tokenize_flags(record.flags)
    argv = [engine.executable, *flag_tokens, record.expression, *runtime_args]
    return Command(argv=tuple(argv), expression_index=1 + len(flag_tokens))
