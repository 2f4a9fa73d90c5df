from __future__ import annotations

import logging
import shlex
import signal
import subprocess
import threading
from contextlib import contextmanager
from shutil import which
from typing import Iterator

from .builder import Command
from .errors import SpawnError


LOGGER = logging.getLogger("gf_patterns.executor")

_DOUBLE_QUOTE_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"', "$": "\\$", "`": "\\`"})


def quote_expression(expression: str) -> str:
    """Wrap the expression in double quotes, escaping what the shell would expand.

    Expressions containing `!` are single-quoted instead, since interactive
    bash performs history expansion inside double quotes.
    """
    if "!" in expression:
        return shlex.quote(expression)
    return '"' + expression.translate(_DOUBLE_QUOTE_ESCAPES) + '"'


def _discard_signal(signum, frame) -> None:
    pass


@contextmanager
def _foreground_child() -> Iterator[None]:
    """
    Leave SIGINT to the child while it owns the terminal.

    The terminal delivers Ctrl-C to the whole foreground process group; the
    child decides how to exit and its status is reported as usual. The previous
    handler is restored on every exit path. A no-op handler is installed
    rather than SIG_IGN because ignored dispositions survive exec, while
    caught ones are reset to the default in the child.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, _discard_signal)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


class CommandExecutor:
    """
    Render or run a materialized engine command.

    ``run`` inherits stdin, stdout and stderr from the calling process so pipes
    and interactive terminals behave exactly as if the engine had been typed at
    the shell.
    """

    def dump(self, command: Command) -> str:
        parts = []
        for index, token in enumerate(command.argv):
            if index == command.expression_index:
                parts.append(quote_expression(token))
            else:
                parts.append(shlex.quote(token))
        return " ".join(parts)

    def run(self, command: Command) -> int:
        executable = command.executable
        if which(executable) is None:
            raise SpawnError(executable, "executable not found on PATH")

        LOGGER.debug("Running %s", self.dump(command))
        with _foreground_child():
            try:
                process = subprocess.Popen(list(command.argv))
            except OSError as exc:
                raise SpawnError(executable, exc.strerror or str(exc)) from exc
            with process:
                return_code = process.wait()

        LOGGER.debug("%s exited with status %s", executable, return_code)
        return return_code
