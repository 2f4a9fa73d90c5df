"""CLI entrypoint implementing `gf`."""
from __future__ import annotations

from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import Settings
from .dispatch import DispatchResult, PatternDispatcher
from .engines import EngineRegistry
from .errors import ERROR_EXIT_CODE, GfError
from .logging_config import configure_logging
from .persistence import JsonPatternStore
from .schemas import Request, RequestMode


def build_dispatcher(settings: Settings) -> PatternDispatcher:
    store = JsonPatternStore(settings.resolve_pattern_dir())
    registry = EngineRegistry(default_engine=settings.default_engine)
    return PatternDispatcher(store=store, registry=registry)


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    }
)
@click.version_option(version=__version__, prog_name="gf", message="%(prog)s %(version)s")
@click.option("--save", is_flag=True, default=False, help="Save a pattern: gf --save NAME FLAGS PATTERN.")
@click.option("--list", "list_", is_flag=True, default=False, help="List saved patterns.")
@click.option("--dump", is_flag=True, default=False, help="Print the command rather than executing it.")
@click.option("--delete", is_flag=True, default=False, help="Delete a saved pattern.")
@click.option("--engine", type=str, default=None, help="Engine to use (e.g. grep, rg, ag).")
@click.option("--verbose", is_flag=True, default=False, help="Increase logging verbosity.")
@click.argument("name", required=False)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(
    ctx: click.Context,
    save: bool,
    list_: bool,
    dump: bool,
    delete: bool,
    engine: Optional[str],
    verbose: bool,
    name: Optional[str],
    args: Tuple[str, ...],
) -> None:
    """Pattern manager for grep-like tools.

    Everything after NAME is passed through untouched, so options for gf
    itself must come before the pattern name.
    """

    configure_logging(verbose=verbose, logger_name="gf_patterns.cli")
    err_console = Console(stderr=True, highlight=False)
    request = _build_request(save=save, list_=list_, dump=dump, delete=delete, engine=engine, name=name, args=args)

    try:
        result = build_dispatcher(Settings()).handle(request)
    except GfError as exc:
        err_console.print(f"[bold red]Error:[/] {escape(str(exc))}", soft_wrap=True)
        ctx.exit(ERROR_EXIT_CODE)

    _render(result, err_console)
    ctx.exit(_shell_status(result.exit_code))


def _build_request(
    save: bool,
    list_: bool,
    dump: bool,
    delete: bool,
    engine: Optional[str],
    name: Optional[str],
    args: Tuple[str, ...],
) -> Request:
    modes = [
        mode
        for mode, selected in (
            (RequestMode.SAVE, save),
            (RequestMode.LIST, list_),
            (RequestMode.DUMP, dump),
            (RequestMode.DELETE, delete),
        )
        if selected
    ]
    if len(modes) > 1:
        raise click.UsageError("--save, --list, --dump and --delete are mutually exclusive.")
    mode = modes[0] if modes else RequestMode.USE

    if mode is RequestMode.SAVE:
        # `gf --save NAME --engine ID FLAGS PATTERN` is accepted as well.
        if engine is None and len(args) >= 2 and args[0] == "--engine":
            engine, args = args[1], args[2:]
        if len(args) > 2:
            raise click.UsageError("Usage: gf --save NAME FLAGS PATTERN (quote flags that contain spaces).")
        flags = args[0] if args else ""
        pattern = args[1] if len(args) > 1 else None
        return Request(mode=mode, name=name, engine=engine, flags=flags, pattern=pattern)

    runtime_args: List[str] = list(args)
    if mode in (RequestMode.USE, RequestMode.DUMP) and not runtime_args and _stdin_is_terminal():
        runtime_args = ["."]
    return Request(mode=mode, name=name, engine=engine, args=runtime_args)


def _stdin_is_terminal() -> bool:
    stream = click.get_text_stream("stdin")
    try:
        return stream.isatty()
    except ValueError:
        return False


def _render(result: DispatchResult, err_console: Console) -> None:
    for line in result.output:
        click.echo(line)
    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/] {escape(warning)}", soft_wrap=True)


def _shell_status(return_code: int) -> int:
    """Map a signal death (negative return code) to the shell's 128+N convention."""
    if return_code < 0:
        return 128 - return_code
    return return_code


if __name__ == "__main__":  # pragma: no cover
    main()
