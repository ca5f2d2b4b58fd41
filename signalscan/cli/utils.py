"""Helpers shared across CLI commands."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import typer

from .constants import VALIDATION_EXIT_CODE
from .formatters import OutputFormatter, create_formatter


@dataclass(slots=True)
class CLIOptions:
    """Options resolved by the root callback."""

    format: str = "table"
    output_path: Path | None = None
    no_color: bool = False


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    ctx.ensure_object(dict)
    data = ctx.obj or {}
    return CLIOptions(
        format=str(data.get("format", "table")),
        output_path=data.get("output_path"),
        no_color=bool(data.get("no_color", False)),
    )


def prepare_output(ctx: typer.Context) -> tuple[OutputFormatter, TextIO, ExitStack]:
    """Resolve the formatter and writable stream for the current command.

    The returned :class:`ExitStack` owns the output file when ``--output`` is
    given and must be closed by the caller.
    """

    options = get_cli_options(ctx)
    formatter = create_formatter(options.format, no_color=options.no_color)

    stack = ExitStack()
    stream: TextIO = sys.stdout
    if options.output_path is not None:
        try:
            stream = stack.enter_context(open(options.output_path, "w", encoding="utf-8"))
        except OSError as exc:
            stack.close()
            emit_error(f"Unable to open '{options.output_path}': {exc}", "OUTPUT_WRITE_ERROR")
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    return formatter, stream, stack


def collect_symbols(symbols: list[str] | None, symbols_from: Path | None) -> list[str]:
    """Merge positional tickers with a newline-delimited file, keeping order.

    Duplicates are kept: every requested ticker gets its own row.
    """

    collected = [value.strip() for value in symbols or [] if value.strip()]

    if symbols_from is not None:
        if not symbols_from.is_file():
            raise OSError(f"Symbols file '{symbols_from}' does not exist or is not a file.")
        contents = symbols_from.read_text(encoding="utf-8")
        for line in contents.splitlines():
            value = line.split("#", 1)[0].strip()
            if value:
                collected.append(value)

    return collected


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = {
            key: value if isinstance(value, (str, int, float, bool)) or value is None else str(value)
            for key, value in details.items()
        }
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


__all__ = ["CLIOptions", "get_cli_options", "prepare_output", "collect_symbols", "emit_error"]
