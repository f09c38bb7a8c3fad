from __future__ import annotations

from typing import Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cmdstack.commands import Command
from cmdstack.config import PrintStyle
from cmdstack.parameters import Parameter, ParameterParseError

console = Console()


def fail(message: str, code: int = 1) -> None:
    """Print an error and exit."""
    console.print(f"[red]❌ {escape(message)}[/red]")
    raise typer.Exit(code=code)


def report_parse_error(exc: ParameterParseError) -> None:
    console.print(f"[red]❌ {exc.kind}:[/red] {escape(str(exc))}")
    raise typer.Exit(code=1)


def parameters_table(
    parameters: Sequence[Parameter], generated_values: Sequence[str] | None = None
) -> Table:
    table = Table(show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="green")

    blank_ordinal = 0
    for index, parameter in enumerate(parameters):
        if parameter.is_blank:
            blank_ordinal += 1
            label = f"Blank @{{{blank_ordinal}}}"
            value = "[dim]fill in[/dim]"
        else:
            label = parameter.describe()
            value = escape(generated_values[index]) if generated_values else "-"
        table.add_row(str(index + 1), escape(label), value)
    return table


def commands_table(commands: Sequence[Command], style: PrintStyle) -> Table:
    table = Table(show_header=True)
    table.add_column("ID", justify="right", style="dim")
    if style is PrintStyle.ALL:
        table.add_column("Alias", style="cyan")
    table.add_column("Command")
    if style is PrintStyle.ALL:
        table.add_column("Tag", style="magenta")
        table.add_column("Note")
        table.add_column("★", justify="center")

    for entry in commands:
        if style is PrintStyle.ALL:
            table.add_row(
                str(entry.id),
                escape(entry.alias),
                escape(entry.command),
                escape(entry.tag or "-"),
                escape(entry.note or ""),
                "★" if entry.favourite else "",
            )
        else:
            table.add_row(str(entry.id), escape(entry.command))
    return table
