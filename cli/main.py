from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.prompt import Prompt
from rich.tree import Tree

from cli.utils import commands_table, console, fail, parameters_table, report_parse_error
from cmdstack import get_version
from cmdstack.commands import CommandNotFoundError, InvalidCommandError, get_command_store
from cmdstack.config import SettingsError, get_config_path, load_settings, update_setting
from cmdstack.logging_config import setup_logging
from cmdstack.parameters import CommandSession, ParameterParseError, parse

app = typer.Typer(help="Command stack: saved shell commands with generated parameters")
config_app = typer.Typer(help="Show and change settings")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (default: $CMDSTACK_LOG_LEVEL or WARNING)"
    ),
):
    setup_logging(log_level)


@app.command("version")
def version_command():
    """Print the installed version."""
    typer.echo(get_version())


@app.command("add")
def add_command(
    alias: str = typer.Argument(..., help="Short name for the command"),
    command: str = typer.Argument(..., help="Command template, may contain @{...} parameters"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Tag path, e.g. git/remote"),
    note: Optional[str] = typer.Option(None, "--note", "-n", help="Free-form note"),
    favourite: bool = typer.Option(False, "--fav", "-f", help="Mark as favourite"),
):
    """
    Save a new command.

    Examples:
        cmdstack add ssh-dev "ssh @{}@dev.example.com" --tag ssh
        cmdstack add rand-port "nc -l @{int[2000,9000]}"
    """
    try:
        parse(command, load_settings())
    except ParameterParseError as exc:
        report_parse_error(exc)

    try:
        entry = get_command_store().add(alias, command, tag=tag, note=note, favourite=favourite)
    except InvalidCommandError as exc:
        fail(str(exc))
    console.print(f"[green]✓ Saved command[/green] [bold]{entry.id}[/bold] ({escape(entry.alias)})")


@app.command("update")
def update_command(
    command_id: int = typer.Argument(..., help="Command ID"),
    alias: Optional[str] = typer.Option(None, "--alias", "-a"),
    command: Optional[str] = typer.Option(None, "--command", "-c"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t"),
    note: Optional[str] = typer.Option(None, "--note", "-n"),
    favourite: Optional[bool] = typer.Option(None, "--fav/--no-fav"),
):
    """Update fields of a saved command."""
    if all(v is None for v in (alias, command, tag, note, favourite)):
        fail("Need at least 1 field to update")

    if command is not None:
        try:
            parse(command, load_settings())
        except ParameterParseError as exc:
            report_parse_error(exc)

    try:
        entry = get_command_store().update(
            command_id, alias=alias, command=command, tag=tag, note=note, favourite=favourite
        )
    except CommandNotFoundError:
        fail(f"Command not found: {command_id}")
    except InvalidCommandError as exc:
        fail(str(exc))
    console.print(f"[green]✓ Updated command[/green] [bold]{entry.id}[/bold]")


@app.command("delete")
def delete_command(command_id: int = typer.Argument(..., help="Command ID")):
    """Delete a saved command."""
    try:
        get_command_store().delete(command_id)
    except CommandNotFoundError:
        fail(f"Command not found: {command_id}")
    console.print(f"[green]✓ Deleted command[/green] [bold]{command_id}[/bold]")


@app.command("list")
def list_commands(
    favourites: bool = typer.Option(False, "--fav", "-f", help="Only favourites"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Override display limit"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List saved commands using the display settings."""
    settings = load_settings()
    commands = get_command_store().list(
        order_by_use=settings.cli_display_by_most_recently_used,
        favourites_only=favourites,
        limit=settings.cli_display_limit if limit is None else limit,
    )

    if json_output:
        typer.echo(json.dumps([c.to_dict() for c in commands], ensure_ascii=False, indent=2))
        return

    if not commands:
        console.print("[yellow]No commands found[/yellow]")
        return
    console.print(commands_table(commands, settings.cli_print_style))


@app.command("search")
def search_commands(
    alias: Optional[str] = typer.Option(None, "--alias", "-a", help="Match against aliases"),
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Match against commands"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Match against tags"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Fuzzy search saved commands."""
    if alias is None and command is None and tag is None:
        fail("At least one search option is required")

    results = get_command_store().search(alias=alias, command=command, tag=tag)
    if json_output:
        typer.echo(json.dumps([c.to_dict() for c in results], ensure_ascii=False, indent=2))
        return

    if not results:
        console.print("[yellow]No matching commands[/yellow]")
        return
    console.print(commands_table(results, load_settings().cli_print_style))


@app.command("fav")
def toggle_favourite(command_id: int = typer.Argument(..., help="Command ID")):
    """Toggle the favourite flag of a command."""
    try:
        entry = get_command_store().toggle_favourite(command_id)
    except CommandNotFoundError:
        fail(f"Command not found: {command_id}")
    state = "added to" if entry.favourite else "removed from"
    console.print(f"[green]✓ Command {entry.id} {state} favourites[/green]")


@app.command("tags")
def show_tags():
    """Show the tag hierarchy."""
    tree_data = get_command_store().tag_tree()
    if not tree_data:
        console.print("[yellow]No tags[/yellow]")
        return

    root = Tree("[bold cyan]Tags[/bold cyan]")

    def _add(node: Tree, children: dict) -> None:
        for name in sorted(children):
            _add(node.add(escape(name)), children[name])

    _add(root, tree_data)
    console.print(root)


@app.command("params")
def show_parameters(text: str = typer.Argument(..., help="Command template")):
    """Show the parameters found in a command template."""
    settings = load_settings()
    try:
        session = CommandSession(
            text, defaults=settings, alphabet=settings.param_string_alphabet
        )
    except ParameterParseError as exc:
        report_parse_error(exc)

    console.print(f"[bold]Template:[/bold] {escape(session.indexed_command)}")
    if not session.parameters:
        console.print("[dim]No parameters[/dim]")
        return
    console.print(parameters_table(session.parameters, session.generated_values))


@app.command("fill")
def fill_command(
    command_id: Optional[int] = typer.Argument(None, help="ID of a saved command"),
    text: Optional[str] = typer.Option(None, "--text", help="Use this template instead"),
    blanks: List[str] = typer.Option([], "--blank", "-b", help="Blank values, in order"),
    no_prompt: bool = typer.Option(False, "--no-prompt", help="Leave missing blanks empty"),
):
    """
    Generate a ready-to-run command.

    Examples:
        cmdstack fill 3 -b alice
        cmdstack fill --text "curl @{bool} @{int[1,5]} @{}" -b x
    """
    if (command_id is None) == (text is None):
        fail("Give either a command ID or --text")

    store = get_command_store()
    if command_id is not None:
        try:
            text = store.get(command_id).command
        except CommandNotFoundError:
            fail(f"Command not found: {command_id}")

    settings = load_settings()
    try:
        session = CommandSession(
            text, defaults=settings, alphabet=settings.param_string_alphabet
        )
    except ParameterParseError as exc:
        report_parse_error(exc)

    if len(blanks) > session.blank_count:
        fail(f"Got {len(blanks)} blank value(s), command has {session.blank_count}")
    session.set_blanks(blanks)

    if not no_prompt:
        for ordinal in range(len(blanks), session.blank_count):
            session.set_blank(ordinal, Prompt.ask(f"Blank @{{{ordinal + 1}}}", console=console))

    typer.echo(session.generated_command)
    if command_id is not None:
        store.mark_used(command_id)


@app.command("export")
def export_commands(path: Path = typer.Argument(..., help="Destination JSON file")):
    """Export all commands to a JSON file."""
    count = get_command_store().export_json(path)
    console.print(f"[green]✓ Exported {count} command(s) to {escape(str(path))}[/green]")


@app.command("import")
def import_commands(path: Path = typer.Argument(..., exists=True, help="Exported JSON file")):
    """Import commands from a JSON export."""
    try:
        count = get_command_store().import_json(path)
    except (InvalidCommandError, ValueError) as exc:
        fail(f"Import failed: {exc}")
    console.print(f"[green]✓ Imported {count} command(s)[/green]")


@config_app.command("show")
def config_show(json_output: bool = typer.Option(False, "--json", help="Output as JSON")):
    """Show current settings."""
    settings = load_settings()
    payload = settings.model_dump(mode="json")
    if json_output:
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return
    console.print(f"[dim]{escape(str(get_config_path()))}[/dim]")
    for key, value in payload.items():
        console.print(f"  [cyan]{key}[/cyan] = {escape(str(value))}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name"),
    value: str = typer.Argument(..., help="New value"),
):
    """Change one setting."""
    try:
        update_setting(key, value)
    except SettingsError as exc:
        fail(str(exc))
    console.print(f"[green]✓ {escape(key)} updated[/green]")


# Entry point
if __name__ == "__main__":  # pragma: no cover
    app()
