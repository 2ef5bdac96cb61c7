"""Entry lookup command."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from lexicon_search.cli.app import app
from lexicon_search.cli.commands.command_utils import get_repository, run_with_cleanup
from lexicon_search.config import ConfigManager
from lexicon_search.errors import EntryNotFoundError
from lexicon_search.schemas.dictionary import DictionaryEntry

console = Console()


async def _get_entry(entry_id: str) -> DictionaryEntry:
    repository = await get_repository(ConfigManager().config)
    entry = await repository.find_by_id(entry_id)
    if entry is None:
        raise EntryNotFoundError(entry_id)
    return entry


def _print_entry(entry: DictionaryEntry) -> None:
    table = Table(title=f"{entry.origin} #{entry.word_index}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    for word in entry.word:
        table.add_row(f"word ({word.language})", word.value)
    table.add_row("phonetic", entry.phonetic)
    for description in entry.description:
        table.add_row(f"description ({description.language})", description.value)
    for attribute in entry.attributes:
        table.add_row(attribute.key, attribute.value)
    table.add_row("audio", "yes" if entry.has_audio else "no")
    table.add_row("id", entry.id)

    console.print(table)


@app.command()
def entry(
    entry_id: Annotated[str, typer.Argument(help="Dictionary entry id")],
    json_output: Annotated[bool, typer.Option("--json", help="Print the entry as JSON")] = False,
):
    """Show a single dictionary entry."""
    try:
        found = run_with_cleanup(_get_entry(entry_id))
    except EntryNotFoundError:
        console.print(f"[red]No entry found with id:[/red] {entry_id}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(found.model_dump_json(indent=2))
    else:
        _print_entry(found)
