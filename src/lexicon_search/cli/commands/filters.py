"""Filter inspection commands."""

from typing import Annotated

import typer
from rich.console import Console

from lexicon_search.cli.app import filters_app
from lexicon_search.services import FilterService

console = Console()


@filters_app.command("check")
def check(
    encoded: Annotated[str, typer.Argument(help="URL-encoded filters, e.g. 'origins=mw&wordLengthMin=3'")],
):
    """Decode a filter string, validate it and print its canonical form."""
    user_filter = FilterService.deserialize_from_url(encoded)
    validation = FilterService.validate_filters(user_filter)

    if not validation.is_valid:
        for error in validation.errors:
            console.print(f"[red]Invalid filter:[/red] {error}")
        raise typer.Exit(1)

    for warning in validation.warnings:
        console.print(f"[yellow]{warning}[/yellow]")

    console.print("[green]Filters are valid[/green]")
    typer.echo(FilterService.serialize_filters(user_filter))
