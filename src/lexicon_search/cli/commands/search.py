"""Search command."""

from datetime import datetime
from typing import Annotated, List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from lexicon_search.cli.app import app
from lexicon_search.cli.commands.command_utils import get_repository, run_with_cleanup
from lexicon_search.config import ConfigManager
from lexicon_search.errors import FilterValidationError
from lexicon_search.schemas.search import (
    DateRange,
    Pagination,
    SearchOptions,
    SearchResult,
    ServiceError,
    SortBy,
    SortDirection,
    UserFilter,
)
from lexicon_search.services import FilterService, SearchService
from lexicon_search.services.relevance_scoring import get_relevance_label

console = Console()

GLOSS_PREVIEW_LENGTH = 60


def build_filters(
    encoded: Optional[str],
    origins: Optional[List[str]],
    language: Optional[str],
    min_length: Optional[int],
    max_length: Optional[int],
    has_audio: Optional[bool],
    has_attributes: Optional[bool],
    created_after: Optional[datetime],
    created_before: Optional[datetime],
) -> UserFilter:
    """Combine an encoded filter string with explicit options; options win.

    Raises FilterValidationError when the combined filters are invalid.
    """
    base = FilterService.deserialize_from_url(encoded) if encoded else UserFilter()
    updates = {
        "origins": origins or None,
        "language": language,
        "word_length_min": min_length,
        "word_length_max": max_length,
        "has_audio": has_audio,
        "has_attributes": has_attributes,
    }
    if created_after or created_before:
        updates["date_range"] = DateRange(
            start=created_after or base.date_range.start,
            end=created_before or base.date_range.end,
        )
    filters = FilterService.merge_filters(base, updates)

    validation = FilterService.validate_filters(filters)
    if not validation.is_valid:
        raise FilterValidationError(validation.errors)
    for warning in validation.warnings:
        logger.debug(warning)
    return filters


async def _run_search(options: SearchOptions):
    app_config = ConfigManager().config
    repository = await get_repository(app_config)
    return await SearchService(repository, app_config=app_config).perform_search(options)


def _print_results(result: SearchResult, offset: int) -> None:
    if not result.results:
        console.print("[yellow]No matching entries.[/yellow]")
        return

    table = Table(title=f"{result.total} matching entries")
    table.add_column("Score", justify="right")
    table.add_column("Match")
    table.add_column("Word", style="cyan")
    table.add_column("Phonetic")
    table.add_column("Origin")
    table.add_column("Gloss")
    table.add_column("Id", style="dim")

    for item in result.results:
        gloss = item.description[0].value if item.description else ""
        if len(gloss) > GLOSS_PREVIEW_LENGTH:
            gloss = gloss[:GLOSS_PREVIEW_LENGTH] + "..."
        table.add_row(
            f"{item.relevance_score} ({get_relevance_label(item.relevance_score)})",
            item.match_type.value,
            ", ".join(w.value for w in item.word),
            item.phonetic,
            item.origin,
            gloss,
            item.id,
        )

    console.print(table)
    shown_to = offset + len(result.results)
    footer = f"Showing {offset + 1}-{shown_to} of {result.total}"
    if result.has_more:
        footer += f" (next page: --offset {result.next_offset})"
    console.print(footer)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Word to look up, in any supported script")] = "",
    filters: Annotated[
        Optional[str],
        typer.Option("--filters", help="URL-encoded filters, e.g. 'origins=mw,ap90&hasAudio=true'"),
    ] = None,
    origin: Annotated[
        Optional[List[str]], typer.Option("--origin", "-o", help="Source lexicon (repeatable)")
    ] = None,
    language: Annotated[
        Optional[str], typer.Option("--language", help="Only entries with a rendering in this language")
    ] = None,
    min_length: Annotated[Optional[int], typer.Option("--min-length")] = None,
    max_length: Annotated[Optional[int], typer.Option("--max-length")] = None,
    has_audio: Annotated[Optional[bool], typer.Option("--has-audio/--no-audio")] = None,
    has_attributes: Annotated[
        Optional[bool], typer.Option("--has-attributes/--no-attributes")
    ] = None,
    created_after: Annotated[Optional[datetime], typer.Option("--created-after")] = None,
    created_before: Annotated[Optional[datetime], typer.Option("--created-before")] = None,
    sort: Annotated[SortBy, typer.Option("--sort", help="Result ordering")] = SortBy.RELEVANCE,
    direction: Annotated[SortDirection, typer.Option("--direction")] = SortDirection.DESC,
    limit: Annotated[int, typer.Option("--limit", min=1)] = 20,
    offset: Annotated[int, typer.Option("--offset", min=0)] = 0,
    highlight: Annotated[bool, typer.Option("--highlight", help="Include highlight segments")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Print the result as JSON")] = False,
):
    """Search dictionary entries and show them ranked by relevance."""
    try:
        user_filter = build_filters(
            filters,
            origin,
            language,
            min_length,
            max_length,
            has_audio,
            has_attributes,
            created_after,
            created_before,
        )
    except FilterValidationError as e:
        for error in e.errors:
            console.print(f"[red]Invalid filter:[/red] {error}")
        raise typer.Exit(1)

    options = SearchOptions(
        query_text=query,
        filters=user_filter,
        sort_by=sort,
        sort_direction=direction,
        pagination=Pagination(limit=limit, offset=offset),
        highlight=highlight,
    )
    response = run_with_cleanup(_run_search(options))

    if isinstance(response, ServiceError):
        console.print(f"[red]{response.error}:[/red] {response.details}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(response.data.model_dump_json(indent=2))
    else:
        _print_results(response.data, offset)
