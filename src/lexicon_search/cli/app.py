from typing import Optional

import typer

from lexicon_search.config import ConfigManager
from lexicon_search.utils import setup_logging

LOG_FILE_NAME = "logs/lexicon-search.log"


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        import lexicon_search

        config = ConfigManager().config
        typer.echo(f"lexicon-search version: {lexicon_search.__version__}")
        typer.echo(f"Database path: {config.database_path}")
        raise typer.Exit()


app = typer.Typer(name="lexicon-search", no_args_is_help=True)


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """lexicon-search - search and rank dictionary entries."""

    if not version and ctx.invoked_subcommand is not None:
        app_config = ConfigManager().config
        setup_logging(
            env=app_config.env,
            home_dir=app_config.home,
            log_file=LOG_FILE_NAME if app_config.log_to_file else None,
            log_level=app_config.log_level,
        )


filters_app = typer.Typer(help="Inspect and validate URL-encoded filters")
app.add_typer(filters_app, name="filters")
