"""revhub CLI: server, configuration, and maintenance commands."""

import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from revhub.application.config import resolve_config

app = typer.Typer(
    help="revhub: spaced repetition scheduling for bookmarked practice questions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage revhub configuration.")
app.add_typer(config_app, name="config")

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

BackendOpt = Annotated[
    str | None, typer.Option(help="Storage backend: memory or sqlite.")
]
DatabaseOpt = Annotated[
    Path | None, typer.Option("--database", help="Path to the SQLite database.")
]
TodayOpt = Annotated[
    str | None,
    typer.Option(help="Pretend today is this date (YYYY-MM-DD)."),
]


def _services(backend: str | None, database: Path | None, today: str | None):
    from revhub.application.factory import build_services
    from revhub.application.srs.clock import FixedClock

    config = resolve_config({"backend": backend, "database_path": database})
    clock = None
    if today is not None:
        try:
            clock = FixedClock(date.fromisoformat(today))
        except ValueError:
            typer.secho(f"Invalid date {today!r}. Expected YYYY-MM-DD.", fg="red")
            raise typer.Exit(2) from None
    return build_services(config, clock=clock)


def _run(coro):
    import asyncio

    from revhub.domain.errors import RevhubError

    try:
        return asyncio.run(coro)
    except RevhubError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from None


@app.command()
def serve(
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the revhub HTTP server."""
    import uvicorn

    config = resolve_config({"port": port, "host": host})
    typer.secho(f"Starting revhub server on {config.host}:{config.port}", fg="green")
    uvicorn.run("revhub.server:app", host=config.host, port=config.port, reload=reload)


@app.command()
def due(
    user_id: Annotated[str, typer.Argument(help="User whose due questions to list.")],
    backend: BackendOpt = None,
    database: DatabaseOpt = None,
    today: TodayOpt = None,
):
    """List the questions due for review today."""
    services = _services(backend, database, today)
    questions = _run(services.srs.get_due_questions(user_id))

    if not questions:
        typer.secho("Nothing due.", fg="yellow")
        return
    for q in questions:
        marker = " (custom reminder)" if q.via_custom_reminder else ""
        typer.echo(f"{q.question_id}  [{q.bookmark_id}]{marker}")
    typer.echo(f"Due: {len(questions)}")


@app.command()
def delay(
    user_id: Annotated[str, typer.Argument(help="User whose reviews to shift.")],
    days: Annotated[int, typer.Argument(help="Days to shift; negative brings reviews forward.")],
    backend: BackendOpt = None,
    database: DatabaseOpt = None,
    today: TodayOpt = None,
):
    """Shift every scheduled review of a user by a number of days."""
    services = _services(backend, database, today)
    result = _run(services.srs.delay_all_reviews(user_id, days))
    typer.secho(f"Shifted {result.updated_count} bookmarks.", fg="green")
    typer.echo(f"Now due: {result.due_count}")


@app.command()
def pacing(
    user_id: Annotated[str, typer.Argument(help="User whose pacing to change.")],
    value: Annotated[
        float, typer.Argument(help="Pacing from -1 (more frequent) to 1 (less frequent).")
    ],
    backend: BackendOpt = None,
    database: DatabaseOpt = None,
    today: TodayOpt = None,
):
    """Set the pacing mode and reschedule every bookmark of a user."""
    services = _services(backend, database, today)
    result = _run(services.srs.update_pacing(user_id, value))
    typer.secho(f"Rescheduled {result.updated_count} bookmarks.", fg="green")
    typer.echo(f"Newly due: {result.due_count}")


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


if __name__ == "__main__":
    app()
