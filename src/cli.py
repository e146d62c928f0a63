"""Typer CLI: one-shot analysis from a local photo and the API server."""

import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from src.core.config import Settings, get_config
from src.core.errors import SnapSongError
from src.core.logging import setup_logging
from src.pipeline.orchestrator import PipelineRun, build_orchestrator

app = typer.Typer(no_args_is_help=True)


def _load_settings(config_path: Path | None, analyzer: str | None = None) -> Settings:
    settings = get_config(config_path)
    if analyzer:
        settings = Settings.model_validate({**settings.model_dump(), "analyzer": analyzer})
    return settings


@app.command()
def analyze(
    photo: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Photo to analyze"),
    post_type: str = typer.Option("post", "--post-type", "-t", help="'post' or 'story'"),
    regenerate: str | None = typer.Option(None, "--regenerate", "-r", help="'song' or 'caption'"),
    analyzer: str | None = typer.Option(None, "--analyzer", help="Override the configured analyzer (gemini, mock)"),
    config_path: Path | None = typer.Option(None, "--config", help="YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging to stderr"),
) -> None:
    """Run the recommendation pipeline once for a local photo and print the JSON response."""
    settings = _load_settings(config_path, analyzer)
    if verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    # stdout carries the JSON response
    setup_logging(settings, stream=sys.stderr)

    orchestrator = build_orchestrator(settings)
    run = PipelineRun()
    try:
        response = orchestrator.handle(photo.read_bytes(), post_type=post_type, regenerate=regenerate, run=run)
    except SnapSongError as e:
        typer.secho(json.dumps(e.to_payload(), indent=2), fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(response.to_payload(), indent=2))
    if verbose and run.audio_source is not None:
        typer.secho(f"Audio source: {run.audio_source.value}", fg=typer.colors.YELLOW, err=True)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    config_path: Path | None = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """Start the HTTP API with uvicorn."""
    import uvicorn

    settings = _load_settings(config_path)
    setup_logging(settings)
    logging.getLogger(__name__).info("Starting SnapSong on %s:%d (analyzer=%s)", host, port, settings.analyzer)
    uvicorn.run("src.api.main:app", host=host, port=port, log_config=None)


@app.command("config")
def show_config(
    config_path: Path | None = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """Print the effective settings with secrets masked."""
    settings = _load_settings(config_path)
    table = Table(title=None)
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in settings.redacted().items():
        table.add_row(key, "" if value is None else str(value))
    console = Console()
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
