"""
fitrec Typer CLI Application

Commands:
- ``recommend``: assemble recommendations for a subject
- ``health``: show cache, catalog quota and media provider status
"""

from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from dependency_injector import providers
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from fitrec import __version__
from fitrec.cli.error_handler import handle_cli_error
from fitrec.cli.json_formatter import format_json_output
from fitrec.config.loader import load_settings
from fitrec.config.models.settings import Settings
from fitrec.containers import Container
from fitrec.pipeline.models import PipelineOutcome, SubjectAttributes
from fitrec.pipeline.planning import FitnessLevel, categories_for_goal, determine_fitness_level
from fitrec.shared.errors import FitrecError, create_validation_error
from fitrec.shared.logging import setup_structured_logger


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


app = typer.Typer(
    name="fitrec",
    help="Assemble safety-filtered exercise recommendations with repaired media links.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def build_container(settings: Settings) -> Container:
    """Container whose services are configured from ``settings``."""
    container = Container()
    container.config.override(providers.Object(settings))
    return container


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"fitrec {__version__}")
        raise typer.Exit


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="TOML configuration file (defaults: config/fitrec.toml, fitrec.toml)",
        dir_okay=False,
    ),
    log_level: LogLevel | None = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level",
        case_sensitive=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Load settings, configure logging and build the service container."""
    try:
        settings = load_settings(config_path)
    except FitrecError as e:
        raise typer.Exit(handle_cli_error(e, "main")) from e

    setup_structured_logger(
        "fitrec",
        level=log_level.value if log_level else settings.logging.level,
        log_file=settings.logging.file,
        use_rich_console=settings.logging.use_rich_console,
    )
    ctx.obj = build_container(settings)


async def _recommend(
    container: Container,
    subject_id: str,
    categories: list[str],
    attributes: SubjectAttributes,
    items_per_category: int | None,
) -> PipelineOutcome:
    overrides: dict[str, Any] = {}
    if items_per_category is not None:
        overrides["items_per_category"] = items_per_category
    async with container.pipeline(**overrides) as pipeline:
        return await pipeline.run(subject_id, categories, attributes)


@app.command("recommend")
def recommend_command(
    ctx: typer.Context,
    subject_id: str = typer.Argument(..., help="Subject the recommendations are for"),
    categories: list[str] | None = typer.Option(
        None,
        "--category",
        help="Catalog category (repeatable). Defaults to the goal's categories",
    ),
    goal: str | None = typer.Option(None, "--goal", help='Fitness goal, e.g. "Gain Muscle"'),
    conditions: list[str] | None = typer.Option(
        None,
        "--condition",
        help='Health condition (repeatable), e.g. "Knee Injury"',
    ),
    activity_level: str | None = typer.Option(None, "--activity-level"),
    age: int | None = typer.Option(None, "--age"),
    bmi: float | None = typer.Option(None, "--bmi"),
    limit: int | None = typer.Option(None, "--limit", min=1, help="Catalog items per category"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Assemble recommendations for SUBJECT_ID."""
    container: Container = ctx.obj

    try:
        attributes = SubjectAttributes(
            health_conditions=conditions or [],
            fitness_goal=goal,
            activity_level=activity_level,
            age=age,
            bmi=bmi,
        )
    except ValidationError as e:
        error = create_validation_error(
            f"Invalid subject attributes: {e.error_count()} error(s)",
            operation="recommend",
            original_error=e,
        )
        raise typer.Exit(handle_cli_error(error, "recommend", json_output=json_output)) from e

    level = determine_fitness_level(attributes)
    selected = categories or categories_for_goal(goal)
    items_per_category = limit or (level.exercise_count if goal and not categories else None)

    try:
        outcome = asyncio.run(
            _recommend(container, subject_id, selected, attributes, items_per_category)
        )
    except FitrecError as e:
        raise typer.Exit(handle_cli_error(e, "recommend", json_output=json_output)) from e

    if json_output:
        data = outcome.to_dict()
        data["fitness_level"] = level.value
        data["difficulty"] = level.difficulty_label
        warnings = [f"{key}: {reason}" for key, reason in outcome.category_errors.items()]
        typer.echo(format_json_output(True, "recommend", data=data, warnings=warnings).decode())
        return

    _render_outcome(Console(), outcome, level)


@app.command("health")
def health_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Show cache statistics, catalog quota usage and provider configuration."""
    container: Container = ctx.obj
    status = container.pipeline().health_status()

    if json_output:
        typer.echo(format_json_output(True, "health", data=status).decode())
        return

    console = Console()
    table = Table(title="fitrec health")
    table.add_column("Component", style="cyan")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for component in ("cache", "rate_limiter"):
        for metric, value in status[component].items():
            rendered = f"{value:.2%}" if metric.endswith("_rate") else str(value)
            table.add_row(component, metric, rendered)
    for provider, configured in status["providers"].items():
        table.add_row("provider", provider, "configured" if configured else "missing credential")
    console.print(table)


def _render_outcome(console: Console, outcome: PipelineOutcome, level: FitnessLevel) -> None:
    source = " (cached)" if outcome.from_cache else ""
    console.print(f"[bold]Difficulty:[/bold] {level.difficulty_label}{source}")

    for result in outcome.results:
        table = Table(title=result.category_key.title())
        table.add_column("#", justify="right")
        table.add_column("Exercise", style="bold")
        table.add_column("Equipment")
        table.add_column("Media")
        for index, item in enumerate(result.items, start=1):
            if item.fallback_source:
                media = f"{item.media_url} [dim]via {item.fallback_source}[/dim]"
            elif item.media_broken:
                media = f"[red]{item.media_url or 'missing'}[/red]"
            else:
                media = item.media_url
            table.add_row(str(index), item.name, ", ".join(item.equipment), media)
        console.print(table)

    for category, reason in outcome.category_errors.items():
        console.print(f"[yellow]{category}[/yellow] unavailable: {reason}")


def main() -> None:
    app()


__all__ = ["app", "build_container", "main"]
