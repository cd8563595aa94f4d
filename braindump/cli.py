"""[Layer: Presentation] Typer CLI Commands."""

import asyncio
import sys
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version as get_package_version
from typing import Optional

import typer

from braindump.config import get_settings
from braindump.core import ExtractionCache, ExtractionService, extract_heuristic, process_brain_dump
from braindump.models import ExtractionResult
from braindump.utils.llm import (
    ADAPTER_FACTORIES,
    AISettings,
    ExtractionError,
    load_ai_settings,
    save_ai_settings,
)
from braindump.utils.llm.config import get_example_config, normalize_provider
from braindump.utils.llm.constants import NO_PROVIDER


def _get_version() -> str:
    """Get version from package metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("braindump-ai")
    except PackageNotFoundError:
        return "0.0.0-dev"


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"braindump-ai {_get_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="braindump",
    help="Turn messy brain dumps into tasks, habits, events and sleep schedules.",
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Brain dump extraction CLI."""


def _build_service() -> ExtractionService:
    """Create the extraction service with cache limits from settings."""
    settings = get_settings()
    cache = ExtractionCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_size=settings.cache_max_size,
    )
    return ExtractionService(cache=cache)


def _load_ai_settings(provider: Optional[str], model: Optional[str]) -> AISettings:
    ai_settings = load_ai_settings(get_settings().config_path, provider_override=provider)
    if model:
        ai_settings = replace(ai_settings, model=model)
    return ai_settings


def _read_text(text: str) -> str:
    if text == "-":
        return sys.stdin.read()
    return text


def _echo_result(result: ExtractionResult) -> None:
    """Print a human-readable summary of an extraction."""
    if result.is_empty():
        typer.echo("Nothing actionable found.")
        return
    if result.tasks:
        typer.echo(f"\nTasks ({len(result.tasks)}):")
        for task in result.tasks:
            typer.echo(
                f"  [{task.priority}] {task.title} "
                f"({task.category}, {task.time_estimate}, {task.energy_level} energy)"
            )
    if result.habits:
        typer.echo(f"\nHabits ({len(result.habits)}):")
        for habit in result.habits:
            at = f" at {habit.scheduled_time}" if habit.scheduled_time else ""
            typer.echo(f"  {habit.title} ({habit.frequency}{at})")
    if result.events:
        typer.echo(f"\nEvents ({len(result.events)}):")
        for event in result.events:
            typer.echo(
                f"  {event.title}: {event.start_time:%Y-%m-%d %H:%M} - "
                f"{event.end_time:%H:%M} ({event.type})"
            )
    if result.sleep_schedules:
        typer.echo(f"\nSleep ({len(result.sleep_schedules)}):")
        for schedule in result.sleep_schedules:
            typer.echo(f"  {schedule.date}: bed {schedule.bedtime}, wake {schedule.wake_time}")
    if result.usage:
        typer.echo(f"\nTokens used: {result.usage.total_tokens}")


@app.command()
def extract(
    text: str = typer.Argument(..., help="Brain dump text, or '-' to read from stdin"),
    provider: Optional[str] = typer.Option(
        None, "--provider", "-p", help="AI provider: openai, claude or gemini"
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model id"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the result cache"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    offline: bool = typer.Option(
        False, "--offline", help="Use keyword heuristics only (no AI call)"
    ),
    fallback: bool = typer.Option(
        False, "--fallback", help="Use keyword heuristics if AI is unavailable or fails"
    ),
) -> None:
    """Extract actionable items from a brain dump."""
    raw = _read_text(text)
    if not raw.strip():
        typer.echo("Nothing to process: brain dump is empty.", err=True)
        raise typer.Exit(1)

    if offline:
        result = extract_heuristic(raw)
    else:
        ai_settings = _load_ai_settings(provider, model)
        if no_cache:
            ai_settings = replace(ai_settings, enable_cache=False)
        try:
            outcome = asyncio.run(
                process_brain_dump(raw, ai_settings, _build_service(), fallback=fallback)
            )
        except ExtractionError as e:
            typer.echo(f"Error: {e.message}", err=True)
            raise typer.Exit(1)
        if outcome.source == "heuristic":
            reason = outcome.error.message if outcome.error else "AI not configured"
            typer.echo(f"Using keyword extraction ({reason}).", err=True)
        result = outcome.result

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _echo_result(result)


@app.command()
def models(
    provider: Optional[str] = typer.Argument(
        None, help="Provider to list (default: all providers)"
    ),
) -> None:
    """List the models each AI provider accepts."""
    service = _build_service()
    names = [provider] if provider else list(ADAPTER_FACTORIES)
    for name in names:
        try:
            infos = service.get_available_models(name)
        except ExtractionError as e:
            typer.echo(f"Error: {e.message}", err=True)
            raise typer.Exit(1)
        typer.echo(f"{name}:")
        for info in infos:
            description = f" - {info.description}" if info.description else ""
            typer.echo(f"  {info.id}  {info.name}{description}")


@app.command(name="test")
def test_connection(
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="AI provider"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model id"),
) -> None:
    """Check that the configured provider, key and model work."""
    ai_settings = _load_ai_settings(provider, model)
    ok, message = asyncio.run(_build_service().test_connection(ai_settings))
    typer.echo(message, err=not ok)
    if not ok:
        raise typer.Exit(1)


@app.command()
def config(
    init: bool = typer.Option(
        False, "--init", help="Write an example config file if none exists"
    ),
    provider: Optional[str] = typer.Option(
        None, "--provider", "-p", help="Set the AI provider: openai, claude, gemini or none"
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Set the model id"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Set the API key"),
    temperature: Optional[float] = typer.Option(
        None, "--temperature", min=0.0, max=1.0, help="Set the sampling temperature"
    ),
) -> None:
    """Show the example configuration, create the config file, or update it."""
    path = get_settings().config_path

    if any(value is not None for value in (provider, model, api_key, temperature)):
        # Environment values are not copied into the file
        current = load_ai_settings(path, provider_override=provider, include_env=False)
        unknown = (
            provider is not None
            and normalize_provider(provider) == NO_PROVIDER
            and provider.strip().lower() != NO_PROVIDER
        )
        if unknown:
            typer.echo(f"Error: Unknown AI provider: {provider}", err=True)
            raise typer.Exit(1)
        updates: dict = {}
        if model is not None:
            updates["model"] = model
        if api_key is not None:
            updates["api_key"] = api_key
        if temperature is not None:
            updates["temperature"] = temperature
        updated = replace(current, **updates)
        save_ai_settings(updated, path)
        typer.echo(
            f"Saved {path}: provider={updated.provider}, "
            f"model={updated.resolved_model or '-'}"
        )
        return

    if not init:
        typer.echo(get_example_config())
        return

    if path.exists():
        typer.echo(f"Config already exists: {path}")
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(get_example_config())
    path.chmod(0o600)
    typer.echo(f"Wrote example config to {path}")


@app.command()
def version() -> None:
    """Show version."""
    typer.echo(f"braindump-ai {_get_version()}")
