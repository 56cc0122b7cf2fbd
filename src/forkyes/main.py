"""
ForkYes - CLI Entry Point.

Usage:
    forkyes serve                         Start the API server
    forkyes health                        Check configuration
    forkyes prompt prefs.json             Render a prompt without calling the model
    forkyes suggest <family-id>           One-off meal suggestions for a family
    forkyes --help                        Show help
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="forkyes",
    help="ForkYes - AI meal planning for families.",
    add_completion=False,
)
console = Console()


def _load_json(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    # Hosting platforms inject PORT
    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]ForkYes API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "forkyes.web.app:app",
        host=host,
        port=actual_port,
        reload=reload,
    )


@app.command()
def health() -> None:
    """Check configuration."""
    from forkyes.ai.model_router import REQUEST_CONFIGS, get_request_config
    from forkyes.config import get_settings

    console.print("\n[bold]ForkYes Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("[green]OK[/green] Configuration loaded")
        console.print(f"   Environment: {settings.forkyes_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.openai_api_key.startswith("sk-"):
            console.print("[green]OK[/green] OpenAI API key configured")
        else:
            console.print("[yellow]WARN[/yellow] OpenAI API key may be invalid")

        if settings.supabase_url.startswith("https://"):
            console.print("[green]OK[/green] Supabase URL configured")
        else:
            console.print("[red]FAIL[/red] Supabase URL missing or invalid")

        table = Table(title="Models")
        table.add_column("Request type")
        table.add_column("Model")
        table.add_column("Temperature")
        table.add_column("Max tokens")
        for request_type in REQUEST_CONFIGS:
            config = get_request_config(request_type, settings)
            table.add_row(
                request_type,
                config["model"],
                str(config["temperature"]),
                str(config["max_tokens"]),
            )
        console.print(table)

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from forkyes import __version__

    console.print(f"ForkYes version {__version__}")


@app.command()
def prompt(
    preferences_file: Path = typer.Argument(..., help="JSON file with family preferences"),
    request_type: str = typer.Option("meal_suggestions", "--type", "-t", help="meal_suggestions, shopping_list or meal_modification"),
    constraints_file: Optional[Path] = typer.Option(None, "--constraints", "-c", help="JSON file with constraints"),
) -> None:
    """Render the prompt for a request without calling the model."""
    from forkyes.ai.prompts import SYSTEM_PROMPTS, build_prompt
    from forkyes.errors import PreconditionMissing
    from forkyes.models import FamilyPreferences
    from forkyes.web.chat_routes import CONSTRAINT_MODELS, parse_constraints

    if request_type not in SYSTEM_PROMPTS:
        valid = ", ".join(SYSTEM_PROMPTS)
        console.print(f"[red]Invalid type: {request_type}. Options: {valid}[/red]")
        raise typer.Exit(1)

    preferences = FamilyPreferences(**_load_json(preferences_file))
    raw_constraints = _load_json(constraints_file) if constraints_file else {}

    try:
        constraints = parse_constraints(CONSTRAINT_MODELS[request_type], raw_constraints)
        text = build_prompt(request_type, preferences, constraints)
    except PreconditionMissing as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    console.print(Panel(SYSTEM_PROMPTS[request_type], title="System", border_style="dim"))
    console.print(Panel(text, title="User", border_style="blue"))


@app.command()
def suggest(
    family_id: str = typer.Argument(..., help="Family to suggest meals for"),
    max_prep_time: Optional[int] = typer.Option(None, "--max-prep", help="Max prep time in minutes"),
    cuisine: Optional[str] = typer.Option(None, "--cuisine", help="Cuisine preference"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log all LLM prompts to prompt_logs/"),
) -> None:
    """Generate meal suggestions for a family (uses the service role key)."""
    from forkyes.ai.client import get_completion_client
    from forkyes.ai.prompt_logger import enable_prompt_logging, get_session_log_dir
    from forkyes.ai.service import AIService
    from forkyes.config import get_settings
    from forkyes.db.client import get_service_client
    from forkyes.errors import ForkYesError
    from forkyes.logging_setup import setup_logging
    from forkyes.models import MealSuggestionConstraints
    from forkyes.services.preferences import load_preferences

    settings = get_settings()
    setup_logging(settings.log_level)
    if log_prompts:
        enable_prompt_logging(True)

    constraints = MealSuggestionConstraints(max_prep_time=max_prep_time, cuisine=cuisine)
    ai = AIService(get_completion_client(), settings=settings)

    async def _run():
        preferences = await load_preferences(get_service_client(), family_id)
        return await ai.generate_meal_suggestions(preferences, constraints)

    try:
        with Live(Spinner("dots", text="Thinking..."), console=console, transient=True):
            suggestions = asyncio.run(_run())
    except ForkYesError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    if not suggestions:
        console.print("[yellow]No suggestions could be parsed from the reply.[/yellow]")
    for meal in suggestions:
        title = meal.get("title", "Untitled")
        times = f"prep {meal.get('prep_time', '?')} min, cook {meal.get('cook_time', '?')} min"
        tags = ", ".join(meal.get("tags") or [])
        console.print(f"[bold green]{title}[/bold green] [dim]({times})[/dim] {tags}")

    if log_prompts:
        log_dir = get_session_log_dir()
        if log_dir:
            console.print(f"\n[dim]Prompts logged to: {log_dir}[/dim]")


if __name__ == "__main__":
    app()
