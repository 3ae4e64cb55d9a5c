"""Command-line interface for Sathi Seva."""

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from sathi_seva.config import settings

app = typer.Typer(
    name="sathi-seva",
    help="Sathi Seva - job matching and scheduling for local services",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Host to bind to"),
    port: int = typer.Option(settings.port, help="Port to bind to"),
    reload: bool = typer.Option(settings.reload, help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print(f"🚀 Starting Sathi Seva on {host}:{port}")
    uvicorn.run(
        "sathi_seva.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Sathi Seva Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Show non-sensitive settings
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Gemini Model", settings.gemini_model)
    table.add_row("Gemini API Key", "configured" if settings.gemini_api_key else "not configured")
    table.add_row("Nominatim URL", settings.nominatim_url)
    table.add_row("Locality Radius (km)", str(settings.locality_radius_km))
    table.add_row("User Id Header", settings.user_id_header)

    console.print(table)


@app.command("suggest-tags")
def suggest_tags(
    description: str = typer.Argument(..., help="Job description"),
    title: Optional[str] = typer.Option(None, help="Job title"),
    offline: bool = typer.Option(False, help="Use the local keyword table only"),
) -> None:
    """Suggest skill tags for a job description."""
    from sathi_seva.tagging.generator import TagSuggester

    async def run():
        suggester = TagSuggester(api_key="" if offline else None)
        try:
            return await suggester.suggest(description, title)
        finally:
            await suggester.close()

    suggestion = asyncio.run(run())

    if not suggestion.tags:
        console.print("⚠️  No tags matched this description")
        return

    console.print(f"🏷️  Tags ({suggestion.source}): " + ", ".join(suggestion.tags))
    if suggestion.error:
        console.print(f"[dim]{suggestion.error}[/dim]")


@app.command()
def duration(
    values: List[str] = typer.Argument(..., help="Duration descriptors, e.g. '2 hours' 'Half day'"),
) -> None:
    """Show how duration descriptors are converted to minutes."""
    from sathi_seva.jobs.duration import parse_minutes

    table = Table(title="Parsed Durations")
    table.add_column("Descriptor", style="cyan")
    table.add_column("Minutes", style="green", justify="right")

    for value in values:
        table.add_row(value, str(parse_minutes(value)))

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from sathi_seva import __version__
    console.print(f"Sathi Seva v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
