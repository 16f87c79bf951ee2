"""
Daybook - CLI Entry Point.

Usage:
    daybook parse "buy milk, call mom tomorrow at 5pm"
    daybook regenerate --week 2025-03-12
    daybook health
    daybook serve
"""

from datetime import datetime

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="daybook",
    help="Daybook - tasks, meals and grocery lists.",
    add_completion=False,
)
console = Console()


def _parse_day(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid date: {value} (use YYYY-MM-DD)[/red]")
        raise typer.Exit(1)


@app.command()
def parse(
    text: str = typer.Argument(..., help="Brain dump text"),
    today: str = typer.Option(None, "--today", "-t", help="Reference date (YYYY-MM-DD), default: today"),
) -> None:
    """Parse brain dump text and show the extracted tasks (nothing is saved)."""
    from daybook.tasks.dump_parser import DEFAULT_DUE_TIME, parse_dump
    from daybook.tasks.service import DumpValidationError, validate_dump_text

    try:
        validate_dump_text(text)
    except DumpValidationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    parsed = parse_dump(text, now=_parse_day(today), default_time=DEFAULT_DUE_TIME)

    table = Table(title=parsed.summary)
    table.add_column("Title", style="bold")
    table.add_column("Due date")
    table.add_column("Due time")
    table.add_column("Category", style="cyan")
    for task in parsed.tasks:
        table.add_row(task.title, task.due_date, task.due_time, task.category)

    console.print(table)


@app.command()
def regenerate(
    week: str = typer.Option(None, "--week", "-w", help="Any date in the target week (default: this week)"),
    user_id: str = typer.Option(None, "--user", "-u", help="User id (default: DEV_USER_ID)"),
) -> None:
    """Rebuild a week's grocery list from its meal plan."""
    from daybook.config import settings
    from daybook.db.adapter import SupabaseRowStore
    from daybook.db.client import get_service_client
    from daybook.meals.grocery import GroceryAggregator, GroceryRegenerationError, format_grocery_item
    from daybook.tools.dates import today_in

    anchor = _parse_day(week) or today_in(settings.timezone)
    aggregator = GroceryAggregator(SupabaseRowStore(get_service_client()))

    try:
        items = aggregator.regenerate(user_id or settings.dev_user_id, anchor)
    except GroceryRegenerationError as e:
        console.print(f"[red]FAIL {e} (week of {e.source_week})[/red]")
        if e.indeterminate:
            console.print("[yellow]The grocery list for this week may be incomplete. Run again to retry.[/yellow]")
        raise typer.Exit(1)

    if not items:
        console.print("[dim]No recipes planned - grocery list cleared.[/dim]")
        return

    for item in items:
        console.print(f"  [ ] {format_grocery_item(item)}")


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from daybook.config import get_settings

    console.print("\n[bold]Daybook Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("[green]OK[/green] Configuration loaded")
        console.print(f"   Environment: {settings.daybook_env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Timezone: {settings.timezone}")

        # Check Supabase
        if settings.supabase_url.startswith("https://"):
            console.print("[green]OK[/green] Supabase URL configured")
        else:
            console.print("[red]FAIL[/red] Supabase URL missing or invalid")

        # Check OpenAI
        if settings.openai_api_key and settings.openai_api_key.startswith("sk-"):
            console.print("[green]OK[/green] OpenAI API key configured")
        else:
            console.print("[dim]INFO[/dim] OpenAI not configured - category suggestions use the fallback")

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from daybook import __version__

    console.print(f"Daybook version {__version__}")


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    from daybook.config import settings

    # Hosting platforms set PORT
    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]Daybook API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "daybook.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
