"""dailycoach Command Line Interface."""

import asyncio
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dailycoach.adapters.base import BaseRepository, RepositoryError
from dailycoach.config.logging import configure_logging
from dailycoach.models import Reminder

app = typer.Typer(
    name="dailycoach",
    help="dailycoach - daily reminders, scores and wins from your health logs",
    no_args_is_help=True,
)
console = Console()

UserOption = typer.Option("me", "--user", "-u", help="User ID")
DataOption = typer.Option(
    None, "--data", "-d", help="YAML fixture to read instead of the database"
)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
) -> None:
    configure_logging(log_level)


async def open_repository(data: Path | None) -> BaseRepository:
    """Load a YAML fixture when given, otherwise the configured database."""
    if data is not None:
        from dailycoach.adapters.memory import InMemoryRepository

        return InMemoryRepository.from_yaml(data)

    from dailycoach.adapters.sql import SQLRepository
    from dailycoach.db import init_db

    await init_db()
    return SQLRepository()


def parse_now(day: str | None, at: str | None) -> datetime:
    target = date.fromisoformat(day) if day else date.today()
    clock = time.fromisoformat(at) if at else datetime.now().time()
    return datetime.combine(target, clock)


def reminder_table(title: str, reminders: Sequence[Reminder]) -> Table:
    table = Table(title=title)
    table.add_column("#", style="dim")
    table.add_column("Task", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Priority", style="yellow")
    table.add_column("Min", justify="right")
    table.add_column("Done", style="green")

    for i, reminder in enumerate(reminders, 1):
        table.add_row(
            str(i),
            reminder.title,
            reminder.type.value,
            reminder.priority.value,
            str(reminder.estimated_duration or ""),
            "✓" if reminder.is_completed else "",
        )
    return table


def run(coro) -> None:
    try:
        asyncio.run(coro)
    except RepositoryError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def reminders(
    user: str = UserOption,
    data: Path | None = DataOption,
    day: str = typer.Option(None, "--date", help="Date (YYYY-MM-DD), defaults to today"),
    at: str = typer.Option(None, "--at", help="Time of day (HH:MM), defaults to now"),
):
    """Show the reminder feed."""
    now = parse_now(day, at)

    async def show():
        from dailycoach.engine.daily import DailyEngine

        async with await open_repository(data) as repo:
            items = await DailyEngine(repo).get_reminders(user, now)
        console.print(reminder_table(f"Reminders ({now:%Y-%m-%d %H:%M})", items))

    run(show())


@app.command()
def focus(
    user: str = UserOption,
    data: Path | None = DataOption,
    day: str = typer.Option(None, "--date", help="Date (YYYY-MM-DD), defaults to today"),
    at: str = typer.Option(None, "--at", help="Time of day (HH:MM), defaults to now"),
):
    """Show Today's Focus, generating it if needed."""
    now = parse_now(day, at)

    async def show():
        from dailycoach.engine.daily import DailyEngine

        async with await open_repository(data) as repo:
            tasks = await DailyEngine(repo).get_focus_tasks(user, now)
        if not tasks:
            console.print("[yellow]No focus tasks[/yellow]")
            return
        console.print(reminder_table(f"Today's Focus ({now.date()})", tasks))

    run(show())


@app.command()
def score(
    user: str = UserOption,
    data: Path | None = DataOption,
    day: str = typer.Option(None, "--date", help="Date (YYYY-MM-DD), defaults to today"),
):
    """Show the daily score."""
    target = date.fromisoformat(day) if day else date.today()

    async def show():
        from dailycoach.engine.daily import DailyEngine

        async with await open_repository(data) as repo:
            card = await DailyEngine(repo).get_scores(user, target)

        console.print(Panel(f"Daily Score: {card.daily_score}", style="blue"))
        table = Table(title=f"Scores ({target})")
        table.add_column("Category", style="cyan")
        table.add_column("Score", justify="right", style="green")
        table.add_column("Weight", justify="right", style="dim")
        table.add_row("Health", str(card.scores.health_score), "50%")
        table.add_row("Wellness", str(card.scores.wellness_score), "30%")
        table.add_row("Habits", str(card.scores.habits_score), "20%")
        console.print(table)

    run(show())


@app.command()
def wins(
    user: str = UserOption,
    data: Path | None = DataOption,
    day: str = typer.Option(None, "--date", help="Date (YYYY-MM-DD), defaults to yesterday"),
):
    """Detect and save wins for a date."""
    target = date.fromisoformat(day) if day else date.today() - timedelta(days=1)

    async def detect():
        from dailycoach.engine.daily import DailyEngine

        async with await open_repository(data) as repo:
            result = await DailyEngine(repo).detect_wins(user, target)

        console.print(Panel(f"Wins for {result.day}", style="blue"))
        if not result.wins:
            console.print("[yellow]No wins detected[/yellow]")
            return
        for win in result.wins:
            console.print(f"  • {win.win} [dim]({', '.join(win.tags)})[/dim]")
        if result.failed:
            console.print(f"[red]✗ {result.failed} wins could not be saved[/red]")
        else:
            console.print(f"[green]✓ {result.saved} wins saved[/green]")

    run(detect())


@app.command("init-db")
def init_db_command(
    data: Path | None = typer.Option(None, "--data", "-d", help="YAML fixture to import"),
    url: str = typer.Option(None, "--url", help="Database URL, defaults to DATABASE_URL"),
):
    """Create the database tables, optionally importing a fixture."""

    async def init():
        from dailycoach.adapters.memory import InMemoryRepository
        from dailycoach.adapters.sql import SQLRepository
        from dailycoach.db import close_db, init_db

        engine = await init_db(url)
        console.print(f"[green]✓ Tables created[/green] ({engine.url})")
        if data is not None:
            count = await SQLRepository(engine).import_repository(InMemoryRepository.from_yaml(data))
            console.print(f"[green]✓ Imported {count} rows from {data}[/green]")
        await close_db()

    run(init())


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
):
    """Run the HTTP API."""
    from dailycoach.api import run_server

    run_server(host=host, port=port)


@app.command()
def schedule():
    """Run the daily scheduler."""
    from dailycoach.autonomous.scheduler import start_scheduler

    start_scheduler()


@app.command()
def version():
    """Show dailycoach version."""
    from dailycoach import __version__

    console.print(f"dailycoach v{__version__}")


if __name__ == "__main__":
    app()
