"""Interactive CLI for drilling scheduled review items."""
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from review_scheduler.config import Settings
from review_scheduler.db import get_due_items, init_db, load_item
from review_scheduler.errors import SchedulerError
from review_scheduler.logging_config import configure_logging
from review_scheduler.models import NEVER, Difficulty
from review_scheduler.review import get_review_stats, record_review
from review_scheduler.scheduler import Scheduler

console = Console()

EXIT_WORDS = ("q", "menu")
RATING_CHOICES = [d.value for d in Difficulty]


class SessionExitRequested(Exception):
    """Raised when the user leaves a drill mid-way."""


def session_prompt(text: str, choices: Optional[list] = None, **kwargs) -> str:
    if choices is not None:
        choices = list(choices) + [w for w in EXIT_WORDS if w not in choices]
    answer = Prompt.ask(text, choices=choices, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def format_due(next_review_at: float) -> str:
    if next_review_at == NEVER:
        return "graduated"
    return datetime.fromtimestamp(next_review_at / 1000).strftime("%Y-%m-%d %H:%M")


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("add", "Schedule a new item"),
        ("due", "List items due now"),
        ("drill", "Review due items"),
        ("stats", "Schedule summary"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<10}[/cyan] {desc}")


def run_drill(db_path: str, scheduler: Scheduler, items: list) -> int:
    """Walk ``items`` asking for a rating and outcome. Returns reviews done."""
    if not items:
        console.print("[yellow]Nothing due right now![/yellow]")
        return 0
    done = 0
    console.print(f"\n[bold]Drill[/bold] - {len(items)} items\n")
    for i, item in enumerate(items, 1):
        console.print(Panel(
            f"[bold]{item.item_id}[/bold]\n[dim]reviews: {item.review_count}  "
            f"multiplier: {item.interval_multiplier:g}[/dim]",
            title=f"Item {i}/{len(items)}", border_style="cyan",
        ))
        rating = session_prompt("Rating", choices=RATING_CHOICES)
        passed = session_prompt("Passed?", choices=["y", "n"]) == "y"
        updated = record_review(db_path, scheduler, item.item_id, rating, passed)
        if updated.is_graduated:
            console.print("[green]Graduated![/green]")
        else:
            console.print(f"[dim]Next review: {format_due(updated.next_review_at)}[/dim]")
        done += 1
    return done


def cmd_add(db_path: str, scheduler: Scheduler):
    item_id = Prompt.ask("Item id").strip()
    if not item_id:
        console.print("[red]Item id cannot be empty.[/red]")
        return
    if load_item(db_path, item_id) is not None:
        console.print(f"[yellow]{item_id} is already scheduled.[/yellow]")
        return
    rating = Prompt.ask("Rating", choices=RATING_CHOICES, default="good")
    item = record_review(db_path, scheduler, item_id, rating)
    console.print(f"[green]Scheduled {item_id} for {format_due(item.next_review_at)}[/green]")


def cmd_due(db_path: str, scheduler: Scheduler, limit: int):
    items = get_due_items(db_path, scheduler.clock.now(), limit=limit)
    if not items:
        console.print("[green]Nothing due.[/green]")
        return
    table = Table(title="Due Items")
    table.add_column("Item", style="cyan")
    table.add_column("Due", justify="right")
    table.add_column("Reviews", justify="right")
    table.add_column("Last rating")
    for item in items:
        table.add_row(
            item.item_id, format_due(item.next_review_at),
            str(item.review_count), item.difficulty.value,
        )
    console.print(table)


def cmd_drill(db_path: str, scheduler: Scheduler, limit: int):
    items = get_due_items(db_path, scheduler.clock.now(), limit=limit)
    try:
        run_drill(db_path, scheduler, items)
    except SessionExitRequested:
        console.print("[dim]Drill paused.[/dim]")


def cmd_stats(db_path: str, scheduler: Scheduler):
    stats = get_review_stats(db_path, scheduler.clock.now())
    console.print(f"\n  Items: [bold]{stats['total_items']}[/bold]  |  "
                  f"Due: [bold]{stats['due']}[/bold]  |  "
                  f"Graduated: [bold]{stats['graduated']}[/bold]  |  "
                  f"Reviews: [bold]{stats['reviews_logged']}[/bold]")


def main(settings: Optional[Settings] = None):
    settings = settings or Settings.load()
    configure_logging(settings.log_level, json=settings.log_json)
    db_path = settings.db_path
    init_db(db_path)
    scheduler = Scheduler()

    console.print(Panel("[bold]Review Scheduler[/bold]", title="Welcome", border_style="blue"))

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="drill").strip().lower()
        try:
            if choice == "add":
                cmd_add(db_path, scheduler)
            elif choice == "due":
                cmd_due(db_path, scheduler, settings.due_limit)
            elif choice == "drill":
                cmd_drill(db_path, scheduler, settings.due_limit)
            elif choice == "stats":
                cmd_stats(db_path, scheduler)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Bye![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except SchedulerError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
