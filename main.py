#!/usr/bin/env python3
"""
cozi-reader - command line entry point

Reads lists, people and calendar data from a Cozi account. Credentials come
from config/config.yaml or the COZI_USERNAME / COZI_PASSWORD environment
variables (a .env file is honoured).
"""
import asyncio
import datetime as dt
import sys
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

import click
from rich.console import Console
from rich.table import Table

from cozi_reader import __version__
from cozi_reader.integrations.cozi import (
    CalendarEntry,
    CalendarEntryWithAttendees,
    ConfigurationError,
    CoziCalendarService,
    CoziClient,
    CoziServiceException,
)
from cozi_reader.utils.config import Config, ConfigDefaults, load_config, missing_credentials
from cozi_reader.utils.logger import setup_logger

console = Console()

T = TypeVar('T')


def run_with_client(config: Config, action: Callable[[CoziClient], Awaitable[T]]) -> T:
    """Log in with the configured credentials, run ``action`` and close the client"""
    missing = missing_credentials(config)
    if missing:
        raise ConfigurationError(
            f"Missing Cozi credentials: set {', '.join(missing)}",
            details={'missing': missing}
        )

    async def _run() -> T:
        async with CoziClient.from_config(config.cozi) as client:
            await client.login(config.cozi.username, config.cozi.password)
            return await action(client)

    return asyncio.run(_run())


def render_entries(entries: Iterable[CalendarEntry], title: str) -> None:
    table = Table(title=title)
    table.add_column("Date", style="cyan")
    table.add_column("Time")
    table.add_column("Description", style="bold")
    table.add_column("Source", style="dim")

    show_attendees = False
    rows = []
    for entry in entries:
        row = [
            entry.date.isoformat(),
            f"{entry.item.start_time[:5]}-{entry.item.end_time[:5]}",
            entry.item.description,
            entry.item.item_source or "",
        ]
        if isinstance(entry, CalendarEntryWithAttendees):
            show_attendees = True
            row.append(", ".join(person.name for person in entry.attendees))
        rows.append(row)

    if show_attendees:
        table.add_column("Attendees", style="green")
    for row in rows:
        table.add_row(*row)

    if rows:
        console.print(table)
    else:
        console.print(f"[dim]No entries for {title}[/dim]")


def parse_date(value: Optional[str]) -> dt.date:
    if value is None:
        return dt.date.today()
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}")


@click.group()
@click.version_option(__version__, prog_name="cozi-reader")
@click.option('--config', 'config_path', default=ConfigDefaults.CONFIG_PATH_DEFAULT,
              show_default=True, help='Path to the YAML configuration file')
@click.option('--log-level', default=None, help='Override the configured log level')
@click.pass_context
def cli(ctx, config_path, log_level):
    """Read-only access to a Cozi household account"""
    config = load_config(config_path)
    setup_logger(__name__, level=log_level or config.logging.level, log_file=config.logging.file)
    ctx.obj = config


@cli.command('lists')
@click.pass_obj
def lists_command(config):
    """Show all shopping and to-do lists"""
    records = run_with_client(config, lambda client: client.get_lists())

    table = Table(title="Lists")
    table.add_column("Id", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Type")
    table.add_column("Open items", justify="right")
    for record in records:
        open_items = sum(1 for item in record.items if not item.checked_off)
        table.add_row(record.list_id, record.title, record.list_type, str(open_items))
    console.print(table)


@cli.command('list')
@click.argument('list_id')
@click.pass_obj
def list_command(config, list_id):
    """Show the items of one list"""
    record = run_with_client(config, lambda client: client.get_list(list_id))

    console.print(f"[bold blue]{record.title}[/bold blue] [dim]({record.list_type})[/dim]")
    for item in record.items:
        mark = "[green]x[/green]" if item.checked_off else " "
        console.print(f"  [{mark}] {item.text}")


@cli.command('people')
@click.pass_obj
def people_command(config):
    """Show the household members"""
    people = run_with_client(config, lambda client: client.get_people())

    table = Table(title="Household")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Email")
    table.add_column("Type")
    for person in people:
        table.add_row(person.id, person.name, person.email or "", person.type or "")
    console.print(table)


@cli.command('day')
@click.argument('date', required=False)
@click.option('--attendees', is_flag=True, help='Resolve who attends each entry')
@click.pass_obj
def day_command(config, date, attendees):
    """Show calendar entries for DATE (default: today)"""
    day = parse_date(date)

    async def action(client):
        service = CoziCalendarService(client)
        entries = await service.get_day(day)
        return await service.with_attendees(entries) if attendees else entries

    render_entries(run_with_client(config, action), day.isoformat())


@cli.command('week')
@click.argument('date', required=False)
@click.option('--attendees', is_flag=True, help='Resolve who attends each entry')
@click.pass_obj
def week_command(config, date, attendees):
    """Show the Monday-start week containing DATE (default: today)"""
    day = parse_date(date)

    async def action(client):
        service = CoziCalendarService(client)
        entries = await service.get_week(day)
        return await service.with_attendees(entries) if attendees else entries

    render_entries(run_with_client(config, action), f"week of {day.isoformat()}")


@cli.command('year')
@click.argument('year', type=int)
@click.pass_obj
def year_command(config, year):
    """Show every calendar entry of YEAR"""
    entries = run_with_client(config, lambda client: CoziCalendarService(client).get_year(year))
    render_entries(entries, str(year))


@cli.command('item')
@click.argument('item_id')
@click.option('--raw', is_flag=True, help='Print the JSON document as returned by Cozi')
@click.pass_obj
def item_command(config, item_id, raw):
    """Show one calendar item"""
    if raw:
        console.print_json(run_with_client(config, lambda client: client.get_calendar_item_raw(item_id)))
        return

    item = run_with_client(config, lambda client: client.get_calendar_item(item_id))
    console.print(f"[bold blue]{item.description}[/bold blue]")
    console.print(f"Date: {item.day[:10]} {item.start_time[:5]}-{item.end_time[:5]}")
    if item.item_source:
        console.print(f"Source: {item.item_source}")
    if item.details is not None:
        if item.details.location:
            console.print(f"Location: {item.details.location}")
        if item.details.notes:
            console.print(f"Notes: {item.details.notes}")
    if item.attendee_set:
        console.print(f"Attendees: {', '.join(item.attendee_set)}")


def main():
    try:
        cli(standalone_mode=False)
    except click.exceptions.Abort:
        console.print("[yellow]Aborted[/yellow]")
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except CoziServiceException as e:
        console.print(f"[bold red]{e.message}[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
