"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, List, Optional, Tuple, Union

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.snapshot_repository import InMemoryAvailabilityRepository, load_snapshot
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import AvailabilityError
from ..domain.models import DayAvailability, EmployeeMatch, SlotFormat
from ..domain.slot_matcher import parse_clock_range
from ..domain.timezones import TimezoneLike
from ..schemas import parse_day
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="staffavailability",
    help="Compute salon staff availability from schedules, breaks and blocks",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print raw JSON instead of a table.")]
FormatOption = Annotated[Optional[SlotFormat], typer.Option("--format", "-f", help="Slot format: iso or clock. Defaults to the config value.")]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path]) -> Tuple[AppConfig, AvailabilityService]:
    """Load configuration and wire the service to the configured snapshot."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    _configure_logging(config.log_level)

    tz = config.get_timezone()
    snapshot = load_snapshot(config.get_data_file(), tz)
    repository = InMemoryAvailabilityRepository(snapshot, tz)

    service = AvailabilityService(
        repository=repository,
        tz=tz,
        max_days_ahead=config.max_days_ahead,
    )
    return config, service


def _resolve_window(
    *,
    tz: TimezoneLike,
    start: Optional[str],
    end: Optional[str],
    day: Optional[str],
    window: Optional[str],
) -> Tuple[Union[str, datetime], Union[str, datetime]]:
    """
    Resolve the request window from either ``--start/--end`` or ``--date/--window``.
    """
    if window:
        if not day:
            raise typer.BadParameter("--window requires --date")
        interval = parse_clock_range(window, parse_day(day, tz), tz)
        return interval.start, interval.end

    if not start or not end:
        raise typer.BadParameter("Provide --start and --end, or --date and --window")

    return start, end


def _fail(message: str) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _print_day(availability: DayAvailability, tz: TimezoneLike) -> None:
    window = availability.schedule_window
    console.print(Panel.fit(
        f"[bold]Employee:[/bold] {availability.employee_id}\n"
        f"[bold]Date:[/bold] {availability.day.isoformat()}\n"
        f"[bold]Schedule:[/bold] {window.format_clock(tz)}",
        title="Availability"
    ))

    if not availability.blocks and not availability.breaks:
        console.print("[green]No blocks or breaks on this day.[/green]\n")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Type", style="bold yellow")
    table.add_column("Time")
    table.add_column("Reason", style="dim")

    for block in availability.blocks:
        table.add_row("block", block.interval.format_clock(tz), block.reason)
    for item in availability.breaks:
        table.add_row("break", item.interval.format_clock(tz), item.reason)

    console.print(table)
    console.print()


def _print_matches(matches: List[EmployeeMatch], style: SlotFormat, tz: TimezoneLike) -> None:
    if not matches:
        console.print("[yellow]No employee is available in this window.[/yellow]\n")
        return

    table = Table(
        title=f"{len(matches)} available employee(s)",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Employee", style="bold yellow")
    table.add_column("Services", style="dim")
    table.add_column("Free")

    for match in matches:
        data = match.to_dict(style, tz)
        if style is SlotFormat.CLOCK:
            free = ", ".join(data["EWT"])
        else:
            free = "\n".join(f"{slot['start']} - {slot['end']}" for slot in data["availability"])
        table.add_row(
            str(match.employee_id),
            "\n".join(str(service_id) for service_id in match.service_ids),
            free
        )

    console.print()
    console.print(table)
    console.print()


def _run_match(
    *,
    bookable: bool,
    service_ids: List[str],
    config_file: Optional[Path],
    start: Optional[str],
    end: Optional[str],
    day: Optional[str],
    window: Optional[str],
    slot_format: Optional[SlotFormat],
    as_json: bool,
) -> None:
    try:
        config, service = _load(config_file)
        tz = service.timezone
        window_start, window_end = _resolve_window(tz=tz, start=start, end=end, day=day, window=window)

        finder = service.find_bookable_employees if bookable else service.match_employees
        matches = asyncio.run(finder(service_ids, window_start, window_end))
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(str(e))

    style = slot_format or config.slot_format
    if as_json:
        console.print_json(json.dumps([match.to_dict(style, tz) for match in matches]))
    else:
        _print_matches(matches, style, tz)


@app.command()
def day(
    employee_id: Annotated[str, typer.Argument(help="Employee UUID")],
    date: Annotated[str, typer.Option("--date", "-d", help="Date (YYYY-MM-DD or ISO date-time)")],
    config_file: ConfigOption = None,
    as_json: JsonOption = False,
):
    """
    Show the schedule window, one-time blocks and breaks for one day.

    Examples:

        staffavailability day 6f1c... --date 2024-07-01
    """
    try:
        _, service = _load(config_file)
        availability = asyncio.run(service.get_day_availability(employee_id, date))
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(str(e))

    if as_json:
        console.print_json(json.dumps(availability.to_dict(service.timezone)))
    else:
        _print_day(availability, service.timezone)


@app.command()
def match(
    service_ids: Annotated[List[str], typer.Argument(help="Requested service UUIDs")],
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Window start (ISO date-time)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Window end (ISO date-time)")] = None,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date for --window (YYYY-MM-DD)")] = None,
    window: Annotated[Optional[str], typer.Option("--window", "-w", help="Clock window HH:MM-HH:MM")] = None,
    slot_format: FormatOption = None,
    as_json: JsonOption = False,
):
    """
    Find employees free for at least one service within a window.

    Examples:

        staffavailability match SERVICE_ID --date 2024-07-01 --window 10:00-11:00
        staffavailability match SERVICE_ID --start 2024-07-01T10:00:00+05:30 --end 2024-07-01T11:00:00+05:30
    """
    _run_match(
        bookable=False,
        service_ids=service_ids,
        config_file=config_file,
        start=start,
        end=end,
        day=date,
        window=window,
        slot_format=slot_format,
        as_json=as_json,
    )


@app.command()
def bookable(
    service_ids: Annotated[List[str], typer.Argument(help="Requested service UUIDs")],
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Window start (ISO date-time)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Window end (ISO date-time)")] = None,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date for --window (YYYY-MM-DD)")] = None,
    window: Annotated[Optional[str], typer.Option("--window", "-w", help="Clock window HH:MM-HH:MM")] = None,
    slot_format: FormatOption = None,
    as_json: JsonOption = False,
):
    """
    Like ``match``, but already booked slots are subtracted as well.
    """
    _run_match(
        bookable=True,
        service_ids=service_ids,
        config_file=config_file,
        start=start,
        end=end,
        day=date,
        window=window,
        slot_format=slot_format,
        as_json=as_json,
    )


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]staffavailability[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
