"""
Main CLI application using Typer.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterable, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.json_store import JsonBookingStore
from ..config import load_config
from ..domain.exceptions import SchedulingError
from ..domain.models import Booking, BookingRequest, BookingStatus
from ..services.admin_gate import AdminGate
from ..services.scheduling_service import SchedulingService

app = typer.Typer(
    name="slotbook",
    help="Appointment slots and bookings for a single service provider",
    add_completion=False
)

console = Console()

AdminSecret = Annotated[
    Optional[str],
    typer.Option(
        "--admin-secret",
        envvar="SLOTBOOK_ADMIN_SECRET",
        help="Administrator secret (or set SLOTBOOK_ADMIN_SECRET).",
    ),
]


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
):
    """
    Query free slots, book appointments and administer the schedule.
    """
    ctx.obj = {"config_file": config_file, "verbose": verbose}


def _build_service(ctx: typer.Context) -> SchedulingService:
    options = ctx.obj or {}
    config = load_config(options.get("config_file"))

    level = logging.DEBUG if options.get("verbose") else config.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    store = JsonBookingStore(config.store_path, initial_config=config.schedule)
    gate = AdminGate.for_store(store, override=config.admin_secret)
    return SchedulingService(store=store, admin_gate=gate)


@contextmanager
def _reported_errors():
    """Turn expected failures into a red message and exit code 1."""
    try:
        yield
    except (SchedulingError, ValidationError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


def _bookings_table(title: str, bookings: Iterable[dict]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Min.", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Phone")
    table.add_column("Service")
    table.add_column("Status")

    for booking in bookings:
        table.add_row(
            booking["id"],
            booking["date"],
            booking["time"],
            str(booking["duration_minutes"] or ""),
            escape(booking["customer_name"]),
            escape(booking["contact_phone"]),
            escape(booking["service_label"]),
            booking["status"],
        )
    return table


def _print_booking(booking: Booking) -> None:
    console.print(
        f"[bold]{booking.id}[/bold] {booking.date} {booking.time} "
        f"({booking.duration_minutes} min.) {escape(booking.customer_name)}: "
        f"[bold]{booking.status.value}[/bold]"
    )


@app.command()
def slots(
    ctx: typer.Context,
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
):
    """
    Show the slots of a date and whether they are free.
    """
    with _reported_errors():
        availability = _build_service(ctx).available_slots(date)

    if availability.reason is not None:
        console.print(f"[yellow]No slots on {availability.date}: {availability.reason.value}[/yellow]")
        return

    table = Table(title=f"Slots on {availability.date}", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="bold")
    table.add_column("Min.", justify="right")
    table.add_column("Status")
    for slot in availability.slots:
        status = "[green]free[/green]" if slot.available else "[red]taken[/red]"
        table.add_row(slot.time, str(slot.duration_minutes), status)

    console.print(table)
    console.print(f"{len(availability.available_slots)} of {len(availability.slots)} slot(s) free")


@app.command()
def book(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Customer name")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    phone: Annotated[str, typer.Option("--phone", help="Contact phone")] = "",
    service: Annotated[str, typer.Option("--service", help="Requested service")] = "",
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Duration in minutes")] = None,
    manual_review: Annotated[bool, typer.Option("--manual-review", help="Store as pending for the administrator to confirm.")] = False,
):
    """
    Request a booking. Overlapping requests are stored as pending.
    """
    request = BookingRequest(
        customer_name=name,
        date=date,
        time=time,
        contact_phone=phone,
        service_label=service,
        duration_minutes=duration,
        auto_confirm=not manual_review,
    )
    with _reported_errors():
        decision = _build_service(ctx).request_booking(request)

    _print_booking(decision.booking)
    if decision.had_collision:
        console.print(
            "[yellow]Overlaps existing booking(s) "
            f"{', '.join(decision.conflicting_ids)}; awaiting confirmation.[/yellow]"
        )


@app.command()
def bookings(
    ctx: typer.Context,
    date: Annotated[Optional[str], typer.Option("--date", help="Only this date (YYYY-MM-DD)")] = None,
    public: Annotated[bool, typer.Option("--public", help="Public view with phone numbers hidden.")] = False,
    admin_secret: AdminSecret = None,
):
    """
    List bookings.
    """
    with _reported_errors():
        service = _build_service(ctx)
        if public:
            rows = service.list_public_bookings(date)
        else:
            rows = [b.model_dump(mode="json") for b in service.list_bookings(admin_secret, date)]

    if not rows:
        console.print("[yellow]No bookings.[/yellow]")
        return
    console.print(_bookings_table("Bookings", rows))


@app.command()
def update(
    ctx: typer.Context,
    booking_id: Annotated[str, typer.Argument(help="Booking ID")],
    status: Annotated[Optional[BookingStatus], typer.Option("--status", help="New status")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Customer name")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone", help="Contact phone")] = None,
    service: Annotated[Optional[str], typer.Option("--service", help="Service")] = None,
    date: Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", help="Start time (HH:MM)")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Duration in minutes")] = None,
    admin_secret: AdminSecret = None,
):
    """
    Change fields of a booking (admin).
    """
    changes = {
        "status": status,
        "customer_name": name,
        "contact_phone": phone,
        "service_label": service,
        "date": date,
        "time": time,
        "duration_minutes": duration,
    }
    with _reported_errors():
        booking = _build_service(ctx).update_booking(admin_secret, booking_id, changes)
    _print_booking(booking)


@app.command()
def confirm(
    ctx: typer.Context,
    booking_id: Annotated[str, typer.Argument(help="Booking ID")],
    admin_secret: AdminSecret = None,
):
    """
    Confirm a booking (admin).
    """
    with _reported_errors():
        booking = _build_service(ctx).set_status(admin_secret, booking_id, BookingStatus.CONFIRMED)
    _print_booking(booking)


@app.command()
def cancel(
    ctx: typer.Context,
    booking_id: Annotated[str, typer.Argument(help="Booking ID")],
    admin_secret: AdminSecret = None,
):
    """
    Cancel a booking, keeping its record (admin).
    """
    with _reported_errors():
        booking = _build_service(ctx).set_status(admin_secret, booking_id, BookingStatus.CANCELLED)
    _print_booking(booking)


@app.command()
def delete(
    ctx: typer.Context,
    booking_id: Annotated[str, typer.Argument(help="Booking ID")],
    admin_secret: AdminSecret = None,
):
    """
    Remove a booking record entirely (admin).
    """
    with _reported_errors():
        _build_service(ctx).delete_booking(admin_secret, booking_id)
    console.print(f"[green]✓ Deleted {booking_id}[/green]")


@app.command()
def show_config(ctx: typer.Context):
    """
    Show the working schedule.
    """
    with _reported_errors():
        config = _build_service(ctx).public_config()

    table = Table(title="Schedule", show_header=False)
    table.add_column("Setting", style="bold yellow")
    table.add_column("Value")
    for key, value in config.items():
        if isinstance(value, list):
            value = ", ".join(str(item) for item in value) or "-"
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def set_config(
    ctx: typer.Context,
    start: Annotated[str, typer.Option("--start", help="Opening time (HH:MM)")],
    end: Annotated[str, typer.Option("--end", help="Closing time (HH:MM)")],
    duration: Annotated[int, typer.Option("--duration", "-d", help="Slot duration in minutes")],
    days: Annotated[Optional[List[int]], typer.Option("--day", help="Working weekday, 0=Sunday..6=Saturday. Repeatable.")] = None,
    blocked: Annotated[Optional[List[str]], typer.Option("--blocked", help="Blocked date (YYYY-MM-DD). Repeatable.")] = None,
    new_secret: Annotated[Optional[str], typer.Option("--new-secret", help="Replace the admin secret.")] = None,
    admin_secret: AdminSecret = None,
):
    """
    Replace the working schedule (admin). Omitted days, dates and secret are kept.
    """
    changes = {
        "start_time": start,
        "end_time": end,
        "default_duration_minutes": duration,
        "working_days": days or None,
        "blocked_dates": blocked or None,
        "admin_secret": new_secret,
    }
    with _reported_errors():
        config = _build_service(ctx).update_config(admin_secret, changes)
    console.print(
        f"[green]✓ Schedule saved:[/green] {config.start_time}-{config.end_time}, "
        f"{config.default_duration_minutes} min."
    )


@app.command()
def block(
    ctx: typer.Context,
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    admin_secret: AdminSecret = None,
):
    """
    Block a date (admin).
    """
    with _reported_errors():
        _build_service(ctx).block_date(admin_secret, date)
    console.print(f"[green]✓ {date} blocked[/green]")


@app.command()
def unblock(
    ctx: typer.Context,
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    admin_secret: AdminSecret = None,
):
    """
    Unblock a date (admin).
    """
    with _reported_errors():
        _build_service(ctx).unblock_date(admin_secret, date)
    console.print(f"[green]✓ {date} unblocked[/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
