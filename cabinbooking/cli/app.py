"""
Main CLI application using Typer.
"""

import logging
from datetime import date as Date
from pathlib import Path
from typing import Annotated, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.booking_store import JsonBookingStore
from ..adapters.cabin_webhook import CabinWebhookClient
from ..adapters.confirmation_client import ConfirmationClient
from ..adapters.mock_cabin_webhook import MockCabinWebhookClient, MockConfirmationClient
from ..config import AppConfig, load_config
from ..domain.availability import AvailabilityCalculator
from ..domain.exceptions import BookingError, BookingSubmissionError
from ..domain.models import AvailabilityResult, CabinCatalog
from ..services.booking_service import BookingService
from ..services.booking_session import BookingSession

app = typer.Typer(
    name="cabinbooking",
    help="Check cabin availability and book tanning sessions",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use mock calendar data and record notifications instead of sending them.")
]

SLOT_COLUMNS = 8


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Cabin booking for the tanning salon.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_service(config: AppConfig, mock: bool) -> BookingService:
    """Wire the booking service from configuration."""
    catalog = config.build_catalog()
    calculator = AvailabilityCalculator(business_hours=config.build_business_hours())

    if mock:
        calendar_source = MockCabinWebhookClient(cabin_ids=catalog.ids, timezone=config.timezone)
        confirmation_sender = MockConfirmationClient(timezone=config.timezone)
    else:
        calendar_source = CabinWebhookClient(
            endpoints=config.webhook_endpoints(),
            timezone=config.timezone,
            timeout=config.request_timeout_seconds,
        )
        confirmation_sender = ConfirmationClient(
            url=config.notification_url or "",
            timezone=config.timezone,
            timeout=config.request_timeout_seconds,
        )

    return BookingService(
        catalog=catalog,
        calculator=calculator,
        calendar_source=calendar_source,
        confirmation_sender=confirmation_sender,
        repository=JsonBookingStore(config.booking_store_path),
    )


def _parse_date(value: str, tz: str) -> Date:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)


def _today(tz: str) -> Date:
    return pendulum.today(tz).date()


def _print_slots(result: AvailabilityResult, catalog: CabinCatalog) -> None:
    cabin = catalog.get(result.cabin_id)
    table = Table(
        title=f"{cabin.name} - {result.date.isoformat()}",
        show_header=False,
        box=None,
        padding=(0, 1)
    )
    for _ in range(SLOT_COLUMNS):
        table.add_column(justify="center")

    cells = [
        f"[bold green]{slot.time}[/bold green]" if slot.available else f"[dim strike]{slot.time}[/dim strike]"
        for slot in result.slots
    ]
    for start in range(0, len(cells), SLOT_COLUMNS):
        table.add_row(*cells[start:start + SLOT_COLUMNS])

    console.print()
    console.print(table)
    console.print(
        f"\n[bold]{len(result.available_slots)}[/bold] of {len(result.slots)} slots available\n"
    )


def _prompt_cabin(catalog: CabinCatalog) -> str:
    console.print("[bold]1️⃣  Choose a cabin[/bold]")
    cabins = list(catalog)
    for idx, cabin in enumerate(cabins, 1):
        console.print(f"  {idx}. {cabin.name} ({cabin.id}) - {cabin.format_price()}")

    choice = typer.prompt("\n→ Cabin (number or id)", default="1").strip()
    if choice.isdigit() and 0 < int(choice) <= len(cabins):
        return cabins[int(choice) - 1].id
    return choice


def _prompt_date(session: BookingSession) -> Date:
    console.print("\n[bold]2️⃣  Choose a date[/bold]")
    for idx, day in enumerate(session.dates, 1):
        console.print(f"  {idx}. {pendulum.date(day.year, day.month, day.day).format('ddd, YYYY-MM-DD')}")

    choice = typer.prompt("\n→ Date (number)", default=1, type=int)
    if not 0 < choice <= len(session.dates):
        console.print(f"[red]Invalid choice: {choice}[/red]")
        raise typer.Exit(1)
    return session.dates[choice - 1]


def _prompt_time(session: BookingSession) -> str:
    console.print("\n[bold]3️⃣  Choose a time[/bold]")
    console.print("  " + "  ".join(slot.time for slot in session.availability.available_slots))
    return typer.prompt("\n→ Time (HH:MM)").strip()


def _resolve_contact(name: Optional[str], email: Optional[str]) -> Tuple[str, str]:
    if not name or not email:
        console.print("\n[bold]4️⃣  Contact details[/bold]")
    full_name = name or typer.prompt("→ Full name")
    contact_email = email or typer.prompt("→ Email")
    return full_name, contact_email


@app.command()
def cabins(config_file: ConfigOption = None):
    """
    List configured cabins and business hours.
    """
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Cabins", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Price", justify="right")
    for cabin in config.build_catalog():
        table.add_row(cabin.id, cabin.name, cabin.category.value, cabin.format_price())

    hours = config.build_business_hours()
    hours_table = Table(title="Business hours", show_header=True, header_style="bold cyan")
    hours_table.add_column("Day")
    hours_table.add_column("Open")
    for weekday in range(7):
        hours_table.add_row(pendulum.WeekDay(weekday).name.title(), str(hours.hours[weekday]))

    console.print()
    console.print(table)
    console.print(hours_table)
    console.print()


@app.command()
def slots(
    cabin: Annotated[str, typer.Argument(help="Cabin id, e.g. lying-1")],
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the time slots of a cabin for one day.

    Examples:

        cabinbooking slots lying-1
        cabinbooking slots standing-1 --date 2024-11-25 --mock
    """
    try:
        config = load_config(config_file)
        service = _build_service(config, mock)
        day = _parse_date(date, config.timezone) if date else _today(config.timezone)

        result = service.get_time_slots(cabin, day)
    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not result.ok:
        console.print(f"[bold red]Could not load available times:[/bold red] {result.error}")
        raise typer.Exit(1)

    _print_slots(result, service.catalog)
    if result.fully_booked:
        console.print("[yellow]⚠ This day is fully booked.[/yellow]\n")


@app.command()
def book(
    cabin: Annotated[Optional[str], typer.Argument(help="Cabin id. Without it the wizard asks.")] = None,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", "-t", help="Start time (HH:MM)")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Full name")] = None,
    email: Annotated[Optional[str], typer.Option("--email", help="Email address")] = None,
    user_id: Annotated[str, typer.Option("--user-id", help="User id stored with the booking")] = "anonymous",
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Book a cabin. Missing values are asked for interactively.

    Examples:

        cabinbooking book
        cabinbooking book lying-1 --date 2024-11-25 --time 10:15 --name "Jonas Jonaitis" --email jonas@example.com
    """
    try:
        config = load_config(config_file)
        if not mock and not config.notification_url:
            raise ValueError("notification_url must be configured to submit bookings")

        service = _build_service(config, mock)
        session = BookingSession(
            service=service,
            today=_today(config.timezone),
            window_days=config.booking_window_days
        )

        cabin_id = cabin or _prompt_cabin(service.catalog)
        session.select_date(_parse_date(date, config.timezone) if date else _prompt_date(session))
        session.select_cabin(cabin_id)

        if session.error:
            console.print(f"[bold red]{session.error}[/bold red] {session.availability.error}")
            raise typer.Exit(1)
        if not session.availability.available_slots:
            console.print("[yellow]⚠ No free times on this day. Try another date.[/yellow]")
            raise typer.Exit(1)

        session.select_time(time or _prompt_time(session))
        session.full_name, session.email = _resolve_contact(name, email)

        booking = session.submit(user_id=user_id)

    except BookingSubmissionError:
        console.print(f"[bold red]✗ {session.error}[/bold red]")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    cabin_name = service.catalog.get(booking.cabin_id).name
    details = (
        f"[bold]Cabin:[/bold] {cabin_name}\n"
        f"[bold]When:[/bold] {booking.date.isoformat()} {booking.time}\n"
        f"[bold]Email:[/bold] {booking.user_email}"
    )
    if booking.id:
        details += f"\n[bold]Booking ID:[/bold] {booking.id}"
    else:
        details += "\n[yellow]The booking was confirmed but could not be saved locally.[/yellow]"

    console.print()
    console.print(Panel.fit(
        f"[bold green]✓ Booking confirmed![/bold green]\n\n{details}",
        title="Booking"
    ))
    console.print()


@app.command()
def bookings(
    user: Annotated[str, typer.Option("--user", "-u", help="User id")] = "anonymous",
    config_file: ConfigOption = None,
):
    """
    List the bookings of a user.
    """
    try:
        config = load_config(config_file)
        user_bookings = _build_service(config, False).get_user_bookings(user)
    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not user_bookings:
        console.print(f"[yellow]No bookings found for {user}.[/yellow]")
        return

    table = Table(title=f"Bookings of {user}", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Cabin", style="bold yellow")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Status", no_wrap=True, min_width=9)
    for booking in user_bookings:
        status_style = "green" if booking.status.value == "confirmed" else "red"
        table.add_row(
            booking.id,
            booking.cabin_id,
            booking.date.isoformat(),
            booking.time,
            f"[{status_style}]{booking.status.value}[/{status_style}]"
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def cancel(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    cabin: Annotated[str, typer.Argument(help="Cabin id of the booking")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Cancel a booking.
    """
    try:
        config = load_config(config_file)
        service = _build_service(config, mock)
        service.cancel_booking(booking_id, cabin)
    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[green]✓ Booking {booking_id} cancelled.[/green]\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]cabinbooking[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
