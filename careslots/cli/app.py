"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_repository import JsonFileAvailabilityRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import CareSlotsError
from ..domain.models import DateRange
from ..domain.service_types import ServiceType
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="careslots",
    help="Query and book provider availability from stored snapshots",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", help="Folder with provider snapshots. Overrides the config."),
]


def configure_logging(level: str) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> Tuple[AppConfig, Path]:
    """
    Load configuration and return it with the folder relative paths resolve against.

    An explicitly passed config file must exist; a missing default config
    falls back to built-in defaults.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file), config_file.parent

    config_path = get_default_config_path()
    if config_path.exists():
        return AppConfig.load_from_yaml(config_path), config_path.parent
    return AppConfig(), Path.cwd()


def _build_service(config_file: Optional[Path], data_dir: Optional[Path]) -> Tuple[AvailabilityService, AppConfig]:
    config, base = _load_config(config_file)
    configure_logging(config.log_level)
    directory = data_dir or config.resolve_data_dir(base)
    return AvailabilityService(JsonFileAvailabilityRepository(directory)), config


def _parse_service_type(value: str) -> ServiceType:
    try:
        return ServiceType(value.lower())
    except ValueError:
        valid = ", ".join(service_type.value for service_type in ServiceType)
        console.print(f"[red]Unbekannter Service-Typ '{value}'. Gültig: {valid}[/red]")
        raise typer.Exit(1)


def _determine_date_range(
    *,
    tz: str,
    horizon_days: int,
    start_option: Optional[str],
    end_option: Optional[str],
) -> DateRange:
    """Resolve the query window from explicit dates or the configured horizon."""
    if start_option:
        try:
            start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).date()
        except ValueError as e:
            console.print(f"[red]Fehler beim Parsen des Startdatums: {e}[/red]")
            raise typer.Exit(1)
    else:
        start_date = pendulum.now(tz).date()

    if end_option:
        try:
            end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).date()
        except ValueError as e:
            console.print(f"[red]Fehler beim Parsen des Enddatums: {e}[/red]")
            raise typer.Exit(1)
    else:
        end_date = start_date.add(days=horizon_days - 1)

    try:
        return DateRange(start=start_date, end=end_date)
    except CareSlotsError as e:
        console.print(f"[red]Fehler: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def slots(
    provider_id: Annotated[str, typer.Argument(help="Provider ID")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    service: Annotated[Optional[str], typer.Option("--service", "-s", help="Only this service type")] = None,
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
):
    """
    List bookable slots for a provider.

    Examples:

        careslots slots prov-1

        careslots slots prov-1 --start 2024-11-25 --end 2024-11-29 --service physical_therapy
    """
    try:
        service_layer, config = _build_service(config_file, data_dir)
        date_range = _determine_date_range(
            tz=config.timezone,
            horizon_days=config.defaults.horizon_days,
            start_option=start,
            end_option=end,
        )
        service_type = _parse_service_type(service) if service else None

        availability = service_layer.get_availability(provider_id)
        available = availability.get_available_time_slots(date_range, service_type)

        if not available:
            console.print(
                f"[yellow]⚠ Keine freien Termine von {date_range.start} bis {date_range.end}.[/yellow]"
            )
            return

        table = Table(
            title=f"Freie Termine: {provider_id}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("ID", style="dim")
        table.add_column("Datum")
        table.add_column("Zeit", style="bold")
        table.add_column("Service", style="yellow")
        table.add_column("Min.", justify="right")

        tz = availability.timezone
        for slot in available:
            local_start = slot.start.in_timezone(tz)
            local_end = slot.end.in_timezone(tz)
            table.add_row(
                slot.id,
                local_start.format("ddd DD.MM.YYYY"),
                f"{local_start.format('HH:mm')} - {local_end.format('HH:mm')}",
                slot.service_type.label,
                str(slot.duration_minutes()),
            )

        console.print()
        console.print(table)
        console.print()

    except (CareSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    provider_id: Annotated[str, typer.Argument(help="Provider ID")],
    start: Annotated[str, typer.Argument(help="Start (ISO-8601, e.g. 2024-11-25T09:00)")],
    end: Annotated[str, typer.Argument(help="End (ISO-8601)")],
    service: Annotated[str, typer.Argument(help="Service type, e.g. physical_therapy")],
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
):
    """
    Check whether a provider can take a booking in a time window.

    Exits with status 1 when the window is not available.
    """
    try:
        service_layer, config = _build_service(config_file, data_dir)
        service_type = _parse_service_type(service)
        start_at = pendulum.parse(start, tz=config.timezone)
        end_at = pendulum.parse(end, tz=config.timezone)

        if service_layer.check_availability(provider_id, start_at, end_at, service_type):
            console.print("[green]✓ Verfügbar[/green]")
            return

        console.print("[yellow]✗ Nicht verfügbar[/yellow]")
    except (CareSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")

    raise typer.Exit(1)


@app.command()
def book(
    provider_id: Annotated[str, typer.Argument(help="Provider ID")],
    slot_id: Annotated[str, typer.Argument(help="Directly held slot ID")],
    booking_id: Annotated[str, typer.Argument(help="Booking reference")],
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
):
    """
    Book a directly held slot.
    """
    try:
        service_layer, _ = _build_service(config_file, data_dir)
        if not service_layer.book_time_slot(provider_id, slot_id, booking_id):
            console.print(f"[bold red]Fehler:[/bold red] Slot {slot_id} konnte nicht gebucht werden.")
            raise typer.Exit(1)
    except (CareSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Slot {slot_id} gebucht ({booking_id}).[/green]")


@app.command()
def unbook(
    provider_id: Annotated[str, typer.Argument(help="Provider ID")],
    slot_id: Annotated[str, typer.Argument(help="Directly held slot ID")],
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
):
    """
    Release a booked slot.
    """
    try:
        service_layer, _ = _build_service(config_file, data_dir)
        if not service_layer.unbook_time_slot(provider_id, slot_id):
            console.print(f"[bold red]Fehler:[/bold red] Slot {slot_id} ist nicht gebucht.")
            raise typer.Exit(1)
    except (CareSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Slot {slot_id} freigegeben.[/green]")


@app.command()
def providers(
    service: Annotated[str, typer.Argument(help="Service type, e.g. counseling")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
):
    """
    List providers with open slots for a service type.
    """
    try:
        service_layer, config = _build_service(config_file, data_dir)
        service_type = _parse_service_type(service)
        date_range = _determine_date_range(
            tz=config.timezone,
            horizon_days=config.defaults.horizon_days,
            start_option=start,
            end_option=end,
        )
        provider_ids = service_layer.find_providers_by_availability(date_range, service_type)
    except (CareSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    if not provider_ids:
        console.print(f"[yellow]Keine Anbieter mit freien Terminen für {service_type.label}.[/yellow]")
        return

    for provider_id in provider_ids:
        console.print(f"  {provider_id}")


@app.command()
def validate(
    provider_id: Annotated[str, typer.Argument(help="Provider ID")],
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
):
    """
    Validate a stored provider snapshot.
    """
    try:
        service_layer, _ = _build_service(config_file, data_dir)
        availability = service_layer.get_availability(provider_id)
    except (CareSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    if not availability.validate():
        console.print(f"[bold red]✗ Verfügbarkeit von {provider_id} ist ungültig.[/bold red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✓ {provider_id}: {len(availability.slots)} Slots, "
        f"{len(availability.recurring_schedules)} Zeitpläne, "
        f"{len(availability.exceptions)} Ausnahmen (Version {availability.version})[/green]"
    )


@app.command("service-types")
def service_types():
    """
    List all service types with their default durations.
    """
    table = Table(
        title="Service-Typen",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Code", style="bold yellow")
    table.add_column("Bezeichnung")
    table.add_column("Kategorie", style="dim")
    table.add_column("Min.", justify="right")

    for service_type in ServiceType:
        table.add_row(
            service_type.value,
            service_type.label,
            service_type.category.value,
            str(service_type.default_duration),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]careslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
