"""Command Line Interface for the hospital triage queue.

This module provides the operator-facing front end using Typer and Rich:
an interactive menu loop for the front desk plus one-shot commands for
inspecting the saved queue. It validates raw console input, calls the
QueueService and renders whatever Result comes back.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from triage_queue.domain.patient_record import (
    LEAST_URGENT_PRIORITY,
    MAX_AGE,
    MAX_PATIENT_ID,
    MIN_AGE,
    MIN_PATIENT_ID,
    MOST_URGENT_PRIORITY,
    PatientRecord,
)
from triage_queue.domain.ports import Result
from triage_queue.domain.services import QueueService
from triage_queue.domain.stats import StatsMatrix
from triage_queue.infrastructure.logging_config import setup_logging
from triage_queue.infrastructure.settings import settings

logger = logging.getLogger(__name__)

# Initialize Typer app and Rich console
app = typer.Typer(
    name="triage-queue",
    help="Hospital patient triage queue",
    add_completion=False
)
console = Console()

MENU_OPTIONS = (
    ("1", "Add Patient"),
    ("2", "Serve Next Patient"),
    ("3", "Display Queue"),
    ("4", "Search (Binary by ID / Linear by Name)"),
    ("5", "Stats (Priority x Age Group)"),
    ("6", "Save to File"),
    ("7", "Load from File"),
    ("0", "Exit"),
)

# Messages for named outcomes
OUTCOME_MESSAGES = {
    "DuplicateId": "ID already exists.",
    "EmptyStore": "Queue is empty.",
    "NotFound": "Not found.",
    "CorruptHeader": "Corrupted file.",
    "UnopenableFile": "Cannot open file.",
    "InvalidRecord": "Invalid patient data.",
}


# ============================================================================
# Rendering
# ============================================================================

def format_record(record: PatientRecord) -> str:
    """One-line rendering used for served and found patients."""
    return (
        f"ID={record.patient_id} | Name={escape(record.name)} | Age={record.age} | "
        f"Priority={record.priority} | Dx={escape(record.diagnosis)} | Added: {record.arrival_display()}"
    )


def build_queue_table(records: tuple[PatientRecord, ...]) -> Table:
    """Queue table in priority order."""
    table = Table(title="Current Queue (Priority Order)", show_header=True, header_style="bold")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Age", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Diagnosis")
    table.add_column("Added")
    for record in records:
        table.add_row(
            str(record.patient_id),
            escape(record.name),
            str(record.age),
            str(record.priority),
            escape(record.diagnosis),
            record.arrival_display(),
        )
    return table


def build_stats_table(matrix: StatsMatrix) -> Table:
    """Priority x age group table."""
    table = Table(title="Stats: Priority x AgeGroup", show_header=True, header_style="bold")
    table.add_column("Priority")
    for label in matrix.column_labels:
        table.add_column(label, justify="right")
    for priority, counts in matrix.as_rows():
        table.add_row(f"Priority {priority}", *(str(c) for c in counts))
    return table


def print_failure(result: Result) -> None:
    """Render a failed Result as its operator-facing message."""
    message = OUTCOME_MESSAGES.get(result.error_type, "Operation failed.")
    console.print(f"[yellow]⚠[/yellow] {message} [dim]({escape(result.error or '')})[/dim]")


# ============================================================================
# Console input
# ============================================================================

def read_int(prompt: str, min_value: int, max_value: int) -> int:
    """Prompt until the operator enters an integer within the inclusive range."""
    while True:
        value = IntPrompt.ask(prompt, console=console)
        if min_value <= value <= max_value:
            return value
        console.print(f"[red]Out of range ({min_value}..{max_value}). Try again.[/red]")


def read_text(prompt: str) -> str:
    """Prompt for a line of text, trimmed; empty input returns ''."""
    return Prompt.ask(prompt, console=console, default="", show_default=False).strip()


# ============================================================================
# Menu actions
# ============================================================================

def add_patient_action(service: QueueService) -> None:
    patient_id = read_int(f"Enter ID ({MIN_PATIENT_ID}..{MAX_PATIENT_ID})", MIN_PATIENT_ID, MAX_PATIENT_ID)
    if service.is_registered(patient_id):
        console.print("[yellow]⚠[/yellow] ID already exists.")
        return
    name = read_text("Enter Name")
    if not name:
        console.print("[yellow]⚠[/yellow] Name cannot be empty.")
        return
    age = read_int(f"Enter Age ({MIN_AGE}..{MAX_AGE})", MIN_AGE, MAX_AGE)
    priority = read_int(
        f"Enter Priority ({MOST_URGENT_PRIORITY}=critical .. {LEAST_URGENT_PRIORITY}=low)",
        MOST_URGENT_PRIORITY,
        LEAST_URGENT_PRIORITY,
    )
    diagnosis = read_text("Enter Diagnosis")

    result = service.add_patient(patient_id, name, age, priority, diagnosis or None)
    if result.is_success():
        console.print("[green]✓[/green] Patient added to queue.")
    else:
        print_failure(result)


def serve_next_action(service: QueueService) -> None:
    result = service.serve_next()
    if result.is_success():
        console.print("\n[bold]Served Patient[/bold]")
        console.print(format_record(result.value))
    else:
        print_failure(result)


def display_queue_action(service: QueueService) -> None:
    records = service.queue()
    if not records:
        console.print("Queue is empty.")
        return
    console.print(build_queue_table(records))


def search_action(service: QueueService) -> None:
    choice = read_int("Search by: 1) ID (Binary)  2) Name (Linear)", 1, 2)
    if choice == 1:
        if not service.queue():
            console.print("Queue is empty.")
            return
        patient_id = read_int("Enter ID", MIN_PATIENT_ID, MAX_PATIENT_ID)
        result = service.search_by_id(patient_id)
    else:
        query = read_text("Enter part of name")
        result = service.search_by_name(query)

    if result.is_success():
        console.print(f"FOUND: {format_record(result.value)}")
    else:
        print_failure(result)


def stats_action(service: QueueService) -> None:
    result = service.stats()
    if result.is_success():
        console.print(build_stats_table(result.value))
    else:
        print_failure(result)


def save_action(service: QueueService) -> None:
    result = service.save()
    if result.is_success():
        console.print(f"[green]✓[/green] Saved {result.value} patients to {service.data_file}")
    else:
        print_failure(result)


def load_action(service: QueueService) -> None:
    result = service.load()
    if result.is_success():
        report = result.value
        console.print(f"[green]✓[/green] Loaded {report.loaded} patients from {service.data_file}")
        if report.skipped:
            console.print(f"[yellow]⚠[/yellow] Skipped {report.skipped} malformed line(s)")
    else:
        print_failure(result)


MENU_ACTIONS = {
    1: add_patient_action,
    2: serve_next_action,
    3: display_queue_action,
    4: search_action,
    5: stats_action,
    6: save_action,
    7: load_action,
}


def print_menu() -> None:
    console.print("\n[bold blue]Hospital Patient Queue System[/bold blue]")
    for key, label in MENU_OPTIONS:
        console.print(f"  {key}) {label}")


def run_menu(service: QueueService) -> None:
    """Interactive loop; returns when the operator chooses Exit."""
    while True:
        print_menu()
        choice = read_int("Choose", 0, len(MENU_ACTIONS))
        if choice == 0:
            break
        MENU_ACTIONS[choice](service)


# ============================================================================
# Commands
# ============================================================================

def _create_service(ctx: typer.Context) -> QueueService:
    from triage_queue.main import create_queue_service
    try:
        return create_queue_service(data_file=ctx.obj.get("data_file"))
    except (PydanticValidationError, ValueError) as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(code=1)


def _load_or_exit(service: QueueService) -> None:
    result = service.load()
    if result.is_failure():
        print_failure(result)
        raise typer.Exit(code=1)
    if result.value.skipped:
        console.print(f"[yellow]⚠[/yellow] Skipped {result.value.skipped} malformed line(s)")


@app.command()
def menu(
    ctx: typer.Context,
    autoload: bool = typer.Option(False, "--autoload", help="Load the data file before showing the menu"),
) -> None:
    """Run the interactive front-desk menu.

    Examples:
        triage-queue menu
        triage-queue --data-file ward3.txt menu --autoload
    """
    service = _create_service(ctx)
    if autoload and service.persistence.can_load(service.data_file):
        load_action(service)

    try:
        run_menu(service)
    except MemoryError:
        logger.critical("Memory allocation failed; terminating")
        console.print("[red]✗[/red] Memory allocation failed.")
        raise typer.Exit(code=1)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]⚠[/yellow] Session interrupted")
        raise typer.Exit(code=130)

    console.print("Goodbye.")


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the saved queue in priority order."""
    service = _create_service(ctx)
    _load_or_exit(service)
    display_queue_action(service)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Print priority x age group counts for the saved queue."""
    service = _create_service(ctx)
    _load_or_exit(service)
    stats_action(service)


@app.command()
def info(ctx: typer.Context) -> None:
    """Display the effective configuration."""
    service = _create_service(ctx)
    console.print("[bold blue]System Information[/bold blue]\n")

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    info_table.add_row("Version:", settings.app_version)
    info_table.add_row("Data File:", str(service.data_file))
    info_table.add_row("Initial Capacity:", str(service.store.capacity))
    info_table.add_row("Log Level:", settings.log_level)
    info_table.add_row("Log Format:", settings.log_format)
    console.print(info_table)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version information"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
    data_file: Optional[Path] = typer.Option(None, "--data-file", "-f", help="Queue data file"),
) -> None:
    """Hospital patient triage queue."""
    if version:
        console.print(f"{settings.app_name} v{settings.app_version}")
        raise typer.Exit()

    try:
        log_level = "DEBUG" if verbose else settings.log_level
        use_json = json_logs or settings.log_format == "json"
    except PydanticValidationError as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(code=1)
    setup_logging(use_json=use_json, log_level=log_level)

    ctx.obj = {"data_file": data_file}
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
