"""
CoronaDB CLI

Command line interface: create databases from CSV files and inspect them
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from coronadb.core import CoronaDBError, get_config, get_logger

app = typer.Typer(
    name="coronadb",
    help="CoronaDB - COVID-19 case numbers from CSV files into SQLite",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def _fail(action: str, error: Exception) -> None:
    err_console.print(f"[bold red]✗ {action}: {escape(str(error))}[/bold red]")
    raise typer.Exit(1)


@app.command()
def version():
    """Show the version"""
    from coronadb import __version__
    console.print(f"[bold cyan]CoronaDB[/bold cyan] [green]v{__version__}[/green]")


@app.command()
def config():
    """Show the current configuration"""
    cfg = get_config()

    table = Table(title="CoronaDB configuration", show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan", width=30)
    table.add_column("Value", style="white")

    table.add_row("Application", cfg.app_name)
    table.add_row("Version", cfg.version)
    table.add_row("Environment", cfg.app_env)
    table.add_row("Log level", cfg.log_level)
    table.add_row("Log directory", str(cfg.log_dir) if cfg.log_to_file else "✗ disabled")
    table.add_row("", "")
    table.add_row("SQL echo", "✓" if cfg.database.echo else "✗")
    table.add_row("SQLite timeout", f"{cfg.database.sqlite_timeout}s")
    table.add_row("", "")
    table.add_row("WHO date offset", f"{cfg.ingest.who_date_offset_days} days")
    table.add_row("World regression window", f"{cfg.ingest.world_regression_window} days")
    table.add_row("Drop future dates", "✓" if cfg.ingest.drop_future_dates else "✗")
    table.add_row("Fill missing dates", "✓" if cfg.ingest.fill_missing_dates else "✗")
    table.add_row("Max. gap", f"{cfg.ingest.max_gap_days} days")

    console.print(table)


@app.command()
def detect(
    csv_file: Path = typer.Argument(..., help="CSV file"),
):
    """Detect the format of a CSV file"""
    from coronadb.data import CsvFormat, detect_format

    try:
        csv_format = detect_format(csv_file)
    except CoronaDBError as e:
        _fail("Detection failed", e)

    if csv_format == CsvFormat.UNRECOGNIZED:
        err_console.print(f"[bold red]✗ Unknown CSV format: {escape(str(csv_file))}[/bold red]")
        raise typer.Exit(1)
    console.print(f"[green]{csv_format.value}[/green] ({csv_format.label})")


@app.command()
def db(
    input_csv: Path = typer.Argument(..., help="CSV file (ECDC, OWID, OWID ETL compact or WHO)"),
    output_db: Path = typer.Argument(..., help="SQLite database to create"),
):
    """Create a SQLite database from a CSV file"""
    from coronadb.data.processors import create_database

    console.print(f"[bold yellow]Creating {escape(str(output_db))} from {escape(str(input_csv))}...[/bold yellow]")
    try:
        summary = create_database(input_csv, output_db)
    except CoronaDBError as e:
        _fail("Database creation failed", e)

    console.print(
        f"[bold green]✓ {summary.countries} countries, {summary.records} records "
        f"({summary.csv_format.label})[/bold green]"
    )
    if summary.skipped:
        skipped = ", ".join(f"{reason}: {count}" for reason, count in sorted(summary.skipped.items()))
        console.print(f"  Skipped rows: {skipped}")
    if summary.unknown_countries:
        console.print(f"  [yellow]Countries missing in the gazetteer: {summary.unknown_countries}[/yellow]")


@app.command()
def csv(
    database: Path = typer.Argument(..., help="SQLite database"),
    output_csv: Path = typer.Argument(..., help="CSV file to create"),
):
    """Export a database as CSV in the ECDC layout"""
    from coronadb.export import CsvExporter
    from coronadb.storage import CovidDatabase

    try:
        with CovidDatabase.open(database) as covid_db:
            rows = CsvExporter(covid_db).export(output_csv)
    except CoronaDBError as e:
        _fail("CSV export failed", e)

    console.print(f"[bold green]✓ {rows} rows written to {escape(str(output_csv))}[/bold green]")


@app.command()
def backfill(
    database: Path = typer.Argument(..., help="SQLite database"),
):
    """Add the columns of accumulated numbers to an older database"""
    from coronadb.storage import CovidDatabase

    try:
        with CovidDatabase.open(database) as covid_db:
            added = covid_db.backfill_totals()
    except CoronaDBError as e:
        _fail("Backfill failed", e)

    if added:
        console.print(f"[bold green]✓ Added columns: {', '.join(added)}[/bold green]")
    else:
        console.print("[green]✓ Columns for accumulated numbers already exist[/green]")


@app.command()
def countries(
    database: Path = typer.Argument(..., help="SQLite database"),
    continent: Optional[str] = typer.Option(None, help="Only countries of this continent"),
):
    """List the countries of a database"""
    from coronadb.storage import CovidDatabase

    try:
        with CovidDatabase.open(database) as covid_db:
            if continent:
                rows = covid_db.countries_of_continent(continent)
            else:
                rows = covid_db.countries()
    except CoronaDBError as e:
        _fail("Reading countries failed", e)

    table = Table(title=f"Countries ({len(rows)})", show_header=True, header_style="bold magenta")
    table.add_column("Id", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Alpha-2")
    table.add_column("Alpha-3")
    table.add_column("Population", justify="right")
    table.add_column("Continent")
    for country in rows:
        table.add_row(
            str(country.country_id),
            country.name,
            country.iso_alpha2,
            country.iso_alpha3,
            str(country.population) if country.population > 0 else "unknown",
            country.continent,
        )
    console.print(table)


@app.command()
def world(
    database: Path = typer.Argument(..., help="SQLite database"),
    days: int = typer.Option(14, help="Number of most recent days to show"),
    accumulated: bool = typer.Option(False, help="Show totals instead of daily numbers"),
):
    """Show the worldwide numbers of the most recent days"""
    from coronadb.storage import CovidDatabase

    try:
        with CovidDatabase.open(database) as covid_db:
            numbers = covid_db.accumulated_numbers_world() if accumulated else covid_db.numbers_world()
    except CoronaDBError as e:
        _fail("Reading world numbers failed", e)

    title = "Accumulated numbers worldwide" if accumulated else "Numbers worldwide"
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Cases", justify="right")
    table.add_column("Deaths", justify="right")
    for number in numbers[-days:] if days > 0 else numbers:
        table.add_row(number.date, str(number.cases), str(number.deaths))
    console.print(table)


if __name__ == "__main__":
    app()
