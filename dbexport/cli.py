"""CLI entrypoint for the database exporter."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dbexport.config import (
    ExportConfig,
    LoggingConfig,
    configure_logging,
    load_export_config,
    write_template_config,
)
from dbexport.data_access.extractor import SourceExtractor
from dbexport.errors import ConfigError, ExportError
from dbexport.export import run_export

app = typer.Typer(help="Export relational databases to Parquet and DuckDB")
console = Console()

APP_NAME = "database_exporter"
DEFAULT_EXPORT_DIRECTORY = Path("./data/extracted/parquets")


def default_config_path() -> Path:
    return Path(typer.get_app_dir(APP_NAME)) / "config.yaml"


def _load_config(config_path: Optional[Path], sources: Optional[List[str]] = None) -> ExportConfig:
    """Load the config or exit; a missing file is replaced by a template first."""
    path = config_path or default_config_path()
    try:
        if not path.exists():
            write_template_config(path)
            raise ConfigError(f"Config file created at {path}. Please fill it out and try again.")
        return load_export_config(path).select(sources)
    except ConfigError as e:
        print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)


@app.callback()
def main(
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)"),
) -> None:
    configure_logging(LoggingConfig(level=log_level))


@app.command()
def export(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    export_directory: Path = typer.Option(
        DEFAULT_EXPORT_DIRECTORY, "--export-directory", "-e", help="Directory for Parquet output"
    ),
    row_limit: Optional[int] = typer.Option(
        None,
        "--row-limit",
        help="Rows per table when no override is configured (0 = schema only, negative = unlimited)",
    ),
    duckdb_path: Optional[Path] = typer.Option(
        None, "--duckdb", help="Also load every export into this DuckDB file"
    ),
    duckdb_separator: str = typer.Option(
        ".", "--duckdb-separator", help="'.' for one schema per source, or e.g. '__' to prefix table names"
    ),
    source: Optional[List[str]] = typer.Option(
        None, "--source", "-s", help="Only export these sources (repeatable)"
    ),
) -> None:
    """Export every table and custom query of the configured sources.

    Example:
        dbexport export -c config.yaml --row-limit 1000 --duckdb data/export.duckdb
    """
    cfg = _load_config(config_path, source)

    try:
        report = run_export(
            cfg,
            row_limit,
            export_directory,
            duckdb_path=duckdb_path,
            separator=duckdb_separator,
        )
    except ExportError as e:
        print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _display_table(report.summary_frame())

    if not report.success:
        print(f"[red]{report.failure_count} export(s) failed[/red]")
        raise typer.Exit(report.exit_code)

    print(f"[green]✓[/green] Exported {len(report.items)} item(s) to {export_directory}")


@app.command()
def list_tables(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    source: Optional[List[str]] = typer.Option(None, "--source", "-s", help="Only list these sources"),
) -> None:
    """Print the tables discovered in each source."""
    cfg = _load_config(config_path, source)
    failed = False
    for src in cfg.sources:
        print(f"[bold]{src.name}[/bold] ({src.database_type.value})")
        try:
            with SourceExtractor(src) as extractor:
                for table in extractor.discover_tables():
                    print(f"  {table}")
        except ExportError as e:
            print(f"  [red]Error:[/red] {escape(str(e))}")
            failed = True
    if failed:
        raise typer.Exit(1)


@app.command()
def preview(
    source: str = typer.Option(..., "--source", "-s", help="Source name"),
    table: str = typer.Option(..., "--table", "-t", help="Table to preview"),
    limit: int = typer.Option(10, help="Number of rows to show"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show the first rows of a table."""
    cfg = _load_config(config_path, [source])
    src = cfg.get_source(source)
    try:
        with SourceExtractor(src) as extractor:
            df = extractor.fetch_table(table, limit).to_pandas()
    except ExportError as e:
        print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _display_table(df)


@app.command()
def init_config(
    path: Optional[Path] = typer.Argument(None, help="Where to write the template (defaults to the user config dir)"),
    force: bool = typer.Option(False, help="Overwrite an existing file"),
) -> None:
    """Write an example configuration file."""
    target = path or default_config_path()
    if target.exists() and not force:
        print(f"[red]Error:[/red] {target} already exists (use --force to overwrite)")
        raise typer.Exit(1)
    write_template_config(target)
    print(f"Created template config at {target}")


def _display_table(df):
    """Helper to display a DataFrame as a rich table."""
    if df.columns.empty:
        print("[yellow]No results to display[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")

    for col in df.columns:
        table.add_column(str(col))

    for _, row in df.iterrows():
        table.add_row(*[escape(str(val)) for val in row])

    console.print(table)


if __name__ == "__main__":
    app()
