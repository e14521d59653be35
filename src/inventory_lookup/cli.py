"""CLI entry point for inventory-lookup."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import cast

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table as RichTable

from inventory_lookup import FIELDS, __version__
from inventory_lookup.config import (
    DEFAULT_SOURCE,
    LookupOptions,
    Variant,
    load_alias_profile,
    options_for,
    parse_alias_entries,
)
from inventory_lookup.display import detail_panel, result_cards, status_line
from inventory_lookup.io import read_source, write_json, write_rows
from inventory_lookup.models import LoadReport, Row
from inventory_lookup.session import InventorySession

app = typer.Typer(
    name="invlookup",
    help="inventory-lookup — Find where incoming stock is stored, straight from a spreadsheet.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)

SOURCE_ENVVAR = "INVLOOKUP_SOURCE"
BROWSE_HELP = "Type to search. Commands: :open N, :load SOURCE, :reset, :help, :quit"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"inventory-lookup v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_options(
    *,
    variant: Variant,
    limit: int | None,
    drop_blank_rows: bool | None,
    strip_spaces: bool | None,
    aliases: list[str] | None,
    profile: Path | None,
) -> LookupOptions:
    """Start from the variant preset and apply explicit overrides."""
    options = options_for(variant)
    if limit is not None:
        options = options.replace(limit=limit or None)
    if drop_blank_rows is not None:
        options = options.replace(drop_blank_rows=drop_blank_rows)
    if strip_spaces is not None:
        options = options.replace(strip_internal_whitespace=strip_spaces)
    extra = parse_alias_entries(load_alias_profile(profile) + (aliases or []))
    return options.with_aliases(extra)


def _options_or_exit(**kwargs: object) -> LookupOptions:
    try:
        return _build_options(**kwargs)  # type: ignore[arg-type]
    except ValueError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _load(session: InventorySession, source: str) -> bool:
    logger.info("Loading %s", source)
    return session.load(lambda: read_source(source), source=source)


def _show_results(results: list[Row], query: str) -> None:
    if not query.strip():
        return
    if not results:
        console.print("No results.")
        return
    console.print(result_cards(results))


# ── Shared options ───────────────────────────────────────────────

_SOURCE_HELP = "Workbook to load: an http(s) URL or a local .xlsx path."
_VARIANT_HELP = "Preset: 'auto' (fixed source, blank rows dropped, 120 cap) or 'upload'."
_LIMIT_HELP = "Maximum number of results (0 = no cap). Defaults to the preset."
_BLANK_HELP = "Drop rows with no company, product or storage bin. Defaults to the preset."
_SPACES_HELP = "Ignore spaces inside names when matching. Defaults to the preset."
_ALIAS_HELP = "Extra header alias: field=Header (e.g. --alias company=Vendor)."
_PROFILE_HELP = "File of field=Header alias lines."


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log ingestion details.",
    ),
) -> None:
    """inventory-lookup CLI."""
    _configure_logging(verbose)


# ── search command ───────────────────────────────────────────────


@app.command()
def search(
    query: str = typer.Argument(..., help="Company or product name fragment."),
    source: str = typer.Option(
        DEFAULT_SOURCE, "--source", "-s", envvar=SOURCE_ENVVAR, help=_SOURCE_HELP,
    ),
    variant: Variant = typer.Option(Variant.auto, "--variant", help=_VARIANT_HELP),
    limit: int | None = typer.Option(None, "--limit", "-n", min=0, help=_LIMIT_HELP),
    drop_blank_rows: bool | None = typer.Option(
        None, "--drop-blank-rows/--keep-blank-rows", help=_BLANK_HELP,
    ),
    strip_spaces: bool | None = typer.Option(
        None, "--strip-spaces/--keep-spaces", help=_SPACES_HELP,
    ),
    aliases: list[str] | None = typer.Option(None, "--alias", "-a", help=_ALIAS_HELP),
    profile: Path | None = typer.Option(None, "--profile", help=_PROFILE_HELP),
    open_index: int | None = typer.Option(
        None, "--open", min=1,
        help="Show the detail panel for result number N.",
    ),
    json_out: Path | None = typer.Option(
        None, "--json",
        help="Also write the matching rows to this JSON file.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress the status line; still prints results.",
    ),
) -> None:
    """Load the workbook and list rows whose company or product matches QUERY."""
    echo = _printer(quiet)
    options = _options_or_exit(
        variant=variant,
        limit=limit,
        drop_blank_rows=drop_blank_rows,
        strip_spaces=strip_spaces,
        aliases=aliases,
        profile=profile,
    )
    session = InventorySession(options, variant)

    if not _load(session, source):
        _err(session.message)
        raise typer.Exit(code=2)
    echo(session.message)

    results = session.set_query(query)
    if query.strip() and not quiet:
        console.print(f"Search results: [bold]{len(results)}[/bold]")
    _show_results(results, query)

    if json_out is not None:
        path = write_rows(json_out, results)
        echo(f"  Matches -> {path}")

    if open_index is not None:
        try:
            row = session.select(open_index - 1)
        except IndexError as exc:
            _err(str(exc))
            raise typer.Exit(code=2)
        console.print(detail_panel(row))


# ── validate command ─────────────────────────────────────────────


@app.command()
def validate(
    source: str = typer.Option(
        DEFAULT_SOURCE, "--source", "-s", envvar=SOURCE_ENVVAR, help=_SOURCE_HELP,
    ),
    variant: Variant = typer.Option(Variant.auto, "--variant", help=_VARIANT_HELP),
    drop_blank_rows: bool | None = typer.Option(
        None, "--drop-blank-rows/--keep-blank-rows", help=_BLANK_HELP,
    ),
    aliases: list[str] | None = typer.Option(None, "--alias", "-a", help=_ALIAS_HELP),
    profile: Path | None = typer.Option(None, "--profile", help=_PROFILE_HELP),
    out_dir: Path | None = typer.Option(
        None, "--out-dir", "-o",
        help="Write load_report.json into this directory.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress the summary table.",
    ),
) -> None:
    """Load the workbook and report which headers resolved.

    Exit 0 = OK, exit 2 = load failure or no recognizable headers.
    """
    options = _options_or_exit(
        variant=variant,
        limit=None,
        drop_blank_rows=drop_blank_rows,
        strip_spaces=None,
        aliases=aliases,
        profile=profile,
    )
    session = InventorySession(options, variant)
    if not _load(session, source):
        _err(session.message)
        raise typer.Exit(code=2)

    report = cast(LoadReport, session.report)
    unusable = len(report.missing_fields) == len(FIELDS)

    if not quiet:
        tbl = RichTable(title="Load Summary", show_lines=True)
        tbl.add_column("Check", style="bold")
        tbl.add_column("Result")
        tbl.add_row("Sheet", report.sheet_name)
        tbl.add_row("Rows in", str(report.rows_in))
        tbl.add_row("Rows out", str(report.rows_out))
        tbl.add_row("Dropped", str(report.dropped_rows))
        if report.missing_fields:
            tbl.add_row("Missing fields", ", ".join(report.missing_fields))
        else:
            tbl.add_row("Missing fields", "[green]none[/green]")
        for w in report.warnings:
            tbl.add_row("Warning", f"[yellow]{w}[/yellow]")
        tbl.add_row("Status", "[red]FAIL[/red]" if unusable else "[green]PASS[/green]")
        console.print(tbl)

    if out_dir is not None:
        report_path = write_json(out_dir / "load_report.json", report.to_dict())
        console.print(f"  Load report -> {report_path}")

    if unusable:
        _err("No recognizable headers in the first sheet")
        console.print(f"  Expected one of each: {', '.join(FIELDS)}")
        console.print("  Hint: use --alias field=Header to add header names")
        raise typer.Exit(code=2)


# ── browse command ───────────────────────────────────────────────


def _browse_command(session: InventorySession, line: str) -> bool:
    """Handle a ``:command`` line. Returns False when browsing should stop."""
    name, _, arg = line[1:].strip().partition(" ")
    arg = arg.strip()
    if name in {"q", "quit", "exit"}:
        return False
    if name in {"h", "help"}:
        console.print(BROWSE_HELP)
    elif name == "open":
        try:
            row = session.select(int(arg) - 1)
        except ValueError:
            _err(f"Not a result number: {arg!r}")
        except IndexError as exc:
            _err(str(exc))
        else:
            console.print(detail_panel(row))
    elif name == "load":
        if not arg:
            _err("Usage: :load SOURCE")
        elif _load(session, arg):
            console.print(session.message)
        else:
            _err(session.message)
    elif name == "reset":
        session.reset()
        console.print("Cleared.")
    else:
        _err(f"Unknown command: {line}")
    return True


@app.command()
def browse(
    source: str | None = typer.Option(
        None, "--source", "-s", envvar=SOURCE_ENVVAR,
        help=_SOURCE_HELP + f" The auto preset falls back to {DEFAULT_SOURCE}.",
    ),
    variant: Variant = typer.Option(Variant.auto, "--variant", help=_VARIANT_HELP),
    limit: int | None = typer.Option(None, "--limit", "-n", min=0, help=_LIMIT_HELP),
    drop_blank_rows: bool | None = typer.Option(
        None, "--drop-blank-rows/--keep-blank-rows", help=_BLANK_HELP,
    ),
    strip_spaces: bool | None = typer.Option(
        None, "--strip-spaces/--keep-spaces", help=_SPACES_HELP,
    ),
    aliases: list[str] | None = typer.Option(None, "--alias", "-a", help=_ALIAS_HELP),
    profile: Path | None = typer.Option(None, "--profile", help=_PROFILE_HELP),
) -> None:
    """Interactive lookup: every line you type is a new search."""
    options = _options_or_exit(
        variant=variant,
        limit=limit,
        drop_blank_rows=drop_blank_rows,
        strip_spaces=strip_spaces,
        aliases=aliases,
        profile=profile,
    )
    session = InventorySession(options, variant)
    if source is None and variant is Variant.auto:
        source = DEFAULT_SOURCE

    console.print(Panel(
        f"[bold]inventory-lookup[/bold] v{__version__}  [dim]{variant.value} mode[/dim]\n"
        f"{BROWSE_HELP}",
        title="Browse", border_style="blue",
    ))
    if source:
        if _load(session, source):
            console.print(session.message)
        else:
            _err(session.message)

    while True:
        try:
            line = console.input(f"[bold]{status_line(session.status, len(session.rows))}>[/bold] ")
        except EOFError:
            break
        line = line.strip()
        if line.startswith(":"):
            if not _browse_command(session, line):
                break
            continue
        if not session.search_enabled:
            _err("No data loaded. Use :load SOURCE")
            continue
        results = session.set_query(line)
        if line:
            console.print(f"Search results: [bold]{len(results)}[/bold]")
        _show_results(results, line)
