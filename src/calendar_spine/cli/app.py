"""
Root Typer application for the calendar-spine CLI.

Commands:
    preview        Load a JSON task document and print the calendar the
                   engine would render (view, rows, events, notices)
    resolve-view   Print the view/detail decision for a range
"""

from __future__ import annotations

import asyncio
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path

import typer
from pydantic import ValidationError
from typer import Typer

from calendar_spine import __version__
from calendar_spine.cli.utils import console, fail, output_json, print_dict, print_table
from calendar_spine.core.cache import FileCache
from calendar_spine.core.enums import Detail, GroupBy, ViewId
from calendar_spine.core.errors import CalendarError, ConfigError
from calendar_spine.core.logging import configure_logging
from calendar_spine.core.settings import CalendarSettings, get_settings
from calendar_spine.core.timestamps import to_instant
from calendar_spine.production.file_service import JsonFileTaskService
from calendar_spine.production.orchestrator import RangeOrchestrator
from calendar_spine.production.persistence import DateRangeStore
from calendar_spine.production.views import ViewResolver

app = Typer(
    name="calendar-spine",
    help="calendar-spine — date-range resolution and event projection for production scheduling.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("calendar-spine")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"calendar-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """calendar-spine CLI — preview production calendars from task documents."""


# ── Helpers ──────────────────────────────────────────────────────────────


def _load_settings(verbose: bool) -> CalendarSettings:
    try:
        settings = get_settings()
    except ValidationError as exc:
        error = ConfigError("Invalid CALENDAR_* settings", cause=exc)
        fail(f"{error.message}: {exc}", code=error.category.value)
    configure_logging(
        level="DEBUG" if verbose else "WARNING",
        json_format=settings.log_format == "json",
    )
    return settings


async def _build_preview(
    document: Path,
    settings: CalendarSettings,
    *,
    start: str | None,
    end: str | None,
    detail: Detail | None,
    group_by: GroupBy | None,
    view: ViewId | None,
    workstation_colors: bool,
    editable: bool,
    persist: bool,
) -> RangeOrchestrator:
    store = None
    if persist:
        store = DateRangeStore(
            FileCache(settings.store_path),
            key=settings.range_persistence_key,
            ttl_seconds=settings.range_persistence_ttl_seconds,
        )

    orchestrator = RangeOrchestrator(JsonFileTaskService(document), settings=settings, store=store)
    await orchestrator.start()
    if detail is not None:
        await orchestrator.change_detail(detail)
    if group_by is not None:
        await orchestrator.change_group_by(group_by)
    if workstation_colors:
        await orchestrator.set_workstation_colors(True)
    if not editable:
        await orchestrator.set_editable(False)
    if start is not None and end is not None:
        await orchestrator.apply_custom_range(start, end)
    if view is not None:
        await orchestrator.select_view(view)
    return orchestrator


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("preview")
def preview(
    document: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON task document."),
    start: str | None = typer.Option(None, "--start", "-s", help="Custom range start (ISO date)."),
    end: str | None = typer.Option(None, "--end", "-e", help="Custom range end (ISO date)."),
    detail: Detail | None = typer.Option(None, "--detail", "-d", case_sensitive=False),
    group_by: GroupBy | None = typer.Option(None, "--group-by", "-g", case_sensitive=False),
    view: ViewId | None = typer.Option(None, "--view"),
    workstation_colors: bool = typer.Option(False, "--workstation-colors", help="Colour events by workstation."),
    editable: bool = typer.Option(True, "--editable/--read-only"),
    persist: bool = typer.Option(False, "--persist", help="Save/restore the custom range in the data dir."),
    json_out: bool = typer.Option(False, "--json"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Project a task document onto the calendar."""
    if (start is None) != (end is None):
        fail("--start and --end must be given together", code="VALIDATION")

    settings = _load_settings(verbose)
    orchestrator = asyncio.run(
        _build_preview(
            document,
            settings,
            start=start,
            end=end,
            detail=detail,
            group_by=group_by,
            view=view,
            workstation_colors=workstation_colors,
            editable=editable,
            persist=persist,
        )
    )

    payload = {
        "view_config": orchestrator.view_config.to_dict(),
        "resources": [r.to_dict() for r in orchestrator.resources],
        "events": [e.to_dict() for e in orchestrator.events],
        "notices": [n.to_dict() for n in orchestrator.drain_notices()],
        "stats": orchestrator.stats.to_dict(),
    }
    if json_out:
        output_json(payload)
        return

    print_dict(payload["view_config"], title="View")
    print_table(
        [{"id": r["id"], "title": r["title"]} for r in payload["resources"]],
        title="Resources",
        empty="No resources.",
    )
    print_table(
        [
            {
                "id": e["id"],
                "title": e["title"],
                "start": e["start"],
                "end": e["end"],
                "resource": e["resource_id"],
                "color": e["color"],
                "editable": e["editable"],
            }
            for e in payload["events"]
        ],
        title="Events",
        empty="No events.",
    )
    for notice in payload["notices"]:
        console.print(f"[yellow]{notice['level']}[/yellow]: {notice['message']}")


@app.command("resolve-view")
def resolve_view(
    start: str = typer.Option(..., "--start", "-s", help="Range start (ISO date or datetime)."),
    end: str = typer.Option(..., "--end", "-e", help="Range end (ISO date or datetime)."),
    detail: Detail = typer.Option(Detail.DAY, "--detail", "-d", case_sensitive=False),
    clamp: bool = typer.Option(False, "--clamp", help="Clamp oversized hourly ranges instead of downgrading."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show which view and slot size a range and detail resolve to."""
    settings = _load_settings(verbose=False)
    resolver = ViewResolver(max_days_for_hourly_view=settings.max_days_for_hourly_view)
    try:
        resolution = resolver.resolve(to_instant(start), to_instant(end), detail, clamp=clamp)
    except CalendarError as exc:
        fail(exc.message, code=exc.category.value)

    data = resolver.view_config(resolution).to_dict()
    data.update(
        range_days=resolution.range_days,
        downgraded=resolution.downgraded,
        clamped=resolution.clamped,
    )
    if json_out:
        output_json(data)
        return
    print_dict(data, title="Resolved view")


if __name__ == "__main__":
    app()
