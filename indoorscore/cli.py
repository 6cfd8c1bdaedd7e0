"""
indoorscore CLI.

Command-line interface for indoor coverage and navigability scoring of
OSM indoor (SIT) GeoJSON data.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis.conformity import StaticConformityAnalyzer
from .core.config import settings
from .core.models import Feature
from .geometry.coverage import CoverageCalculator
from .ingest.geojson_store import GeoJSONSpatialStore
from .navigation.graph_builder import ConnectivityGraphBuilder
from .navigation.reachability import ReachabilityAnalyzer
from .orchestrator.multi_building import MultiBuildingAnalyzer
from .utils.logging_config import setup_logging
from .utils.validation import ContractViolation

app = typer.Typer(
    name="indoorscore",
    help="indoorscore - Indoor coverage and navigability of OSM buildings",
    add_completion=False,
)
console = Console()


@app.callback()
def main_callback(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Log level"),
    log_file: bool = typer.Option(
        False, "--log-file/--no-log-file", help="Also write JSON log lines to INDOORSCORE_LOG_DIR"
    ),
):
    setup_logging(level=log_level, log_to_file=log_file)


def _load_store(geojson: Path) -> GeoJSONSpatialStore:
    try:
        return GeoJSONSpatialStore.from_file(geojson)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not load {geojson}: {e}[/red]")
        raise typer.Exit(code=1)


def _select_building(store: GeoJSONSpatialStore, building_id: str) -> Feature:
    feature = store.find_feature(building_id)
    if feature is None or not feature.is_building:
        console.print(f"[red]No building with id {building_id}[/red]")
        known = [b.id for b in store.get_buildings()]
        if known:
            console.print(f"[dim]Buildings: {', '.join(known)}[/dim]")
        raise typer.Exit(code=1)
    return feature


def _pct(value: float) -> str:
    return f"{value:.2f}%"


@app.command()
def analyze(
    geojson: Path = typer.Argument(..., exists=True, dir_okay=False, help="GeoJSON FeatureCollection"),
    building: Optional[List[str]] = typer.Option(
        None, "--building", "-b", help="Building id (repeatable, default: all buildings)"
    ),
    conformity: Optional[Path] = typer.Option(
        None, "--conformity", "-c", exists=True, dir_okay=False, help="Conformity JSON keyed by building id"
    ),
    workers: int = typer.Option(settings.max_workers, "--workers", "-w", min=1, help="Worker threads"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """
    Score every building: coverage, conformity, accessibility, reachability.
    """
    store = _load_store(geojson)
    buildings = [_select_building(store, b) for b in building] if building else None

    try:
        analyzer = (
            StaticConformityAnalyzer.from_file(conformity) if conformity else StaticConformityAnalyzer()
        )
        state = MultiBuildingAnalyzer(store, analyzer).analyze_buildings(buildings, max_workers=workers)
    except (ContractViolation, json.JSONDecodeError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(state.to_dict(), indent=2))
        return

    console.print(Panel.fit(
        "[bold blue]indoorscore[/bold blue]\n"
        f"{geojson.name}: {len(state.building_scores)} buildings",
        border_style="blue"
    ))

    table = Table(title="Building Scores")
    table.add_column("Building", style="cyan")
    table.add_column("Coverage", justify="right")
    table.add_column("Conformity", justify="right")
    table.add_column("Accessibility", justify="right")
    table.add_column("Reachability", justify="right")
    table.add_column("Color")

    colors = {c.id: c for c in state.colors}
    for building_id, score in state.building_scores.items():
        color = colors[building_id]
        table.add_row(
            building_id,
            _pct(score.coverage),
            _pct(score.conformity),
            _pct(score.accessibility),
            _pct(score.reachability),
            f"[{color.color}]■[/{color.color}] {color.color}",
        )
    console.print(table)

    g = state.global_percentages
    console.print(
        f"\n[bold]Global:[/bold] coverage {_pct(g['coverage'])}, conformity {_pct(g['conformity'])}, "
        f"accessibility {_pct(g['accessibility'])}, reachability {_pct(g['reachability'])}"
    )
    for building_id, error in state.failed.items():
        console.print(f"[yellow]Failed {building_id}: {error}[/yellow]")


@app.command()
def coverage(
    geojson: Path = typer.Argument(..., exists=True, dir_okay=False, help="GeoJSON FeatureCollection"),
    building: str = typer.Option(..., "--building", "-b", help="Building id"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """
    Per-level coverage of a building by tagged rooms, areas and corridors.
    """
    store = _load_store(geojson)
    feature = _select_building(store, building)
    result = CoverageCalculator(store).compute(feature, store.get_building_levels(feature))

    if as_json:
        typer.echo(json.dumps({
            "building_id": feature.id,
            "building_percent": result.building_percent,
            "levels": [
                {
                    "level": lc.level,
                    "percent": lc.percent,
                    "footprint_area_m2": lc.footprint_area_m2,
                    "room_area_m2": lc.room_area_m2,
                }
                for lc in result.levels
            ],
        }, indent=2))
        return

    table = Table(title=f"Coverage: {feature.id}")
    table.add_column("Level", style="cyan")
    table.add_column("Footprint", justify="right")
    table.add_column("Tagged", justify="right")
    table.add_column("Coverage", justify="right")
    for lc in result.levels:
        table.add_row(
            str(lc.level),
            f"{lc.footprint_area_m2:,.0f} m²",
            f"{lc.room_area_m2:,.0f} m²",
            _pct(lc.percent),
        )
    console.print(table)
    console.print(f"[bold]Building:[/bold] {_pct(result.building_percent)}")


@app.command()
def reach(
    geojson: Path = typer.Argument(..., exists=True, dir_okay=False, help="GeoJSON FeatureCollection"),
    building: str = typer.Option(..., "--building", "-b", help="Building id"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """
    Reachability of a building's rooms and levels from the outside.
    """
    store = _load_store(geojson)
    feature = _select_building(store, building)
    connectivity = ConnectivityGraphBuilder(store).build_for_building(feature)
    analyzer = ReachabilityAnalyzer(connectivity)
    issues = analyzer.navigation_issues()

    metrics = {
        "reachable_percent": analyzer.reachable_percent() * 100,
        "reachable_levels_percent": analyzer.reachable_levels_percent() * 100,
        "rooms_with_doors_percent": analyzer.rooms_with_doors_percent() * 100,
        "building_entrance": analyzer.check_building_entrance(),
        "entrance_connected": analyzer.has_entrance_connection(),
    }

    if as_json:
        typer.echo(json.dumps({
            "building_id": feature.id,
            **metrics,
            "rooms": [entry.to_dict() for entry in analyzer.room_list()],
            "issues": [{"code": i.code, "subject_ids": list(i.subject_ids)} for i in issues],
        }, indent=2))
        return

    table = Table(title=f"Reachability: {feature.id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Reachable areas", _pct(metrics["reachable_percent"]))
    table.add_row("Reachable levels", _pct(metrics["reachable_levels_percent"]))
    table.add_row("Rooms with doors", _pct(metrics["rooms_with_doors_percent"]))
    table.add_row("Entrance connected", "Yes" if metrics["entrance_connected"] else "No")
    console.print(table)

    if issues:
        console.print("\n[bold]Issues:[/bold]")
        for issue in issues:
            console.print(f"  [yellow]{issue.code}[/yellow] {', '.join(str(s) for s in issue.subject_ids)}")
    else:
        console.print("\n[green]No navigation issues[/green]")


@app.command()
def version():
    """Show version information."""
    from . import __version__
    console.print(f"indoorscore v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
