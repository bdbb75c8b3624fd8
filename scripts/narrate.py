"""CLI for narrating recorded cell snapshots.

Usage (uv):
  uv run python -m scripts.narrate narrate --cells logs/cells.jsonl --catalogue data/catalogue.json
"""
from __future__ import annotations

import json
from pathlib import Path

import typer

from chemnarrate.config import get_settings
from chemnarrate.inspector import inspect_cell
from chemnarrate.logging_utils import (
    JsonlNarrationLogger,
    configure_logging,
    log_narration,
    read_cell_snapshots,
)
from chemnarrate.narration import TileNarrator
from chemnarrate.registry import CatalogueError, load_catalogue
from chemnarrate.types import Cell

app = typer.Typer(add_completion=False, help="Narrate chemistry simulation cells")


def _load(cells_path: Path, catalogue_path: Path | None) -> tuple[list[Cell], TileNarrator]:
    settings = get_settings()
    configure_logging(settings.log_level)
    catalogue = catalogue_path or settings.catalogue_path
    if catalogue is None:
        typer.echo("No catalogue given (use --catalogue or set CATALOGUE_PATH)", err=True)
        raise typer.Exit(code=1)
    try:
        materials, reactions = load_catalogue(catalogue)
    except CatalogueError as e:
        typer.echo(f"Could not load catalogue: {e}", err=True)
        raise typer.Exit(code=1)

    cells = read_cell_snapshots(cells_path)
    if not cells:
        typer.echo(f"No cell snapshots found at {cells_path}")
        raise typer.Exit(code=0)
    return cells, TileNarrator(materials, reactions)


def _cell_title(cell: Cell, index: int) -> str:
    return f"Cell {cell.cell_id if cell.cell_id is not None else index}"


@app.command()
def narrate(
    cells: Path = typer.Option(..., "--cells", help="Path to JSONL cell snapshots"),
    catalogue: Path | None = typer.Option(None, "--catalogue", help="Path to JSON reaction/material catalogue"),
    log_path: Path | None = typer.Option(None, "--log-path", help="Append narration rows to this JSONL file"),
) -> None:
    """Print the narration lines for every cell snapshot."""
    snapshots, narrator = _load(cells, catalogue)

    settings = get_settings()
    if log_path is None and settings.log_narration:
        log_path = settings.narration_log_path
    narration_logger = JsonlNarrationLogger(log_path) if log_path is not None else None

    for idx, cell in enumerate(snapshots):
        lines = narrator.narrate_tile(cell)
        typer.echo(_cell_title(cell, idx))
        for line in lines:
            typer.echo(f"  {line}")
        typer.echo("")
        if narration_logger is not None:
            last_time = cell.history[-1].time if cell.history else None
            log_narration(narration_logger, cell, lines, narrator.production_insight_records(cell), time=last_time)


@app.command()
def insights(
    cells: Path = typer.Option(..., "--cells", help="Path to JSONL cell snapshots"),
    catalogue: Path | None = typer.Option(None, "--catalogue", help="Path to JSON reaction/material catalogue"),
) -> None:
    """Print production insights as compact JSON, one record per line."""
    snapshots, narrator = _load(cells, catalogue)
    for cell in snapshots:
        for record in narrator.production_insight_records(cell):
            row = record.to_dict()
            row["cell_id"] = cell.cell_id
            typer.echo(json.dumps(row, separators=(",", ":")))


@app.command()
def inspect(
    cells: Path = typer.Option(..., "--cells", help="Path to JSONL cell snapshots"),
    catalogue: Path | None = typer.Option(None, "--catalogue", help="Path to JSON reaction/material catalogue"),
) -> None:
    """Print inspector records (stats, reactions, species bags) per cell."""
    snapshots, narrator = _load(cells, catalogue)
    for cell in snapshots:
        typer.echo(json.dumps(inspect_cell(cell, narrator.materials), ensure_ascii=False))


if __name__ == "__main__":  # pragma: no cover
    app()
