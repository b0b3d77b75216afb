"""snrsl CLI -- compile a rating specification and report on the graph."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from snrsl import __version__

console = Console()

app = typer.Typer(
    name="snrsl",
    help="snrsl -- Structured Natural Rater Specification Language compiler.",
    no_args_is_help=True,
)

def _version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        console.print(f"snrsl v{__version__}")
        raise typer.Exit()

@app.callback()
def main(
    version: Optional[bool] = typer.Option(  # noqa: N803
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """snrsl -- Structured Natural Rater Specification Language compiler."""

@app.command("compile")
def compile_command(
    path: Path = typer.Argument(..., help="CSV export of the rating specification."),
    verbose: bool = typer.Option(False, "--verbose", help="Log each compilation phase."),
) -> None:
    """Lex, parse and evaluate a specification, then print graph statistics."""
    from snrsl.core.errors import SpecError
    from snrsl.core.ingestion.pipeline import CompileResult, compile_spec
    from snrsl.core.ingestion.rows import read_csv_rows

    csv_path = path.resolve()
    if not csv_path.is_file():
        console.print(f"[red]Error:[/red] {csv_path} is not a file.")
        raise typer.Exit(code=1)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    console.print("[bold]Structured Natural Rater Specification Language[/bold]")

    result: CompileResult | None = None
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting...", total=None)

        def on_progress(phase: str, pct: float) -> None:
            progress.update(task, description=f"{phase} ({pct:.0%})")

        try:
            _, result = asyncio.run(
                compile_spec(read_csv_rows(csv_path), progress_callback=on_progress)
            )
        except SpecError as exc:
            progress.stop()
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(code=1) from exc

    console.print()
    console.print("[bold green]Compilation complete.[/bold green]")
    console.print(f"  Rows:           {result.rows}")
    console.print(f"  Nodes:          {result.nodes}")
    console.print(f"  Edges:          {result.edges}")
    console.print(f"  Questions:      {result.questions}")
    if result.collapsed > 0:
        console.print(f"  Collapsed:      {result.collapsed}")
    console.print(f"  Duration:       {result.duration_seconds:.2f}s")

    console.print()
    console.print("[bold]Graph node statistics:[/bold]")
    for node_type, count in result.types.items():
        console.print(f"  {node_type + ':':<15} {count}")

if __name__ == "__main__":
    app()
