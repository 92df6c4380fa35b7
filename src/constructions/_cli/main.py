import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from constructions._construction import Construction
from constructions._errors import ConstructionsError, CycleDetectedError
from constructions._io import apply_values, export_to_toml, load_values_from_toml

from .config import ConfigError, ConstructionsConfig, load_config
from .discover import resolve_construction
from .query import get_dependency_tree, list_elements
from .render import render_element_table, render_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

PathArgument = Annotated[
    str | None,
    typer.Argument(help="Path to Python script or module path (e.g., examples.triangle:construction)"),
]
VariableOption = Annotated[
    str | None,
    typer.Option("--construction", help="Name of the construction variable (for script paths only)"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Constructions CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _get_config() -> ConstructionsConfig:
    """Load [tool.constructions] configuration, exiting with code 1 on failure."""
    try:
        return load_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load(path: str | None, variable: str | None, config: ConstructionsConfig | None = None) -> Construction:
    """Load the construction for a command, exiting with code 1 on failure."""
    if config is None:
        config = _get_config()

    try:
        construction = resolve_construction(path, config, variable)
    except (ImportError, ValueError, TypeError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    logger.debug("Loaded %r", construction)
    return construction


@app.command()
def show(
    path: PathArgument = None,
    *,
    variable: VariableOption = None,
) -> None:
    """Show every element with its requirements and value, in dependency order."""
    construction = _load(path, variable)

    try:
        elements = list_elements(construction)
    except CycleDetectedError:
        err_console.print(f"[red]{escape(construction.describe())}[/red]")
        raise typer.Exit(code=1) from None

    render_element_table(elements, out_console)


@app.command()
def order(
    path: PathArgument = None,
    *,
    variable: VariableOption = None,
) -> None:
    """Print element names in dependency order, one per line."""
    construction = _load(path, variable)

    try:
        names = construction.order()
    except CycleDetectedError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    for name in names:
        out_console.print(name, markup=False, highlight=False)


@app.command()
def tree(
    name: Annotated[str, typer.Argument(help="Name of the element at the root of the tree")],
    path: PathArgument = None,
    *,
    variable: VariableOption = None,
    dependents: Annotated[
        bool,
        typer.Option("--dependents", help="Show what requires the element instead of what it requires"),
    ] = False,
    depth: Annotated[
        int | None,
        typer.Option("--depth", help="Maximum depth of the tree"),
    ] = None,
) -> None:
    """Show the dependency tree of an element."""
    construction = _load(path, variable)

    try:
        tree_node = get_dependency_tree(construction, name, dependents=dependents, max_depth=depth)
    except ConstructionsError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    render_tree(tree_node, out_console)


@app.command()
def check(
    path: PathArgument = None,
    *,
    variable: VariableOption = None,
) -> None:
    """Check that the construction's dependency links are consistent and acyclic."""
    err_console.print()
    construction = _load(path, variable)

    err_console.print("[cyan]Validating dependencies...[/cyan]")
    errors = construction.validate()

    if errors:
        err_console.print(
            Panel(
                "\n".join(escape(error) for error in errors),
                title="[bold]Construction is inconsistent[/bold]",
                border_style="red",
            ),
        )
        raise typer.Exit(code=1)

    err_console.print(f"[green]✓ Construction is valid ({len(construction)} elements)[/green]")
    err_console.print()


@app.command()
def calc(
    path: PathArgument = None,
    *,
    variable: VariableOption = None,
    input: Annotated[  # noqa: A002
        Path | None,
        typer.Option("-i", "--input", help="Path to input TOML file with placed values"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
) -> None:
    """Apply placed values from a TOML file, recompute, and export every value."""
    err_console.print()

    config = _get_config()

    effective_input = input if input is not None else config.input
    effective_output = output if output is not None else config.output
    if effective_output is None:
        err_console.print(
            "[red]Error: Output file required. Use -o/--output or configure \\[tool.constructions].output[/red]",
        )
        raise typer.Exit(code=1)

    construction = _load(path, variable, config)

    try:
        if effective_input is not None:
            err_console.print(f"[cyan]Loading input from:[/cyan] {effective_input}")
            applied = apply_values(construction, load_values_from_toml(effective_input))
            err_console.print(f"[cyan]Applied {len(applied)} values[/cyan]")

        err_console.print(f"[cyan]Exporting values to:[/cyan] {effective_output}")
        effective_output.parent.mkdir(parents=True, exist_ok=True)
        export_to_toml(construction, effective_output)
    except (ConstructionsError, ValidationError) as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    err_console.print()
    err_console.print("[green]✓ Calculation complete[/green]")
    err_console.print()


def main() -> None:
    app()
