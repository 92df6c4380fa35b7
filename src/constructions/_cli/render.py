"""Rich rendering utilities for construction commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from constructions._elements import ElementKind

if TYPE_CHECKING:
    from rich.console import Console

    from .query import ElementInfo, TreeNode

_MAX_VALUE_WIDTH = 60


def render_element_table(elements: list[ElementInfo], console: Console) -> None:
    """Render elements as a Rich table.

    Args:
        elements: List of ElementInfo to render, already in dependency order.
        console: Rich Console to output to.

    """
    if not elements:
        console.print("[dim]The construction is empty[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Requires", style="dim")
    table.add_column("Dependents", justify="right")
    table.add_column("Value")

    for element in elements:
        value = repr(element.value)
        # Truncate long values
        if len(value) > _MAX_VALUE_WIDTH:
            value = value[: _MAX_VALUE_WIDTH - 3] + "..."

        kind_style = _get_kind_style(element.kind)
        table.add_row(
            escape(element.name),
            f"[{kind_style}]{element.kind.upper()}[/{kind_style}]",
            escape(", ".join(element.requires)),
            str(element.dependent_count),
            escape(value),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(elements)} elements[/dim]")


def render_tree(tree_node: TreeNode, console: Console) -> None:
    """Render a dependency tree using Rich Tree.

    Args:
        tree_node: TreeNode root to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(f"[bold]{escape(tree_node.name)}[/bold]")
    _add_tree_children(rich_tree, tree_node.children)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: list[TreeNode]) -> None:
    for child in children:
        label = escape(child.name)
        if child.repeated:
            label += " [red](cycle)[/red]"
        child_tree = parent.add(label)
        _add_tree_children(child_tree, child.children)


def _get_kind_style(kind: ElementKind) -> str:
    match kind:
        case ElementKind.PLACED:
            return "blue"
        case ElementKind.CONSTRUCTED:
            return "green"
