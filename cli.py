import asyncio
import logging
import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from cartography.core.config import settings
from cartography.core.exceptions import MalformedDatasetError, NodeNotFoundException
from cartography.models.graph import Node
from cartography.services.expansion import ExpansionController
from cartography.services.graph_store import GraphStore
from cartography.services.render_adapter import RenderAdapter
from cartography.services.text_layout import TextLayoutEngine

cli_app = typer.Typer()
console = Console()

def _load_store(dataset: str) -> GraphStore:
    try:
        return GraphStore.load_path(dataset)
    except (OSError, MalformedDatasetError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

@cli_app.command()
def wrap(
    name: str = typer.Option(..., "--name", "-n", help="The display name of the node."),
    width: float = typer.Option(settings.TEXT_MAX_WIDTH, "--width", "-w", help="Maximum line width in pixels."),
):
    """
    Shows how a name is wrapped and how large its circle gets, for tuning the override tables.
    """
    layout = TextLayoutEngine()
    node = Node(id="preview", labels=["Preview"], attributes={"name": name})
    lines = layout.wrap(name, width)

    table = Table(title=f"Layout for {name!r}")
    table.add_column("Line")
    table.add_column("Width", justify="right")
    for line in lines:
        table.add_row(line.replace("\u00a0", "·"), f"{layout.measurer.width(line):.1f}")
    console.print(table)

    if name in layout.manual_breaks:
        console.print("[yellow]Manual break override applied.[/yellow]")
    console.print(f"[cyan]Radius:[/cyan] {layout.radius(node, max_width=width):.1f}")

@cli_app.command("inspect")
def inspect_dataset(
    dataset: str = typer.Argument(settings.DATASET_PATH, help="Path to the dataset JSON."),
):
    """
    Summarizes a dataset: root, sizes, expandable and unreachable nodes.
    """
    store = _load_store(dataset)
    expandable = [node for node in store.nodes if store.is_expandable(node.id)]
    unreachable = store.unreachable_ids()

    console.print(f"[bold green]Root:[/bold green] {store.root.id} ({store.root.name})")
    console.print(f"[cyan]{len(store.nodes)} nodes, {len(store.edges)} edges, {len(expandable)} expandable.[/cyan]")
    multi_parent = [node for node in store.nodes if len(store.parents_of(node.id)) > 1]
    if multi_parent:
        console.print(f"[cyan]{len(multi_parent)} node(s) with several parents.[/cyan]")
    if unreachable:
        console.print(f"[yellow]Unreachable from the root: {', '.join(sorted(unreachable))}[/yellow]")

@cli_app.command()
def walk(
    dataset: str = typer.Argument(settings.DATASET_PATH, help="Path to the dataset JSON."),
    expand: list[str] = typer.Option([], "--expand", "-e", help="Node ids to expand, in order."),
):
    """
    Expands the given nodes from the root and prints the resulting visible graph.
    """
    store = _load_store(dataset)

    async def main():
        controller = ExpansionController(store)
        controller.seed()
        adapter = RenderAdapter(controller, TextLayoutEngine())
        for node_id in expand:
            try:
                result = adapter.on_node_click(node_id)
            except NodeNotFoundException as exc:
                console.print(f"[bold red]Error:[/bold red] {exc.message}")
                raise typer.Exit(code=1)
            console.print(f"[cyan]Expanded {node_id}: +{len(result.added_nodes)} nodes, +{len(result.added_edges)} edges.[/cyan]")
        return adapter.render()

    view = asyncio.run(main())
    console.print(Syntax(view.model_dump_json(indent=2), "json", theme="solarized-dark"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    cli_app()
