"""Command-line interface for simpletask.

Every command loads the workspace file, performs one operation through the
workspace manager and saves the tree again if the operation changed it.
Nodes are addressed by ``/``-separated child indices from the root, so
``0/2`` is the third child of the first child of the root and ``""`` (or
``/``) is the root itself.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from simpletask.config import resolve_workspace_file
from simpletask.core.manager import WorkspaceManager
from simpletask.core.storage import JsonWorkspaceStore
from simpletask.core.tree.markdown import render_outline_as_markdown
from simpletask.errors import Outcome
from simpletask.logging_config import configure_logging
from simpletask.models.node import Criteria, NodeKind
from simpletask.protocols import WorkspaceStoreProtocol

app = typer.Typer(help="simpletask: keep a tree of tasks you can browse, edit and search.")

FileOption = Annotated[
    Path | None,
    typer.Option("--file", "-f", help="Workspace JSON file (default: from config)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def parse_path(text: str) -> list[int]:
    """Parse ``"0/2/1"`` into ``[0, 2, 1]``. Empty or ``"/"`` is the root."""
    stripped = text.strip().strip("/")
    if not stripped:
        return []
    try:
        path = [int(part) for part in stripped.split("/")]
    except ValueError:
        msg = f"Not a path of child indices: {text!r}"
        raise typer.BadParameter(msg) from None
    if any(index < 0 for index in path):
        msg = f"Child indices cannot be negative: {text!r}"
        raise typer.BadParameter(msg)
    return path


def parse_due_date(text: str) -> datetime:
    """Parse an ISO date or date-time; a bare date means midnight."""
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        msg = f"Not an ISO-8601 date: {text!r}"
        raise typer.BadParameter(msg) from None


def open_store(file: Path | None) -> JsonWorkspaceStore:
    return JsonWorkspaceStore(file or resolve_workspace_file())


def load_workspace(store: WorkspaceStoreProtocol) -> WorkspaceManager:
    """Load the workspace, exiting with status 1 if it is missing or broken."""
    try:
        return store.load()
    except FileNotFoundError as e:
        logger.error("{}. Run 'init' first.", e)
        raise typer.Exit(1) from None
    except ValueError as e:
        logger.error("Cannot read workspace: {}", e)
        raise typer.Exit(1) from None


def check(outcome: Outcome) -> None:
    """Exit with status 1 if the operation failed."""
    if not outcome:
        typer.echo(f"Error ({outcome.error}): {outcome.message}", err=True)
        raise typer.Exit(1)


def go_to(manager: WorkspaceManager, path: list[int]) -> None:
    if not manager.goto(path):
        typer.echo(f"No node at path {_format_path(path)}", err=True)
        raise typer.Exit(1)


def commit(store: WorkspaceStoreProtocol, manager: WorkspaceManager, outcome: Outcome) -> None:
    """Save the tree if the operation succeeded, otherwise exit with status 1."""
    check(outcome)
    store.save(manager)


def _format_path(path: list[int] | tuple[int, ...]) -> str:
    return "/" + "/".join(str(i) for i in path)


@app.command()
def init(
    name: str = typer.Argument("Workspace", help="Name of the root node"),
    file: FileOption = None,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing workspace"),
) -> None:
    """Create a new, empty workspace."""
    store = open_store(file)
    if store.exists() and not force:
        typer.echo(f"Workspace already exists at {store.path}. Use --force to replace it.")
        raise typer.Exit(1)
    store.save(WorkspaceManager.new(name))
    typer.echo(f"Created workspace {name!r} at {store.path}")


@app.command()
def show(
    path: str = typer.Argument("", help="Node path, e.g. 0/1 (default: root)"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    file: FileOption = None,
) -> None:
    """Show a node and its subtree."""
    manager = load_workspace(open_store(file))
    node_path = parse_path(path)
    rows = manager.outline(node_path, max_depth=max_depth)
    if not rows:
        typer.echo(f"No node at path {_format_path(node_path)}", err=True)
        raise typer.Exit(1)

    if output_json:
        data = [{"depth": depth, **snapshot.as_dict()} for depth, snapshot in rows]
        typer.echo(json.dumps(data, indent=2))
    else:
        typer.echo(render_outline_as_markdown(rows, max_depth=max_depth), nl=False)


@app.command()
def add(
    name: str = typer.Argument(..., help="Name of the new node"),
    under: str = typer.Option("", "--under", "-u", help="Path of the parent (default: root)"),
    leaf: bool = typer.Option(False, "--leaf", "-l", help="Create a leaf instead of a container"),
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Description")
    ] = None,
    priority: Annotated[int | None, typer.Option("--priority", "-p", help="Priority 0-10")] = None,
    file: FileOption = None,
) -> None:
    """Add a node as the last child of a container."""
    store = open_store(file)
    manager = load_workspace(store)
    go_to(manager, parse_path(under))

    check(manager.create(name, NodeKind.LEAF if leaf else NodeKind.CONTAINER))
    index = manager.cursor_snapshot().child_count - 1
    manager.step_into(index)
    if description is not None:
        check(manager.set_description(description))
    if priority is not None:
        check(manager.set_priority(priority))

    commit(store, manager, Outcome.success())
    typer.echo(f"Added {name!r} at {_format_path(manager.path)}")


@app.command()
def delete(
    path: str = typer.Argument(..., help="Path of the node to delete"),
    file: FileOption = None,
) -> None:
    """Delete a node and everything below it."""
    store = open_store(file)
    manager = load_workspace(store)
    node_path = parse_path(path)
    if not node_path:
        typer.echo("The root cannot be deleted.", err=True)
        raise typer.Exit(1)

    doomed = manager.snapshot_of(node_path)
    go_to(manager, node_path[:-1])
    commit(store, manager, manager.delete_child(node_path[-1]))
    if doomed is not None:
        typer.echo(f"Deleted {doomed.name!r}")


@app.command()
def move(
    path: str = typer.Argument(..., help="Path of the node to move"),
    target: str = typer.Argument(..., help="Path of the new parent container"),
    file: FileOption = None,
) -> None:
    """Move a node under another container."""
    store = open_store(file)
    manager = load_workspace(store)
    go_to(manager, parse_path(path))
    commit(store, manager, manager.move(parse_path(target)))
    typer.echo(f"Moved to {_format_path(manager.path)}")


@app.command()
def edit(
    path: str = typer.Argument("", help="Path of the node to edit (default: root)"),
    name: Annotated[str | None, typer.Option("--name", "-n", help="New name")] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="New description")
    ] = None,
    priority: Annotated[int | None, typer.Option("--priority", "-p", help="Priority 0-10")] = None,
    due: Annotated[
        str | None, typer.Option("--due", help="Due date, ISO-8601 (e.g. 2024-05-01T17:00)")
    ] = None,
    complete: Annotated[
        bool | None, typer.Option("--complete/--incomplete", help="Completion flag")
    ] = None,
    kind: Annotated[
        str | None, typer.Option("--kind", "-k", help="Container or Leaf")
    ] = None,
    file: FileOption = None,
) -> None:
    """Edit the fields of a node."""
    if all(v is None for v in (name, description, priority, due, complete, kind)):
        typer.echo("Nothing to edit.", err=True)
        raise typer.Exit(1)

    store = open_store(file)
    manager = load_workspace(store)
    go_to(manager, parse_path(path))

    if name is not None:
        check(manager.set_name(name))
    if description is not None:
        check(manager.set_description(description))
    if priority is not None:
        check(manager.set_priority(priority))
    if due is not None:
        check(manager.set_due_date(parse_due_date(due)))
    if complete is not None:
        check(manager.set_complete(complete))
    if kind is not None:
        check(manager.set_kind(kind))

    commit(store, manager, Outcome.success())
    typer.echo(f"Updated {manager.cursor_snapshot().name!r}")


@app.command()
def status(
    path: str = typer.Argument("", help="Node path (default: root)"),
    file: FileOption = None,
) -> None:
    """Roll up completion from the leaves and report whether a node is done."""
    store = open_store(file)
    manager = load_workspace(store)
    go_to(manager, parse_path(path))
    done = manager.is_complete()
    store.save(manager)
    snapshot = manager.cursor_snapshot()
    typer.echo(f"{snapshot.name}: {'complete' if done else 'incomplete'}")


@app.command()
def search(
    under: str = typer.Option("", "--under", "-u", help="Search below this path (default: root)"),
    name: Annotated[str | None, typer.Option("--name", "-n", help="Exact name")] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Exact description")
    ] = None,
    priority: Annotated[int | None, typer.Option("--priority", "-p", help="Priority")] = None,
    kind: Annotated[str | None, typer.Option("--kind", "-k", help="Container or Leaf")] = None,
    complete: Annotated[
        bool | None, typer.Option("--complete/--incomplete", help="Completion flag")
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    file: FileOption = None,
) -> None:
    """Find nodes below a node whose fields all match (case-insensitive)."""
    manager = load_workspace(open_store(file))
    go_to(manager, parse_path(under))

    criteria = Criteria.of(
        name=name, description=description, priority=priority, kind=kind, complete=complete
    )
    results = manager.search(criteria)

    if output_json:
        data = {"results": [s.as_dict() for s in results], "total": len(results)}
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"Found {len(results)} results:\n")
    for s in results:
        done = "x" if s.complete else " "
        typer.echo(f"  [{done}] {s.name}  ({s.kind}, priority {s.priority}, due {s.due_date})")
        if s.description:
            typer.echo(f"      {s.description[:60]}")
