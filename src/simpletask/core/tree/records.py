"""Convert between a node store and the persisted tree record.

A record is a plain dict, recursively::

    {
        "name": str,
        "description": str,
        "due_date": ISO-8601 str,
        "priority": int,
        "complete": bool,
        "kind": "Container" | "Leaf",
        "children": [record, ...],
    }
"""

from datetime import datetime
from typing import Any

from simpletask.core.tree.store import NodeStore
from simpletask.errors import InvalidPriorityError
from simpletask.models.node import NodeKind


def dump_tree(store: NodeStore, node_id: int) -> dict[str, Any]:
    """Return the full recursive record of ``node_id``."""
    node = store.node(node_id)
    return {
        "name": node.name,
        "description": node.description,
        "due_date": node.due_date.isoformat(),
        "priority": node.priority,
        "complete": node.complete,
        "kind": node.kind.value,
        "children": [dump_tree(store, child) for child in store.children(node_id)],
    }


def build_tree(record: dict[str, Any]) -> tuple[NodeStore, int]:
    """Build a fresh store from a record.

    Returns:
        Tuple of (store, root id).

    Raises:
        ValueError: If any record in the tree is malformed.
    """
    store = NodeStore()
    root = _build_node(store, record, location="/")
    return store, root


def _build_node(store: NodeStore, record: Any, *, location: str) -> int:
    if not isinstance(record, dict):
        msg = f"Node record at {location} must be an object, got {type(record).__name__}"
        raise ValueError(msg)
    if not isinstance(record.get("name"), str):
        msg = f"Node record at {location} is missing a name"
        raise ValueError(msg)
    if not isinstance(record.get("description", ""), str):
        msg = f"Node record at {location} has a non-string description"
        raise ValueError(msg)
    if not isinstance(record.get("complete", False), bool):
        msg = f"Node record at {location} has a non-boolean complete flag"
        raise ValueError(msg)

    try:
        kind = NodeKind.parse(record.get("kind", NodeKind.CONTAINER.value))
    except (ValueError, AttributeError):
        msg = f"Node record at {location} has an invalid kind: {record.get('kind')!r}"
        raise ValueError(msg) from None

    children = record.get("children", [])
    if not isinstance(children, list):
        msg = f"Node record at {location} has non-list children"
        raise ValueError(msg)
    if kind is NodeKind.LEAF and children:
        msg = f"Leaf record at {location} cannot have children"
        raise ValueError(msg)

    due_date = None
    if record.get("due_date"):
        try:
            due_date = datetime.fromisoformat(record["due_date"])
        except (TypeError, ValueError):
            msg = f"Node record at {location} has an invalid due date: {record['due_date']!r}"
            raise ValueError(msg) from None

    try:
        node_id = store.new_node(
            record["name"],
            kind,
            description=record.get("description", ""),
            due_date=due_date,
            complete=record.get("complete", False),
            priority=record.get("priority", 0),
        )
    except InvalidPriorityError as e:
        msg = f"Node record at {location}: {e}"
        raise ValueError(msg) from None

    for i, child in enumerate(children):
        child_id = _build_node(store, child, location=f"{location.rstrip('/')}/{i}")
        store.move_into(child_id, node_id)
    return node_id
