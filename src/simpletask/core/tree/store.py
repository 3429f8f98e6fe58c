"""Arena holding every node of a workspace tree.

Nodes are addressed by stable integer ids. A node owns the ids in its
``children`` list; ``parent`` is only a navigational back-reference and is
``None`` for the root and for nodes that have been deleted.
"""

import dataclasses
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from simpletask.errors import (
    InvalidConversionError,
    InvalidPriorityError,
    InvalidTargetError,
    OutOfRangeError,
)
from simpletask.models.node import (
    NodeKey,
    NodeKind,
    Snapshot,
    format_due_date,
    format_flag,
)

PRIORITY_MIN = 0
PRIORITY_MAX = 10


def now() -> datetime:
    """Current local time, truncated to the precision of a formatted due date."""
    return datetime.now().replace(microsecond=0)


def validate_priority(priority: int) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        msg = f"Priority must be an integer, got {priority!r}"
        raise InvalidPriorityError(msg)
    if not PRIORITY_MIN <= priority <= PRIORITY_MAX:
        msg = f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}, got {priority}"
        raise InvalidPriorityError(msg)
    return priority


@dataclass
class TreeNode:
    """A single slot in the arena."""

    node_id: int
    name: str
    kind: NodeKind
    description: str = ""
    due_date: datetime = field(default_factory=now)
    complete: bool = False
    priority: int = 0
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF


class NodeStore:
    """Owns all nodes of one tree and implements every structural operation."""

    def __init__(self) -> None:
        self._nodes: dict[int, TreeNode] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # -- construction -----------------------------------------------------

    def new_node(
        self,
        name: str,
        kind: NodeKind,
        *,
        description: str = "",
        due_date: datetime | None = None,
        complete: bool = False,
        priority: int = 0,
    ) -> int:
        """Create a detached node and return its id.

        The node has no parent until it is moved into a Container.
        """
        node = TreeNode(
            node_id=self._next_id,
            name=name,
            kind=kind,
            description=description,
            due_date=due_date if due_date is not None else now(),
            complete=complete,
            priority=validate_priority(priority),
        )
        self._nodes[node.node_id] = node
        self._next_id += 1
        return node.node_id

    # -- reading ----------------------------------------------------------

    def node(self, node_id: int) -> TreeNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            msg = f"No node with id {node_id} in this tree"
            raise InvalidTargetError(msg) from None

    def parent(self, node_id: int) -> int | None:
        return self.node(node_id).parent

    def children(self, node_id: int) -> list[int]:
        """Ids of the direct children, in order. Always empty for a Leaf."""
        node = self.node(node_id)
        if node.is_leaf:
            return []
        return list(node.children)

    def child_at(self, node_id: int, index: int) -> int:
        children = self.children(node_id)
        if not 0 <= index < len(children):
            msg = f"Child index {index} out of range for a node with {len(children)} children"
            raise OutOfRangeError(msg)
        return children[index]

    def resolve(self, start: int, path: Sequence[int]) -> int:
        """Walk child indices from ``start`` and return the id reached."""
        node_id = start
        for index in path:
            node_id = self.child_at(node_id, index)
        return node_id

    def path_of(self, node_id: int) -> list[int]:
        """Child indices leading from the top of this node's tree down to it."""
        path: list[int] = []
        current = self.node(node_id)
        while current.parent is not None:
            parent = self.node(current.parent)
            path.append(parent.children.index(current.node_id))
            current = parent
        path.reverse()
        return path

    def attribute(self, node_id: int, key: NodeKey) -> str:
        node = self.node(node_id)
        if key is NodeKey.NAME:
            return node.name
        if key is NodeKey.DESCRIPTION:
            return node.description
        if key is NodeKey.DUE_DATE:
            return format_due_date(node.due_date)
        if key is NodeKey.PRIORITY:
            return str(node.priority)
        if key is NodeKey.COMPLETE:
            return format_flag(node.complete)
        if key is NodeKey.CHILDREN:
            return str(len(self.children(node_id)))
        return node.kind.value

    def snapshot(self, node_id: int) -> Snapshot:
        node = self.node(node_id)
        return Snapshot(
            name=node.name,
            description=node.description,
            due_date=format_due_date(node.due_date),
            priority=node.priority,
            complete=node.complete,
            child_count=len(self.children(node_id)),
            kind=node.kind,
        )

    def walk(self, node_id: int, *, depth: int = 1) -> Iterator[tuple[int, int]]:
        """Yield ``(depth, id)`` for every descendant, pre-order, left to right.

        Ids deleted by the caller between steps are skipped.
        """
        for child in self.children(node_id):
            if child not in self:
                continue
            yield depth, child
            if child in self:
                yield from self.walk(child, depth=depth + 1)

    def contains(self, ancestor: int, target: int) -> bool:
        """True if ``target`` is ``ancestor`` itself or anywhere below it."""
        if ancestor == target:
            return True
        return any(self.contains(child, target) for child in self.children(ancestor))

    def is_complete(self, node_id: int) -> bool:
        """Completion with roll-up.

        A Leaf reports its own flag. A Container is complete when it has at
        least one child and every child is complete; the result is stored on
        the Container. An empty Container is never complete.
        """
        node = self.node(node_id)
        if node.is_leaf:
            return node.complete
        states = [self.is_complete(child) for child in node.children]
        node.complete = bool(states) and all(states)
        return node.complete

    # -- field edits ------------------------------------------------------

    def set_name(self, node_id: int, name: str) -> None:
        self.node(node_id).name = name

    def set_description(self, node_id: int, description: str) -> None:
        self.node(node_id).description = description

    def set_due_date(self, node_id: int, due_date: datetime) -> None:
        self.node(node_id).due_date = due_date

    def set_complete(self, node_id: int, complete: bool) -> None:
        self.node(node_id).complete = complete

    def toggle_complete(self, node_id: int) -> bool:
        node = self.node(node_id)
        node.complete = not node.complete
        return node.complete

    def set_priority(self, node_id: int, priority: int) -> None:
        """Set priority; out-of-range values raise and leave the field untouched."""
        node = self.node(node_id)
        node.priority = validate_priority(priority)

    # -- structure --------------------------------------------------------

    def move_into(self, node_id: int, target: int) -> None:
        """Re-parent ``node_id`` as the last child of ``target``."""
        node = self.node(node_id)
        new_parent = self.node(target)
        if new_parent.is_leaf:
            msg = f"Cannot move {node.name!r} into leaf {new_parent.name!r}"
            raise InvalidTargetError(msg)
        if node.parent is not None:
            self.node(node.parent).children.remove(node_id)
        new_parent.children.append(node_id)
        node.parent = target

    def delete(self, node_id: int) -> bool:
        """Delete a node and its whole subtree, depth-first, left to right.

        Stops at the first nested failure. Children deleted before that point
        stay deleted: there is no rollback.
        """
        node = self._nodes.get(node_id)
        if node is None:
            logger.warning("Cannot delete node {}: not in this tree", node_id)
            return False
        while node.children:
            if not self.delete(node.children[0]):
                return False
        if node.parent is not None:
            self.node(node.parent).children.remove(node_id)
        node.parent = None
        del self._nodes[node_id]
        logger.debug("Deleted node {} ({!r})", node_id, node.name)
        return True

    def convert(self, node_id: int, kind: NodeKind) -> None:
        """Switch a node between Container and Leaf in place.

        The replacement keeps the id, so it sits in the same parent slot and
        any reference to the id stays valid.
        """
        node = self.node(node_id)
        if node.kind is kind:
            return
        if kind is NodeKind.LEAF and node.children:
            msg = f"Cannot convert {node.name!r} to a leaf while it has {len(node.children)} children"
            raise InvalidConversionError(msg)
        self._nodes[node_id] = dataclasses.replace(node, kind=kind, children=[])
