"""The workspace manager: the only component allowed to mutate a tree.

Callers address nodes through a cursor (the "current node") or through an
absolute path of child indices from the root, and only ever receive
Snapshots back, never live nodes.
"""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from loguru import logger

from simpletask.core.tree.records import build_tree, dump_tree
from simpletask.core.tree.store import NodeStore, now, validate_priority
from simpletask.errors import (
    ErrorKind,
    InvalidPriorityError,
    OutOfRangeError,
    Outcome,
    TreeError,
)
from simpletask.models.node import Criteria, NodeKey, NodeKind, Snapshot

DEFAULT_ROOT_NAME = "Workspace"

# Used by create_from() for fields that are missing or blank.
DEFAULT_NAME = "Default"
DEFAULT_KIND = NodeKind.CONTAINER
DEFAULT_DESCRIPTION = "Default Description"
DEFAULT_PRIORITY = 0


class WorkspaceManager:
    """Cursor-based gateway over one tree.

    The root is fixed for the lifetime of the manager. Loading another tree
    means building another manager (see ``from_record``).
    """

    def __init__(self, store: NodeStore, root: int) -> None:
        if store.parent(root) is not None:
            msg = f"Node {root} has a parent and cannot be a root"
            raise ValueError(msg)
        self._store = store
        self._root = root
        self._cursor = root
        # Child indices from root to cursor; kept in step with _cursor.
        self._path: list[int] = []

    @classmethod
    def new(cls, name: str = DEFAULT_ROOT_NAME) -> "WorkspaceManager":
        """Start an empty workspace whose root is a Container called ``name``."""
        store = NodeStore()
        return cls(store, store.new_node(name, NodeKind.CONTAINER))

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "WorkspaceManager":
        """Build a manager over a tree read from a persisted record.

        Raises:
            ValueError: If the record is malformed.
        """
        store, root = build_tree(record)
        logger.debug("Loaded workspace {!r} with {} nodes", record.get("name"), len(store))
        return cls(store, root)

    def to_record(self) -> dict[str, Any]:
        """Return the persisted record of the whole tree."""
        return dump_tree(self._store, self._root)

    @property
    def path(self) -> tuple[int, ...]:
        return tuple(self._path)

    @property
    def at_root(self) -> bool:
        return self._cursor == self._root

    def __len__(self) -> int:
        return len(self._store)

    # -- navigation -------------------------------------------------------

    def step_into(self, index: int) -> Outcome:
        """Move the cursor to its child at ``index``. Out of range is a no-op."""
        try:
            child = self._store.child_at(self._cursor, index)
        except OutOfRangeError as e:
            logger.debug("Staying at {!r}: {}", self._store.node(self._cursor).name, e)
            return Outcome.from_error(e)
        self._cursor = child
        self._path.append(index)
        return Outcome.success()

    def step_up(self) -> Outcome:
        """Move the cursor to its parent. No-op at the root."""
        parent = self._store.parent(self._cursor)
        if parent is None:
            logger.debug("Already at the root, not stepping up")
            return Outcome.failure(ErrorKind.OUT_OF_RANGE, "Already at the root")
        self._cursor = parent
        if self._path:
            self._path.pop()
        return Outcome.success()

    def home(self) -> None:
        self._cursor = self._root
        self._path.clear()

    def goto(self, path: Sequence[int]) -> Outcome:
        """Move the cursor to the node at an absolute path. No-op if unreachable."""
        try:
            target = self._store.resolve(self._root, path)
        except OutOfRangeError as e:
            logger.debug("Cannot go to {}: {}", list(path), e)
            return Outcome.from_error(e)
        self._cursor = target
        self._path = list(path)
        return Outcome.success()

    # -- creation and deletion -------------------------------------------

    def create(self, name: str, kind: NodeKind | str = NodeKind.CONTAINER) -> Outcome:
        """Create a node under the cursor."""
        try:
            node_kind = NodeKind.parse(kind)
        except ValueError as e:
            return self._fail(ErrorKind.INVALID_CONVERSION, "create", str(e))
        return self._attach_new(name, node_kind)

    def create_from(self, data: Snapshot | Mapping[NodeKey | str, Any]) -> Outcome:
        """Create a node under the cursor, populated from a Snapshot or a field map.

        Missing or blank fields fall back to defaults: name "Default", kind
        Container, description "Default Description", due date now, priority 0,
        incomplete. A priority that does not parse or is out of range, or a due
        date that does not parse, also falls back to the default.
        """
        fields: dict[NodeKey, str] = {}
        if isinstance(data, Snapshot):
            fields = data.attributes()
        else:
            for key, value in data.items():
                if key not in NodeKey.__members__.values():
                    logger.warning("Ignoring unknown field {!r}", key)
                    continue
                fields[NodeKey(key)] = "" if value is None else str(value)

        def value_of(key: NodeKey) -> str:
            return fields.get(key, "").strip()

        name = value_of(NodeKey.NAME) or DEFAULT_NAME
        description = value_of(NodeKey.DESCRIPTION) or DEFAULT_DESCRIPTION

        try:
            kind = NodeKind.parse(value_of(NodeKey.KIND)) if value_of(NodeKey.KIND) else DEFAULT_KIND
        except ValueError:
            logger.warning("Unknown kind {!r}, using {}", value_of(NodeKey.KIND), DEFAULT_KIND)
            kind = DEFAULT_KIND

        priority = DEFAULT_PRIORITY
        if value_of(NodeKey.PRIORITY):
            try:
                priority = validate_priority(int(value_of(NodeKey.PRIORITY)))
            except (ValueError, InvalidPriorityError) as e:
                logger.warning("Ignoring priority {!r}: {}", value_of(NodeKey.PRIORITY), e)

        due_date = now()
        if value_of(NodeKey.DUE_DATE):
            try:
                due_date = datetime.fromisoformat(value_of(NodeKey.DUE_DATE))
            except ValueError:
                logger.warning("Ignoring due date {!r}", value_of(NodeKey.DUE_DATE))

        complete = value_of(NodeKey.COMPLETE).lower() == "true"

        return self._attach_new(
            name,
            kind,
            description=description,
            due_date=due_date,
            priority=priority,
            complete=complete,
        )

    def _attach_new(self, name: str, kind: NodeKind, **fields: Any) -> Outcome:
        if self._store.node(self._cursor).is_leaf:
            return self._fail(
                ErrorKind.INVALID_TARGET,
                "create",
                f"Cannot create {name!r} under leaf {self._store.node(self._cursor).name!r}",
            )
        node_id = self._store.new_node(name, kind, **fields)
        self._store.move_into(node_id, self._cursor)
        logger.debug("Created {} {!r} at {}", kind.value, name, self._path)
        return Outcome.success()

    def delete_child(self, index: int) -> Outcome:
        """Delete the cursor's child at ``index`` together with its subtree."""
        try:
            child = self._store.child_at(self._cursor, index)
        except OutOfRangeError as e:
            logger.debug("Nothing to delete: {}", e)
            return Outcome.from_error(e)
        if not self._store.contains(self._root, child):
            return self._fail(ErrorKind.INVALID_TARGET, "delete", "Child is not reachable from root")
        return self._delete(child)

    def delete_cursor(self) -> Outcome:
        """Delete the cursor node and its subtree; the cursor moves to the parent.

        The root itself is never deleted: at the root this deletes every child
        and leaves an empty root.
        """
        if self.at_root:
            for child in self._store.children(self._root):
                outcome = self._delete(child)
                if not outcome:
                    return outcome
            return Outcome.success()

        doomed = self._cursor
        parent = self._store.parent(doomed)
        if parent is None:
            return self._fail(ErrorKind.INVALID_TARGET, "delete", "Cursor has no parent")
        outcome = self._delete(doomed)
        if outcome:
            self._cursor = parent
            self._path.pop()
        return outcome

    def _delete(self, node_id: int) -> Outcome:
        name = self._store.node(node_id).name
        if not self._store.delete(node_id):
            # Earlier children of the subtree may already be gone.
            return self._fail(ErrorKind.INVALID_TARGET, "delete", f"Could not fully delete {name!r}")
        logger.debug("Deleted {!r}", name)
        return Outcome.success()

    # -- moving -----------------------------------------------------------

    def move(self, path: Sequence[int]) -> Outcome:
        """Move the cursor node under the Container at an absolute ``path``.

        Fails without touching the tree when the cursor is the root, the path
        does not resolve, the target is a Leaf, or the target is the cursor
        itself or one of its descendants.
        """
        if self.at_root:
            return self._fail(ErrorKind.INVALID_TARGET, "move", "The root cannot be moved")
        try:
            target = self._store.resolve(self._root, path)
        except OutOfRangeError as e:
            return self._fail(ErrorKind.INVALID_TARGET, "move", f"No node at {list(path)}: {e}")
        if self._store.node(target).is_leaf:
            return self._fail(ErrorKind.INVALID_TARGET, "move", f"Target at {list(path)} is a leaf")
        if not self._store.contains(self._root, target):
            return self._fail(ErrorKind.INVALID_TARGET, "move", "Target is not in this tree")
        if self._store.contains(self._cursor, target):
            return self._fail(
                ErrorKind.INVALID_TARGET, "move", "Cannot move a node into itself or its descendants"
            )

        outcome = self._apply("move", self._store.move_into, self._cursor, target)
        if outcome:
            self._path = self._store.path_of(self._cursor)
        return outcome

    # -- field edits ------------------------------------------------------

    def set_name(self, name: str) -> Outcome:
        return self._apply("set name", self._store.set_name, self._cursor, name)

    def set_description(self, description: str) -> Outcome:
        return self._apply("set description", self._store.set_description, self._cursor, description)

    def set_due_date(self, due_date: datetime) -> Outcome:
        return self._apply("set due date", self._store.set_due_date, self._cursor, due_date)

    def set_priority(self, priority: int | str) -> Outcome:
        """Set the cursor's priority. Values outside [0, 10] leave it unchanged."""
        if isinstance(priority, str):
            try:
                priority = int(priority.strip())
            except ValueError:
                return self._fail(
                    ErrorKind.INVALID_PRIORITY, "set priority", f"Not a number: {priority!r}"
                )
        return self._apply("set priority", self._store.set_priority, self._cursor, priority)

    def set_complete(self, complete: bool) -> Outcome:
        return self._apply("set complete", self._store.set_complete, self._cursor, complete)

    def toggle_complete(self) -> bool:
        return self._store.toggle_complete(self._cursor)

    def set_kind(self, kind: NodeKind | str) -> Outcome:
        """Convert the cursor between Container and Leaf.

        A Container with children cannot become a Leaf; the cursor is then
        left unchanged.
        """
        try:
            node_kind = NodeKind.parse(kind)
        except ValueError as e:
            return self._fail(ErrorKind.INVALID_CONVERSION, "set kind", str(e))
        return self._apply("set kind", self._store.convert, self._cursor, node_kind)

    def is_complete(self) -> bool:
        """Completion of the cursor, rolled up from its subtree."""
        return self._store.is_complete(self._cursor)

    # -- queries ----------------------------------------------------------

    def search(self, criteria: Criteria) -> list[Snapshot]:
        """Snapshots of every node below the cursor that matches ``criteria``.

        The cursor itself is not included. Order is pre-order, left to right.
        """
        results: list[Snapshot] = []
        for _depth, node_id in self._store.walk(self._cursor):
            snapshot = self._store.snapshot(node_id)
            if criteria.matches(snapshot):
                results.append(snapshot)
        return results

    def cursor_snapshot(self) -> Snapshot:
        return self._store.snapshot(self._cursor)

    def parent_snapshot(self) -> Snapshot | None:
        """Snapshot of the cursor's parent, or None at the root."""
        parent = self._store.parent(self._cursor)
        if parent is None:
            return None
        return self._store.snapshot(parent)

    def children_snapshots(self) -> list[Snapshot]:
        return [self._store.snapshot(child) for child in self._store.children(self._cursor)]

    def snapshot_of(self, path: Sequence[int]) -> Snapshot | None:
        """Snapshot of the node at an absolute path, or None if unreachable."""
        node_id = self._resolve(self._root, path)
        return None if node_id is None else self._store.snapshot(node_id)

    def relative_snapshot_of(self, path: Sequence[int]) -> Snapshot | None:
        """Snapshot of the node at a path relative to the cursor."""
        node_id = self._resolve(self._cursor, path)
        return None if node_id is None else self._store.snapshot(node_id)

    def children_snapshots_of(self, path: Sequence[int]) -> list[Snapshot]:
        """Snapshots of the children of the node at an absolute path.

        An unreachable path yields an empty list.
        """
        node_id = self._resolve(self._root, path)
        if node_id is None:
            return []
        return [self._store.snapshot(child) for child in self._store.children(node_id)]

    def outline(
        self, path: Sequence[int] = (), *, max_depth: int | None = None
    ) -> list[tuple[int, Snapshot]]:
        """The node at ``path`` and its descendants as ``(depth, Snapshot)`` pairs.

        The addressed node has depth 0. ``max_depth`` limits how many levels
        below it are included.
        """
        start = self._resolve(self._root, path)
        if start is None:
            return []
        rows = [(0, self._store.snapshot(start))]
        for depth, node_id in self._store.walk(start):
            if max_depth is not None and depth > max_depth:
                continue
            rows.append((depth, self._store.snapshot(node_id)))
        return rows

    # -- helpers ----------------------------------------------------------

    def _resolve(self, start: int, path: Sequence[int]) -> int | None:
        try:
            return self._store.resolve(start, path)
        except OutOfRangeError as e:
            logger.debug("Path {} does not resolve: {}", list(path), e)
            return None

    def _apply(self, action: str, operation: Callable[..., Any], *args: Any) -> Outcome:
        try:
            operation(*args)
        except TreeError as e:
            logger.warning("Could not {}: {}", action, e)
            return Outcome.from_error(e)
        return Outcome.success()

    def _fail(self, error: ErrorKind, action: str, message: str) -> Outcome:
        logger.warning("Could not {}: {}", action, message)
        return Outcome.failure(error, message)
