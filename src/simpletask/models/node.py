"""Value types exchanged across the workspace boundary."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

# Fixed format used whenever a due date leaves the tree as a string.
DUE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class NodeKind(StrEnum):
    """The two node variants."""

    CONTAINER = "Container"
    LEAF = "Leaf"

    @classmethod
    def parse(cls, value: "str | NodeKind") -> "NodeKind":
        """Resolve a kind from its name, ignoring case."""
        if isinstance(value, NodeKind):
            return value
        for kind in cls:
            if kind.value.lower() == value.strip().lower():
                return kind
        msg = f"Unknown node kind: {value!r}"
        raise ValueError(msg)


class NodeKey(StrEnum):
    """User-visible attributes of a node."""

    NAME = "name"
    DESCRIPTION = "description"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    COMPLETE = "complete"
    CHILDREN = "children"
    KIND = "kind"


def format_due_date(value: datetime) -> str:
    return value.strftime(DUE_DATE_FORMAT)


def format_flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True)
class Snapshot:
    """Detached summary of a node at the time it was taken."""

    name: str
    description: str
    due_date: str
    priority: int
    complete: bool
    child_count: int
    kind: NodeKind

    def attribute(self, key: NodeKey) -> str:
        """Format one attribute the same way a live node does."""
        if key is NodeKey.NAME:
            return self.name
        if key is NodeKey.DESCRIPTION:
            return self.description
        if key is NodeKey.DUE_DATE:
            return self.due_date
        if key is NodeKey.PRIORITY:
            return str(self.priority)
        if key is NodeKey.COMPLETE:
            return format_flag(self.complete)
        if key is NodeKey.CHILDREN:
            return str(self.child_count)
        return self.kind.value

    def attributes(self) -> dict[NodeKey, str]:
        return {key: self.attribute(key) for key in NodeKey}

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "name": self.name,
            "description": self.description,
            "due_date": self.due_date,
            "priority": self.priority,
            "complete": self.complete,
            "child_count": self.child_count,
            "kind": self.kind.value,
        }

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF


@dataclass(frozen=True)
class Criteria:
    """Partial attribute match over snapshots.

    Every specified key must match (case-insensitive, exact string); keys that
    are not specified are ignored, so an empty Criteria matches everything.
    """

    fields: Mapping[NodeKey, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Own a private copy so callers cannot mutate a Criteria after the fact.
        object.__setattr__(self, "fields", dict(self.fields))

    @classmethod
    def of(cls, **values: Any) -> "Criteria":
        """Build from keyword arguments named after ``NodeKey`` values.

        ``None`` values are skipped; booleans are normalized to ``"true"``/``"false"``.
        """
        fields: dict[NodeKey, str] = {}
        for name, value in values.items():
            if value is None:
                continue
            fields[NodeKey(name)] = _criteria_value(value)
        return cls(fields)

    def with_attr(self, key: NodeKey, value: Any) -> "Criteria":
        return Criteria({**self.fields, key: _criteria_value(value)})

    def matches(self, snapshot: Snapshot) -> bool:
        for key, expected in self.fields.items():
            if snapshot.attribute(key).casefold() != expected.casefold():
                return False
        return True

    def __bool__(self) -> bool:
        return bool(self.fields)


def _criteria_value(value: Any) -> str:
    if isinstance(value, bool):
        return format_flag(value)
    if isinstance(value, NodeKind):
        return value.value
    if isinstance(value, datetime):
        return format_due_date(value)
    return str(value)
