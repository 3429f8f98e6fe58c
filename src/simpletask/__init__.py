"""simpletask: a tree of work items behind a single mutation gateway."""

from simpletask.core.manager import WorkspaceManager
from simpletask.core.storage import JsonWorkspaceStore
from simpletask.errors import ErrorKind, Outcome
from simpletask.models.node import Criteria, NodeKey, NodeKind, Snapshot
from simpletask.protocols import WorkspaceStoreProtocol

__all__ = [
    "Criteria",
    "ErrorKind",
    "JsonWorkspaceStore",
    "NodeKey",
    "NodeKind",
    "Outcome",
    "Snapshot",
    "WorkspaceManager",
    "WorkspaceStoreProtocol",
]
