"""Protocols for dependency injection in the command-line tool."""

from typing import Protocol, runtime_checkable

from simpletask.core.manager import WorkspaceManager


@runtime_checkable
class WorkspaceStoreProtocol(Protocol):
    """Protocol for places a whole workspace tree can be saved to and loaded from."""

    def exists(self) -> bool:
        """Return True if a saved workspace is present."""
        ...

    def load(self) -> WorkspaceManager:
        """Read the saved tree and return a new manager over it."""
        ...

    def save(self, manager: WorkspaceManager) -> None:
        """Write the manager's whole tree, replacing anything saved before."""
        ...
