"""Fake implementations for testing the command-line helpers."""

import copy
from typing import Any

from simpletask.core.manager import WorkspaceManager


class FakeStore:
    """In-memory fake for JsonWorkspaceStore.

    Keeps the last saved record and counts saves for assertions.
    """

    def __init__(self, record: dict[str, Any] | None = None) -> None:
        self.record = record
        self.saves = 0

    def exists(self) -> bool:
        return self.record is not None

    def load(self) -> WorkspaceManager:
        """Build a manager from the stored record."""
        if self.record is None:
            msg = "FakeStore: nothing saved"
            raise FileNotFoundError(msg)
        return WorkspaceManager.from_record(copy.deepcopy(self.record))

    def save(self, manager: WorkspaceManager) -> None:
        """Store the manager's record and record the call."""
        self.record = manager.to_record()
        self.saves += 1
