"""Shared test fixtures."""

from datetime import datetime

import pytest

from simpletask.core.manager import WorkspaceManager
from simpletask.models.node import NodeKind

DUE = datetime(2020, 4, 6, 16, 30)


@pytest.fixture
def manager() -> WorkspaceManager:
    """An empty workspace called "Workspace"."""
    return WorkspaceManager.new("Workspace")


@pytest.fixture
def populated(manager: WorkspaceManager) -> WorkspaceManager:
    """A small workspace, cursor at the root.

    Workspace
    ├── 0 Work            (Container)
    │   ├── 0 Report      (Leaf, priority 5)
    │   └── 1 Meeting     (Leaf)
    ├── 1 Home            (Container)
    │   └── 0 Groceries   (Container)
    │       └── 0 Milk    (Leaf)
    └── 2 Report          (Leaf)
    """
    manager.create("Work", NodeKind.CONTAINER)
    manager.create("Home", NodeKind.CONTAINER)
    manager.create("Report", NodeKind.LEAF)

    manager.step_into(0)
    manager.create("Report", NodeKind.LEAF)
    manager.create("Meeting", NodeKind.LEAF)
    manager.step_into(0)
    manager.set_priority(5)
    manager.set_due_date(DUE)
    manager.home()

    manager.step_into(1)
    manager.create("Groceries", NodeKind.CONTAINER)
    manager.step_into(0)
    manager.create("Milk", NodeKind.LEAF)
    manager.home()
    return manager
