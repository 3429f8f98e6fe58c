"""Tests for the workspace manager."""

from datetime import datetime

import pytest

from simpletask.core.manager import WorkspaceManager
from simpletask.errors import ErrorKind
from simpletask.models.node import Criteria, NodeKey, NodeKind


def _names(snapshots: list) -> list[str]:
    return [s.name for s in snapshots]


def test_new_workspace_is_empty(manager: WorkspaceManager) -> None:
    assert manager.children_snapshots() == []
    assert manager.cursor_snapshot().name == "Workspace"
    assert manager.cursor_snapshot().kind is NodeKind.CONTAINER
    assert manager.path == ()


def test_create_appends_under_cursor(manager: WorkspaceManager) -> None:
    for name in ("Child 1", "Child 2", "Child 3"):
        assert manager.create(name, NodeKind.CONTAINER)
    assert _names(manager.children_snapshots()) == ["Child 1", "Child 2", "Child 3"]


def test_create_increments_child_count_by_one(populated: WorkspaceManager) -> None:
    populated.step_into(0)
    before = populated.cursor_snapshot().child_count
    assert populated.create("New", NodeKind.CONTAINER)
    assert populated.cursor_snapshot().child_count == before + 1
    populated.step_into(before)
    assert populated.parent_snapshot().name == "Work"


def test_create_under_leaf_fails(populated: WorkspaceManager) -> None:
    populated.step_into(2)
    outcome = populated.create("Nope", NodeKind.LEAF)
    assert not outcome
    assert outcome.error is ErrorKind.INVALID_TARGET
    assert populated.cursor_snapshot().child_count == 0


def test_create_accepts_kind_names(manager: WorkspaceManager) -> None:
    assert manager.create("a", "leaf")
    assert manager.children_snapshots()[0].kind is NodeKind.LEAF
    outcome = manager.create("b", "folder")
    assert outcome.error is ErrorKind.INVALID_CONVERSION
    assert len(manager.children_snapshots()) == 1


def test_unknown_kind_name_fails_the_same_way_everywhere(manager: WorkspaceManager) -> None:
    manager.create("a", NodeKind.CONTAINER)
    manager.step_into(0)
    assert manager.set_kind("folder").error is manager.create("b", "folder").error
    assert manager.cursor_snapshot().child_count == 0


def test_create_from_applies_defaults(manager: WorkspaceManager) -> None:
    assert manager.create_from({NodeKey.NAME: "", NodeKey.PRIORITY: "  "})
    created = manager.children_snapshots()[0]
    assert created.name == "Default"
    assert created.description == "Default Description"
    assert created.kind is NodeKind.CONTAINER
    assert created.priority == 0
    assert created.complete is False


def test_create_from_populates_fields(manager: WorkspaceManager) -> None:
    assert manager.create_from(
        {
            "name": "second",
            "kind": "Leaf",
            "description": "desc",
            "priority": "4",
            "due_date": "2020-04-06T16:30:00",
            "complete": "true",
        }
    )
    created = manager.children_snapshots()[0]
    assert created.name == "second"
    assert created.kind is NodeKind.LEAF
    assert created.description == "desc"
    assert created.priority == 4
    assert created.due_date == "2020-04-06T16:30:00"
    assert created.complete is True


def test_create_from_bad_priority_falls_back_to_zero(manager: WorkspaceManager) -> None:
    assert manager.create_from({"name": "a", "priority": "50"})
    assert manager.create_from({"name": "b", "priority": "high"})
    assert [s.priority for s in manager.children_snapshots()] == [0, 0]


def test_create_from_snapshot_copies_it(populated: WorkspaceManager) -> None:
    source = populated.snapshot_of([0, 0])
    assert source is not None
    populated.step_into(1)
    assert populated.create_from(source)
    copy = populated.children_snapshots()[-1]
    assert copy.name == "Report"
    assert copy.priority == 5
    assert copy.due_date == source.due_date
    assert copy.kind is NodeKind.LEAF


def test_step_into_and_up_keep_path_in_step(populated: WorkspaceManager) -> None:
    assert populated.step_into(1)
    assert populated.step_into(0)
    assert populated.path == (1, 0)
    assert populated.cursor_snapshot().name == "Groceries"
    assert populated.step_up()
    assert populated.path == (1,)
    assert populated.cursor_snapshot().name == "Home"


def test_step_into_out_of_range_is_noop(populated: WorkspaceManager) -> None:
    outcome = populated.step_into(9)
    assert outcome.error is ErrorKind.OUT_OF_RANGE
    assert populated.path == ()
    assert populated.cursor_snapshot().name == "Workspace"


def test_step_into_leaf_child_is_noop(populated: WorkspaceManager) -> None:
    populated.step_into(2)
    assert not populated.step_into(0)
    assert populated.path == (2,)


def test_step_up_at_root_is_noop(manager: WorkspaceManager) -> None:
    assert not manager.step_up()
    assert manager.at_root
    assert manager.parent_snapshot() is None


def test_home_and_goto(populated: WorkspaceManager) -> None:
    assert populated.goto([1, 0, 0])
    assert populated.cursor_snapshot().name == "Milk"
    assert populated.path == (1, 0, 0)
    assert not populated.goto([5])
    assert populated.path == (1, 0, 0)
    populated.home()
    assert populated.at_root
    assert populated.path == ()


def test_delete_child(populated: WorkspaceManager) -> None:
    assert populated.delete_child(2)
    assert populated.delete_child(0)
    assert _names(populated.children_snapshots()) == ["Home"]
    assert populated.at_root


def test_delete_child_out_of_range_is_noop(populated: WorkspaceManager) -> None:
    outcome = populated.delete_child(3)
    assert outcome.error is ErrorKind.OUT_OF_RANGE
    assert len(populated.children_snapshots()) == 3


def test_delete_child_of_leaf_is_noop(populated: WorkspaceManager) -> None:
    populated.step_into(2)
    assert not populated.delete_child(0)


def test_delete_cursor_removes_subtree(populated: WorkspaceManager) -> None:
    before = len(populated)
    populated.goto([1])
    assert populated.delete_cursor()
    assert populated.at_root
    assert populated.path == ()
    assert _names(populated.children_snapshots()) == ["Work", "Report"]
    assert len(populated) == before - 3
    assert populated.search(Criteria.of(name="Milk")) == []


def test_delete_cursor_at_root_clears_children(populated: WorkspaceManager) -> None:
    assert populated.delete_cursor()
    assert populated.children_snapshots() == []
    assert populated.cursor_snapshot().name == "Workspace"
    assert len(populated) == 1


def test_delete_cursor_without_parent_link_fails(populated: WorkspaceManager) -> None:
    populated.goto([1])
    populated._store.node(populated._cursor).parent = None

    outcome = populated.delete_cursor()

    assert outcome.error is ErrorKind.INVALID_TARGET
    assert populated.cursor_snapshot().name == "Home"
    assert populated.path == (1,)


def test_move_reparents_cursor(manager: WorkspaceManager) -> None:
    manager.create("A", NodeKind.CONTAINER)
    manager.create("B", NodeKind.CONTAINER)
    manager.step_into(0)
    manager.create("X", NodeKind.LEAF)
    manager.step_into(0)

    assert manager.move([1])

    assert _names(manager.children_snapshots_of([1])) == ["X"]
    assert manager.children_snapshots_of([0]) == []
    assert manager.parent_snapshot().name == "B"
    assert manager.path == (1, 0)


def test_move_twice_collects_nodes(populated: WorkspaceManager) -> None:
    populated.goto([0, 0])
    assert populated.move([1])
    populated.goto([0, 0])
    assert populated.move([1])
    assert populated.children_snapshots_of([0]) == []
    assert _names(populated.children_snapshots_of([1])) == ["Groceries", "Report", "Meeting"]


def test_move_into_leaf_fails(populated: WorkspaceManager) -> None:
    populated.goto([1])
    outcome = populated.move([2])
    assert outcome.error is ErrorKind.INVALID_TARGET
    assert populated.path == (1,)
    assert _names(populated.children_snapshots_of([])) == ["Work", "Home", "Report"]


def test_move_to_unreachable_path_fails(populated: WorkspaceManager) -> None:
    populated.goto([0, 1])
    outcome = populated.move([7, 0])
    assert outcome.error is ErrorKind.INVALID_TARGET
    assert _names(populated.children_snapshots_of([0])) == ["Report", "Meeting"]


def test_move_into_own_descendant_fails(populated: WorkspaceManager) -> None:
    populated.goto([1])
    assert not populated.move([1, 0])
    assert not populated.move([1])
    assert _names(populated.children_snapshots_of([1])) == ["Groceries"]


def test_move_root_fails(populated: WorkspaceManager) -> None:
    outcome = populated.move([0])
    assert outcome.error is ErrorKind.INVALID_TARGET


@pytest.mark.parametrize("priority", [0, 5, 10, "7"])
def test_set_priority_valid(manager: WorkspaceManager, priority: int | str) -> None:
    assert manager.set_priority(priority)
    assert manager.cursor_snapshot().priority == int(priority)


@pytest.mark.parametrize("priority", [11, -2, 50, "ten"])
def test_set_priority_invalid_keeps_previous(
    manager: WorkspaceManager, priority: int | str
) -> None:
    manager.set_priority(5)
    outcome = manager.set_priority(priority)
    assert outcome.error is ErrorKind.INVALID_PRIORITY
    assert manager.snapshot_of([]).attribute(NodeKey.PRIORITY) == "5"


def test_set_priority_eleven_on_fresh_node(manager: WorkspaceManager) -> None:
    assert not manager.set_priority(11)
    assert manager.cursor_snapshot().attribute(NodeKey.PRIORITY) == "0"


def test_field_setters(manager: WorkspaceManager) -> None:
    manager.set_name("Renamed")
    manager.set_description("About it")
    manager.set_due_date(datetime(2020, 4, 6, 16, 30))
    manager.set_complete(True)
    snapshot = manager.cursor_snapshot()
    assert snapshot.name == "Renamed"
    assert snapshot.description == "About it"
    assert snapshot.due_date == "2020-04-06T16:30:00"
    assert snapshot.complete is True
    assert manager.toggle_complete() is False


def test_set_kind_conversion(manager: WorkspaceManager) -> None:
    manager.create("Parent", NodeKind.CONTAINER)
    manager.step_into(0)
    manager.create("c1", NodeKind.LEAF)
    manager.create("c2", NodeKind.LEAF)

    outcome = manager.set_kind(NodeKind.LEAF)
    assert outcome.error is ErrorKind.INVALID_CONVERSION
    assert manager.cursor_snapshot().kind is NodeKind.CONTAINER

    manager.delete_child(1)
    manager.delete_child(0)
    assert manager.set_kind("Leaf")
    snapshot = manager.cursor_snapshot()
    assert snapshot.kind is NodeKind.LEAF
    assert snapshot.child_count == 0
    assert manager.path == (0,)
    assert manager.parent_snapshot().name == "Workspace"

    assert manager.set_kind("container")
    assert manager.create("again", NodeKind.LEAF)


def test_is_complete_rolls_up(populated: WorkspaceManager) -> None:
    populated.goto([0])
    assert not populated.is_complete()
    for index in (0, 1):
        populated.goto([0, index])
        populated.set_complete(True)
    populated.goto([0])
    assert populated.is_complete()
    assert populated.cursor_snapshot().complete is True


def test_search_covers_whole_subtree(populated: WorkspaceManager) -> None:
    results = populated.search(Criteria.of(kind="leaf"))
    assert _names(results) == ["Report", "Meeting", "Milk", "Report"]


def test_search_returns_duplicates(populated: WorkspaceManager) -> None:
    results = populated.search(Criteria.of(name="report"))
    assert len(results) == 2
    assert {r.priority for r in results} == {0, 5}


def test_search_is_scoped_to_cursor(populated: WorkspaceManager) -> None:
    populated.goto([1])
    assert _names(populated.search(Criteria())) == ["Groceries", "Milk"]
    assert populated.search(Criteria.of(name="Report")) == []


def test_search_and_across_fields(populated: WorkspaceManager) -> None:
    results = populated.search(Criteria.of(name="Report", priority=5))
    assert len(results) == 1
    assert results[0].due_date == "2020-04-06T16:30:00"


def test_snapshots_are_detached(populated: WorkspaceManager) -> None:
    snapshot = populated.snapshot_of([0])
    populated.goto([0])
    populated.set_name("Changed")
    assert snapshot is not None
    assert snapshot.name == "Work"
    assert populated.snapshot_of([0]).name == "Changed"


def test_read_queries_with_bad_paths(populated: WorkspaceManager) -> None:
    assert populated.snapshot_of([4]) is None
    assert populated.children_snapshots_of([0, 0, 0]) == []
    assert populated.relative_snapshot_of([9]) is None
    assert populated.outline([3]) == []


def test_relative_snapshot_of(populated: WorkspaceManager) -> None:
    populated.goto([1])
    assert populated.relative_snapshot_of([0, 0]).name == "Milk"
    assert populated.relative_snapshot_of([]).name == "Home"


def test_outline_depths(populated: WorkspaceManager) -> None:
    rows = populated.outline([1])
    assert [(depth, s.name) for depth, s in rows] == [(0, "Home"), (1, "Groceries"), (2, "Milk")]
    limited = populated.outline([], max_depth=1)
    assert [s.name for _, s in limited] == ["Workspace", "Work", "Home", "Report"]


def test_record_round_trip(populated: WorkspaceManager) -> None:
    populated.goto([0, 1])
    populated.set_complete(True)
    populated.set_description("weekly")

    restored = WorkspaceManager.from_record(populated.to_record())

    assert restored.at_root
    assert restored.outline() == populated.outline()
    assert restored.snapshot_of([0, 0]).due_date == "2020-04-06T16:30:00"


def test_from_record_rejects_string_complete_flag() -> None:
    with pytest.raises(ValueError, match="non-boolean complete flag"):
        WorkspaceManager.from_record({"name": "r", "complete": "false"})
