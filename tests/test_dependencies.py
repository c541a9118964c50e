"""Tests for taskdeps.dependencies: adding and removing single edges."""

from __future__ import annotations

import pytest

from taskdeps.dependencies import add_dependency, remove_dependency
from taskdeps.errors import DependencyError, ErrorCode
from taskdeps.tasks.cycles import detect_cycles
from taskdeps.tasks.ids import normalize


@pytest.fixture
def two_tasks(make_task, make_collection):
    return make_collection([make_task(1), make_task(2)])


# ═══════════════════════════════════════════════════════════════════
#  add_dependency
# ═══════════════════════════════════════════════════════════════════


class TestAddDependency:
    def test_simple_add(self, two_tasks):
        assert add_dependency(two_tasks, 2, 1) is True
        assert two_tasks.get_task(2).dependencies == [1]

    def test_closing_a_cycle_fails(self, two_tasks):
        add_dependency(two_tasks, 2, 1)
        with pytest.raises(DependencyError) as exc:
            add_dependency(two_tasks, 1, 2)
        assert exc.value.code is ErrorCode.CIRCULAR_DEPENDENCY
        assert two_tasks.get_task(1).dependencies == []

    def test_self_dependency_fails(self, make_task, make_collection):
        c = make_collection([make_task(7)])
        before = c.snapshot()
        with pytest.raises(DependencyError) as exc:
            add_dependency(c, 7, 7)
        assert exc.value.code is ErrorCode.SELF_DEPENDENCY
        assert c.snapshot() == before

    def test_subtask_self_dependency_fails(self, make_task, make_subtask, make_collection):
        c = make_collection([make_task(1, subtasks=[make_subtask(1)])])
        with pytest.raises(DependencyError) as exc:
            add_dependency(c, "1.1", "1.1")
        assert exc.value.code is ErrorCode.SELF_DEPENDENCY

    def test_missing_dependency_target(self, two_tasks):
        with pytest.raises(DependencyError) as exc:
            add_dependency(two_tasks, 1, 42)
        assert exc.value.code is ErrorCode.DEPENDENCY_NOT_FOUND

    def test_missing_dependency_checked_before_task(self, two_tasks):
        with pytest.raises(DependencyError) as exc:
            add_dependency(two_tasks, 99, 42)
        assert exc.value.code is ErrorCode.DEPENDENCY_NOT_FOUND

    def test_missing_task(self, two_tasks):
        with pytest.raises(DependencyError) as exc:
            add_dependency(two_tasks, 99, 1)
        assert exc.value.code is ErrorCode.TASK_NOT_FOUND

    def test_missing_subtask_owner_reported_as_task_not_found(self, two_tasks):
        with pytest.raises(DependencyError) as exc:
            add_dependency(two_tasks, "1.5", 2)
        assert exc.value.code is ErrorCode.TASK_NOT_FOUND
        assert "1.5" in exc.value.message

    def test_invalid_id_format(self, two_tasks):
        with pytest.raises(DependencyError) as exc:
            add_dependency(two_tasks, "abc", 1)
        assert exc.value.code is ErrorCode.INVALID_ID_FORMAT

    def test_duplicate_is_noop(self, two_tasks):
        add_dependency(two_tasks, 2, 1)
        assert add_dependency(two_tasks, 2, "1") is False
        assert two_tasks.get_task(2).dependencies == [1]

    def test_sorted_numbers_before_subtasks(self, make_task, make_subtask, make_collection):
        c = make_collection([
            make_task(1, subtasks=[make_subtask(1), make_subtask(2)]),
            make_task(2),
            make_task(3),
            make_task(5),
        ])
        for dep in ("1.2", 3, "1.1", 2):
            add_dependency(c, 5, dep)
        assert c.get_task(5).dependencies == [2, 3, "1.1", "1.2"]

    def test_subtask_on_sibling(self, make_task, make_subtask, make_collection):
        c = make_collection([make_task(3, subtasks=[make_subtask(1), make_subtask(2)])])
        assert add_dependency(c, "3.2", "3.1") is True
        assert c.get_task(3).get_subtask(2).dependencies == ["3.1"]

    def test_sibling_shorthand_counts_as_existing(self, make_task, make_subtask, make_collection):
        c = make_collection([make_task(3, subtasks=[make_subtask(1), make_subtask(2, dependencies=[1])])])
        assert add_dependency(c, "3.2", "3.1") is False

    def test_sibling_shorthand_cycle(self, make_task, make_subtask, make_collection):
        c = make_collection([make_task(3, subtasks=[make_subtask(1), make_subtask(2, dependencies=[1])])])
        with pytest.raises(DependencyError) as exc:
            add_dependency(c, "3.1", "3.2")
        assert exc.value.code is ErrorCode.CIRCULAR_DEPENDENCY

    def test_small_task_id_on_subtask_stored_unambiguously(self, make_task, make_subtask, make_collection):
        """Task 1 as a dependency of subtask 3.1 must not read back as sibling 3.1."""
        c = make_collection([make_task(1), make_task(3, subtasks=[make_subtask(1)])])
        assert add_dependency(c, "3.1", 1) is True
        assert c.get_task(3).get_subtask(1).dependencies == ["1"]
        assert add_dependency(c, "3.1", 1) is False

    def test_no_cycles_after_successful_adds(self, make_task, make_collection):
        c = make_collection([make_task(i) for i in range(1, 7)])
        attempts = [(2, 1), (3, 2), (1, 3), (4, 3), (5, 4), (3, 5), (6, 6), (6, 1), (1, 6)]
        for task_id, dep_id in attempts:
            try:
                add_dependency(c, task_id, dep_id)
            except DependencyError:
                pass
        assert detect_cycles(c) == []
        for task in c.tasks:
            assert str(task.id) not in {normalize(d) for d in task.dependencies}


# ═══════════════════════════════════════════════════════════════════
#  remove_dependency
# ═══════════════════════════════════════════════════════════════════


class TestRemoveDependency:
    def test_remove_existing(self, make_task, make_collection):
        c = make_collection([make_task(1), make_task(2, dependencies=[1])])
        assert remove_dependency(c, 2, 1) is True
        assert c.get_task(2).dependencies == []

    def test_missing_edge_is_noop(self, make_task, make_collection):
        c = make_collection([make_task(1), make_task(2), make_task(5, dependencies=[1, 2])])
        before = c.snapshot()
        assert remove_dependency(c, 5, 99) is False
        assert c.snapshot() == before

    def test_empty_list_is_noop(self, two_tasks):
        assert remove_dependency(two_tasks, 1, 2) is False

    def test_idempotent(self, make_task, make_collection):
        c = make_collection([make_task(1), make_task(2, dependencies=[1])])
        remove_dependency(c, 2, 1)
        once = c.snapshot()
        assert remove_dependency(c, 2, 1) is False
        assert c.snapshot() == once

    def test_missing_task_fails(self, two_tasks):
        with pytest.raises(DependencyError) as exc:
            remove_dependency(two_tasks, 9, 1)
        assert exc.value.code is ErrorCode.TASK_NOT_FOUND

    def test_numeric_string_entry_matches_int(self, make_task, make_collection):
        c = make_collection([make_task(1), make_task(2, dependencies=["1"])])
        assert remove_dependency(c, 2, 1) is True
        assert c.get_task(2).dependencies == []

    def test_qualified_id_removes_sibling_shorthand(self, make_task, make_subtask, make_collection):
        c = make_collection([make_task(3, subtasks=[make_subtask(1), make_subtask(2, dependencies=[1])])])
        assert remove_dependency(c, "3.2", "3.1") is True
        assert c.get_task(3).get_subtask(2).dependencies == []

    def test_task_id_does_not_remove_sibling_shorthand(self, make_task, make_subtask, make_collection):
        """A bare 1 in 3.2 means 3.1, so removing task 1 leaves it alone."""
        c = make_collection([
            make_task(1),
            make_task(3, subtasks=[make_subtask(1), make_subtask(2, dependencies=[1])]),
        ])
        assert remove_dependency(c, "3.2", 1) is False
        assert c.get_task(3).get_subtask(2).dependencies == [1]

    def test_task_dependency_on_subtask_removed_by_task_id(self, make_task, make_subtask, make_collection):
        c = make_collection([make_task(1), make_task(3, subtasks=[make_subtask(1)])])
        add_dependency(c, "3.1", 1)
        assert remove_dependency(c, "3.1", 1) is True
        assert c.get_task(3).get_subtask(1).dependencies == []


class TestAddRemoveInverse:
    def test_remove_undoes_add(self, make_task, make_subtask, make_collection):
        c = make_collection([
            make_task(1),
            make_task(2, subtasks=[make_subtask(1)]),
            make_task(3, dependencies=[1]),
        ])
        before = c.snapshot()
        add_dependency(c, 3, "2.1")
        remove_dependency(c, 3, "2.1")
        assert c.snapshot() == before
