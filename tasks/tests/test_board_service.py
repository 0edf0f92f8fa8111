import pytest
from datetime import date, timedelta
from unittest import mock

from django.core.management import call_command
from django.db import DatabaseError

from common.enums import TaskStatus, PriorityLevel, LabelColor
from common.exceptions import NotFound, StorageFailure, ValidationFailed
from tasks.models import Task, Subtask, Label, TaskLabel
from tasks.services import BoardService
from tasks.management.commands.seed_board import SEED_TASKS, SEED_LABELS


def positions(tasks):
    return [(task.title, task.position) for task in tasks]


@pytest.mark.django_db(transaction=True)
class TestTaskOperations:
    """Task lifecycle through the board service"""

    def setup_method(self):
        self.board = BoardService()

    def test_create_task_appends_to_todo(self):
        first = self.board.create_task("First")
        second = self.board.create_task("Second", description="More", priority=PriorityLevel.HIGH)

        assert first.status == TaskStatus.TODO
        assert (first.position, second.position) == (0, 1)
        assert second.priority == PriorityLevel.HIGH
        assert second.description == "More"

    def test_create_task_strips_title(self):
        task = self.board.create_task("  Padded  ")
        assert task.title == "Padded"

    def test_create_task_requires_title(self):
        with pytest.raises(ValidationFailed):
            self.board.create_task("   ")
        assert not Task.objects.exists()

    def test_create_task_rejects_unknown_priority(self):
        with pytest.raises(ValidationFailed):
            self.board.create_task("Task", priority="urgent")

    def test_update_task_fields(self):
        task = self.board.create_task("Old")
        due = date.today() + timedelta(days=5)

        updated = self.board.update_task(task.id, title="New", priority=PriorityLevel.LOW, due_date=due)

        task.refresh_from_db()
        assert updated.title == task.title == "New"
        assert task.priority == PriorityLevel.LOW
        assert task.due_date == due

    def test_update_task_cannot_touch_ordering_fields(self):
        task = self.board.create_task("Task")
        with pytest.raises(ValidationFailed):
            self.board.update_task(task.id, position=4)
        with pytest.raises(ValidationFailed):
            self.board.update_task(task.id, status=TaskStatus.DONE)

    def test_update_missing_task(self):
        with pytest.raises(NotFound):
            self.board.update_task(999, title="Nope")

    def test_delete_task_compacts_column(self):
        a = self.board.create_task("A")
        self.board.create_task("B")
        self.board.create_task("C")

        self.board.delete_task(a.id)

        assert positions(self.board.board()[TaskStatus.TODO]) == [("B", 0), ("C", 1)]

    def test_move_task_between_columns(self):
        a = self.board.create_task("A")
        b = self.board.create_task("B")
        self.board.move_task(b.id, TaskStatus.DONE, 0)

        moved = self.board.move_task(a.id, TaskStatus.DONE, 5)

        columns = self.board.board()
        assert moved.status == TaskStatus.DONE
        assert columns[TaskStatus.TODO] == []
        assert positions(columns[TaskStatus.DONE]) == [("B", 0), ("A", 1)]

    def test_move_task_rejects_unknown_status(self):
        task = self.board.create_task("A")
        with pytest.raises(ValidationFailed):
            self.board.move_task(task.id, "archived", 0)

    def test_board_has_every_column(self):
        columns = self.board.board()
        assert list(columns) == [TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE]
        assert all(tasks == [] for tasks in columns.values())

    def test_board_filters_by_label(self):
        a = self.board.create_task("A")
        self.board.create_task("B")
        label = self.board.create_label("Bug", LabelColor.RED)
        self.board.add_label_to_task(a.id, label.id)

        columns = self.board.board(label=label.id)

        assert [task.title for task in columns[TaskStatus.TODO]] == ["A"]


@pytest.mark.django_db(transaction=True)
class TestSubtaskOperations:
    """Checklist ordering per task"""

    def setup_method(self):
        self.board = BoardService()
        self.task = self.board.create_task("Parent")

    def test_create_subtasks_in_order(self):
        self.board.create_subtask(self.task.id, "one")
        self.board.create_subtask(self.task.id, "two")

        assert positions(self.board.subtasks(self.task.id)) == [("one", 0), ("two", 1)]

    def test_create_subtask_validation(self):
        with pytest.raises(ValidationFailed):
            self.board.create_subtask(self.task.id, "")
        with pytest.raises(NotFound):
            self.board.create_subtask(999, "orphan")

    def test_toggle_and_rename(self):
        subtask = self.board.create_subtask(self.task.id, "one")

        self.board.toggle_subtask(subtask.id, True)
        self.board.rename_subtask(subtask.id, "renamed")

        subtask.refresh_from_db()
        assert subtask.completed is True
        assert subtask.title == "renamed"

    def test_toggle_missing_subtask(self):
        with pytest.raises(NotFound):
            self.board.toggle_subtask(999, True)

    def test_delete_subtask_compacts(self):
        one = self.board.create_subtask(self.task.id, "one")
        self.board.create_subtask(self.task.id, "two")
        self.board.create_subtask(self.task.id, "three")

        self.board.delete_subtask(one.id)

        assert positions(self.board.subtasks(self.task.id)) == [("two", 0), ("three", 1)]

    def test_move_subtask_within_task(self):
        one = self.board.create_subtask(self.task.id, "one")
        self.board.create_subtask(self.task.id, "two")

        self.board.move_subtask(one.id, 1)

        assert positions(self.board.subtasks(self.task.id)) == [("two", 0), ("one", 1)]

    def test_move_subtask_to_another_task(self):
        other = self.board.create_task("Other")
        one = self.board.create_subtask(self.task.id, "one")
        self.board.create_subtask(self.task.id, "two")
        self.board.create_subtask(other.id, "x")

        moved = self.board.move_subtask(one.id, 0, task_id=other.id)

        assert moved.task_id == other.id
        assert positions(self.board.subtasks(self.task.id)) == [("two", 0)]
        assert positions(self.board.subtasks(other.id)) == [("one", 0), ("x", 1)]

    def test_move_subtask_to_missing_task(self):
        one = self.board.create_subtask(self.task.id, "one")
        with pytest.raises(NotFound):
            self.board.move_subtask(one.id, 0, task_id=999)
        assert Subtask.objects.get(pk=one.id).task_id == self.task.id


@pytest.mark.django_db(transaction=True)
class TestLabelOperations:
    """Label catalogue and task attachments"""

    def setup_method(self):
        self.board = BoardService()
        self.task = self.board.create_task("Task")

    def test_create_and_list_labels(self):
        self.board.create_label("Bug", LabelColor.RED)
        self.board.create_label("Feature", LabelColor.BLUE)

        labels = self.board.list_labels()

        assert [(label.name, label.color) for label in labels] == [
            ("Bug", LabelColor.RED),
            ("Feature", LabelColor.BLUE),
        ]
        assert labels[0].slug == "bug"

    def test_create_label_validation(self):
        with pytest.raises(ValidationFailed):
            self.board.create_label("", LabelColor.RED)
        with pytest.raises(ValidationFailed):
            self.board.create_label("Bug", "teal")

    def test_duplicate_label_name(self):
        self.board.create_label("Bug", LabelColor.RED)
        with pytest.raises(ValidationFailed):
            self.board.create_label("Bug", LabelColor.BLUE)
        assert Label.objects.count() == 1

    def test_update_label(self):
        label = self.board.create_label("Bug", LabelColor.RED)

        self.board.update_label(label.id, color=LabelColor.ORANGE)

        label.refresh_from_db()
        assert label.name == "Bug"
        assert label.color == LabelColor.ORANGE

    def test_rename_label_refreshes_slug(self):
        label = self.board.create_label("Bug", LabelColor.RED)

        self.board.update_label(label.id, name="Known Defect")

        label.refresh_from_db()
        assert label.name == "Known Defect"
        assert label.slug == "known-defect"

    def test_recolor_keeps_slug(self):
        label = self.board.create_label("Bug", LabelColor.RED)

        self.board.update_label(label.id, color=LabelColor.PINK)

        label.refresh_from_db()
        assert label.slug == "bug"

    def test_rename_to_taken_name(self):
        self.board.create_label("Bug", LabelColor.RED)
        docs = self.board.create_label("Docs", LabelColor.GREEN)

        with pytest.raises(ValidationFailed):
            self.board.update_label(docs.id, name="Bug")

        docs.refresh_from_db()
        assert (docs.name, docs.slug) == ("Docs", "docs")

    def test_attach_is_idempotent(self):
        label = self.board.create_label("Bug", LabelColor.RED)

        self.board.add_label_to_task(self.task.id, label.id)
        self.board.add_label_to_task(self.task.id, label.id)

        assert TaskLabel.objects.filter(content_object=self.task).count() == 1
        assert self.board.task_labels(self.task.id) == [label]

    def test_detach_is_idempotent(self):
        label = self.board.create_label("Bug", LabelColor.RED)
        self.board.add_label_to_task(self.task.id, label.id)

        self.board.remove_label_from_task(self.task.id, label.id)
        self.board.remove_label_from_task(self.task.id, label.id)

        assert self.board.task_labels(self.task.id) == []

    def test_attach_missing_label(self):
        with pytest.raises(NotFound):
            self.board.add_label_to_task(self.task.id, 999)
        with pytest.raises(NotFound):
            self.board.task_labels(999)

    def test_delete_label_detaches_from_tasks(self):
        label = self.board.create_label("Bug", LabelColor.RED)
        self.board.add_label_to_task(self.task.id, label.id)

        self.board.delete_label(label.id)

        assert not Label.objects.exists()
        assert not TaskLabel.objects.exists()
        assert Task.objects.filter(pk=self.task.id).exists()

    def test_delete_missing_label(self):
        with pytest.raises(NotFound):
            self.board.delete_label(999)


@pytest.mark.django_db(transaction=True)
class TestStorageFailures:

    def setup_method(self):
        self.board = BoardService()

    def test_save_failure_is_reported_as_storage_failure(self):
        task = self.board.create_task("Task")
        with mock.patch.object(Task, 'save', side_effect=DatabaseError("read only")):
            with pytest.raises(StorageFailure):
                self.board.update_task(task.id, title="New")
        task.refresh_from_db()
        assert task.title == "Task"


@pytest.mark.django_db(transaction=True)
class TestSeedCommand:

    def test_seed_board_populates_empty_tables(self):
        call_command('seed_board', verbosity=0)

        board = BoardService().board()
        for status, rows in SEED_TASKS.items():
            assert [task.title for task in board[status]] == [row[0] for row in rows]
            assert [task.position for task in board[status]] == list(range(len(rows)))
        assert Label.objects.count() == len(SEED_LABELS)

    def test_seed_board_skips_existing_data(self):
        board = BoardService()
        board.create_task("Mine")
        board.create_label("Mine", LabelColor.GRAY)

        call_command('seed_board', verbosity=0)

        assert Task.objects.count() == 1
        assert Label.objects.count() == 1
