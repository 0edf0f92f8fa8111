# tests/factories.py
import factory
from factory.django import DjangoModelFactory

from common.enums import TaskStatus, PriorityLevel, LabelColor
from tasks.models import Task, Subtask, Label


class TaskFactory(DjangoModelFactory):
    """Creates tasks directly; pass ``position`` explicitly to keep a column dense."""

    class Meta:
        model = Task

    title = factory.Sequence(lambda n: f"Task {n}")
    description = "A test task"
    status = TaskStatus.TODO
    priority = PriorityLevel.MEDIUM
    position = 0


class SubtaskFactory(DjangoModelFactory):
    class Meta:
        model = Subtask

    task = factory.SubFactory(TaskFactory)
    title = factory.Sequence(lambda n: f"Subtask {n}")
    completed = False
    position = 0


class LabelFactory(DjangoModelFactory):
    class Meta:
        model = Label
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"Label {n}")
    color = LabelColor.BLUE


def make_column(status, *titles):
    """Dense column ``status`` holding one task per title, in order."""
    return [
        TaskFactory(title=title, status=status, position=index)
        for index, title in enumerate(titles)
    ]


def make_checklist(task, *titles):
    return [
        SubtaskFactory(task=task, title=title, position=index)
        for index, title in enumerate(titles)
    ]
