"""
Board operations: tasks ordered in status columns, subtasks ordered per task,
and labels attached to tasks.

All ordering goes through two :class:`core.ordering.OrderedPartitionManager`
instances, one per partitioning, bound to the database alias the service was
built with.
"""
import logging

from django.db import DEFAULT_DB_ALIAS, DatabaseError, IntegrityError, transaction
from django.db.models import Prefetch

from common.enums import TaskStatus, PriorityLevel, LabelColor
from common.exceptions import NotFound, StorageFailure, ValidationFailed
from core.ordering import OrderedPartitionManager
from tasks.models import Task, Subtask, Label, TaskLabel

logger = logging.getLogger(__name__)

TASK_FIELDS = ('title', 'description', 'priority', 'due_date')


def _clean_title(title, message="Title is required"):
    title = (title or '').strip()
    if not title:
        raise ValidationFailed(message)
    return title


class BoardService:
    """Task board operations bound to one database alias."""

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using
        self.columns = OrderedPartitionManager(Task, 'status', using=using)
        self.checklists = OrderedPartitionManager(Subtask, 'task', using=using)

    def _get(self, model, pk):
        try:
            return model._default_manager.using(self.using).get(pk=pk)
        except model.DoesNotExist:
            raise NotFound(f"{model._meta.verbose_name.capitalize()} not found") from None

    def _save(self, obj, fields, action):
        try:
            obj.save(using=self.using, update_fields=[*fields, 'updated_at'])
        except DatabaseError as exc:
            logger.exception("Failed to %s %s", action, obj.pk)
            raise StorageFailure(f"Failed to {action}") from exc
        return obj

    # Tasks

    def board(self, label=None):
        """Tasks grouped by status column, each column in position order."""
        qs = Task.objects.using(self.using).prefetch_related(
            Prefetch('subtasks', queryset=Subtask.objects.using(self.using).order_by('position', 'id')),
            'task_labels',
        )
        if label is not None:
            qs = qs.filter(task_labels__tag_id=label)
        columns = {status: [] for status in TaskStatus.values}
        for task in qs.order_by('position', 'id'):
            columns[task.status].append(task)
        return columns

    def create_task(self, title, description='', priority=PriorityLevel.MEDIUM, due_date=None):
        """New tasks always land at the end of the todo column."""
        if priority not in PriorityLevel.values:
            raise ValidationFailed(f"Invalid priority: {priority}")
        task = self.columns.append(
            TaskStatus.TODO,
            title=_clean_title(title),
            description=description or '',
            priority=priority,
            due_date=due_date,
        )
        logger.info("Created task %s at position %s", task.pk, task.position)
        return task

    def update_task(self, task_id, **data):
        task = self._get(Task, task_id)
        unknown = set(data) - set(TASK_FIELDS)
        if unknown:
            raise ValidationFailed(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if 'title' in data:
            data['title'] = _clean_title(data['title'])
        if 'priority' in data and data['priority'] not in PriorityLevel.values:
            raise ValidationFailed(f"Invalid priority: {data['priority']}")
        for field, value in data.items():
            setattr(task, field, value)
        return self._save(task, data.keys(), "update task")

    def delete_task(self, task_id):
        """Deletes the task with its subtasks and label links, then compacts its column."""
        self.columns.remove_and_compact(task_id)

    def move_task(self, task_id, status, position):
        if status not in TaskStatus.values:
            raise ValidationFailed(f"Invalid status: {status}")
        return self.columns.move_across_partition(task_id, status, position)

    # Subtasks

    def subtasks(self, task_id):
        task = self._get(Task, task_id)
        return self.checklists.siblings(task)

    def create_subtask(self, task_id, title):
        title = _clean_title(title, "Subtask title is required")
        task = self._get(Task, task_id)
        return self.checklists.append(task, title=title, completed=False)

    def toggle_subtask(self, subtask_id, completed):
        subtask = self._get(Subtask, subtask_id)
        subtask.completed = bool(completed)
        return self._save(subtask, ['completed'], "toggle subtask")

    def rename_subtask(self, subtask_id, title):
        subtask = self._get(Subtask, subtask_id)
        subtask.title = _clean_title(title, "Subtask title is required")
        return self._save(subtask, ['title'], "rename subtask")

    def delete_subtask(self, subtask_id):
        self.checklists.remove_and_compact(subtask_id)

    def move_subtask(self, subtask_id, position, task_id=None):
        """Reorder a subtask in its checklist, or move it onto another task when ``task_id`` is given."""
        if task_id is None:
            return self.checklists.move_within_partition(subtask_id, position)
        target = self._get(Task, task_id)
        return self.checklists.move_across_partition(subtask_id, target, position)

    # Labels

    def list_labels(self):
        return list(Label.objects.using(self.using).order_by('id'))

    def _clean_label(self, name=None, color=None):
        data = {}
        if name is not None:
            data['name'] = _clean_title(name, "Label name is required")
        if color is not None:
            if color not in LabelColor.values:
                raise ValidationFailed("Invalid label color")
            data['color'] = color
        return data

    def create_label(self, name, color):
        data = self._clean_label(name=name or '', color=color or '')
        try:
            with transaction.atomic(using=self.using):
                label = Label(**data)
                label.save(using=self.using)
        except IntegrityError:
            raise ValidationFailed(f"Label {data['name']!r} already exists") from None
        return label

    def update_label(self, label_id, name=None, color=None):
        label = self._get(Label, label_id)
        data = self._clean_label(name=name, color=color)
        for field, value in data.items():
            setattr(label, field, value)
        if 'name' in data:
            # taggit only derives the slug when the tag is first saved
            label.slug = label.slugify(label.name)
        try:
            with transaction.atomic(using=self.using):
                label.save(using=self.using)
        except IntegrityError:
            raise ValidationFailed(f"Label {label.name!r} already exists") from None
        return label

    def delete_label(self, label_id):
        """Removing a label also removes it from every task."""
        try:
            with transaction.atomic(using=self.using):
                label = Label.objects.using(self.using).select_for_update().filter(pk=label_id).first()
                if label is None:
                    raise NotFound("Label not found")
                label.delete(using=self.using)
        except DatabaseError as exc:
            logger.exception("Failed to delete label %s", label_id)
            raise StorageFailure("Failed to delete label") from exc

    def add_label_to_task(self, task_id, label_id):
        task = self._get(Task, task_id)
        label = self._get(Label, label_id)
        # the tag manager skips labels the task already has
        task.labels.add(label)

    def remove_label_from_task(self, task_id, label_id):
        TaskLabel.objects.using(self.using).filter(content_object_id=task_id, tag_id=label_id).delete()

    def task_labels(self, task_id):
        task = self._get(Task, task_id)
        return list(Label.objects.using(self.using).filter(tagged_tasks__content_object=task).order_by('id'))
