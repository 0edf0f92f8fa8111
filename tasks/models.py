from django.db import models
from django.utils import timezone
from taggit.managers import TaggableManager
from taggit.models import ItemBase, TagBase

from core.models import BaseModel
from common.enums import TaskStatus, PriorityLevel, LabelColor
from common.date_utils import relative_due


class Label(TagBase):
    """A named, coloured label that can be attached to any number of tasks."""
    color = models.CharField(max_length=16, choices=LabelColor.choices, default=LabelColor.GRAY)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.name} ({self.get_color_display()})"


class TaskLabel(ItemBase):
    """Cross-reference row between a task and a label."""
    tag = models.ForeignKey(Label, on_delete=models.CASCADE, related_name='tagged_tasks')
    content_object = models.ForeignKey('Task', on_delete=models.CASCADE, related_name='task_labels')

    class Meta:
        unique_together = ('content_object', 'tag')


class Task(BaseModel):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    status = models.CharField(max_length=32, choices=TaskStatus.choices, default=TaskStatus.TODO)
    priority = models.CharField(max_length=20, choices=PriorityLevel.choices, default=PriorityLevel.MEDIUM)
    due_date = models.DateField(null=True, blank=True)
    # Position within the status column, dense from 0
    position = models.PositiveIntegerField(default=0)
    labels = TaggableManager(through=TaskLabel, blank=True)

    class Meta:
        ordering = ['status', 'position', 'id']
        indexes = [
            models.Index(fields=['status', 'position'], name='tasks_task_status_4d3a3b_idx'),
            models.Index(fields=['due_date'], name='tasks_task_due_dat_bce847_idx'),
        ]

    def __str__(self):
        return f"{self.get_status_display()}: {self.title}"

    @property
    def is_overdue(self):
        return bool(self.due_date) and self.status != TaskStatus.DONE and self.due_date < timezone.localdate()

    @property
    def due(self):
        """Relative label and urgency for the due date, or None."""
        if not self.due_date:
            return None
        return relative_due(self.due_date)


class Subtask(BaseModel):
    """
    Checklist items for tasks to break down work into smaller actionable items.
    """
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='subtasks')
    title = models.CharField(max_length=255)
    completed = models.BooleanField(default=False)
    # Position within the parent task's checklist, dense from 0
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'id']
        indexes = [
            models.Index(fields=['task', 'position'], name='tasks_subta_task_id_2f0b8e_idx'),
        ]

    def __str__(self):
        status = "✓" if self.completed else "○"
        return f"{status} {self.title}"
