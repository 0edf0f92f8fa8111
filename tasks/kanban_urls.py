from django.urls import path
from tasks.kanban_views import (
    move_task, move_subtask, toggle_subtask, task_labels, task_label
)

urlpatterns = [
    # Task movement endpoints
    path('<int:task_id>/move/', move_task, name='move-task'),

    # Subtask endpoints
    path('subtasks/<int:subtask_id>/move/', move_subtask, name='move-subtask'),
    path('subtasks/<int:subtask_id>/toggle/', toggle_subtask, name='toggle-subtask'),

    # Task label endpoints
    path('<int:task_id>/labels/', task_labels, name='task-labels'),
    path('<int:task_id>/labels/<int:label_id>/', task_label, name='task-label'),
]
