from django.urls import path, include
from rest_framework.routers import DefaultRouter
from tasks.views import (
    TaskListCreateView, TaskDetailView, board_view,
    SubtaskListCreateView, SubtaskDetailView, LabelViewSet,
)

router = DefaultRouter()
router.register(r'labels', LabelViewSet, basename='label')

urlpatterns = [
    path('', TaskListCreateView.as_view(), name='task-list-create'),
    path('<int:pk>/', TaskDetailView.as_view(), name='task-detail'),
    path('board/', board_view, name='task-board'),

    # Subtasks nested under their task for listing and creation
    path('<int:task_pk>/subtasks/', SubtaskListCreateView.as_view(), name='subtask-list-create'),
    path('subtasks/<int:pk>/', SubtaskDetailView.as_view(), name='subtask-detail'),

    path('', include(router.urls)),

    # Include Kanban URLs
    path('', include('tasks.kanban_urls')),
]
