from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from tasks.apps import get_board
from tasks.models import Task
from tasks.serializers import (
    TaskMoveSerializer, TaskSerializer, SubtaskMoveSerializer,
    SubtaskToggleSerializer, SubtaskSerializer, LabelSerializer,
)


@extend_schema(
    parameters=[OpenApiParameter(name="task_id", type=int, location=OpenApiParameter.PATH)],
    request=TaskMoveSerializer,
    responses=TaskSerializer,
)
@api_view(['POST'])
def move_task(request, task_id):
    """Move a task to a position in the same or another column"""
    serializer = TaskMoveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    board = get_board()
    board.move_task(
        task_id,
        serializer.validated_data['status'],
        serializer.validated_data['position'],
    )
    task = Task.objects.using(board.using).prefetch_related('subtasks', 'task_labels').get(pk=task_id)
    return Response(TaskSerializer(task).data)


@extend_schema(
    parameters=[OpenApiParameter(name="subtask_id", type=int, location=OpenApiParameter.PATH)],
    request=SubtaskMoveSerializer,
    responses=SubtaskSerializer,
)
@api_view(['POST'])
def move_subtask(request, subtask_id):
    """Reorder a subtask within its task, or move it to another task when `task` is given"""
    serializer = SubtaskMoveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    subtask = get_board().move_subtask(
        subtask_id,
        serializer.validated_data['position'],
        task_id=serializer.validated_data['task'],
    )
    return Response(SubtaskSerializer(subtask).data)


@extend_schema(
    parameters=[OpenApiParameter(name="subtask_id", type=int, location=OpenApiParameter.PATH)],
    request=SubtaskToggleSerializer,
    responses=SubtaskSerializer,
)
@api_view(['POST'])
def toggle_subtask(request, subtask_id):
    serializer = SubtaskToggleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    subtask = get_board().toggle_subtask(subtask_id, serializer.validated_data['completed'])
    return Response(SubtaskSerializer(subtask).data)


@extend_schema(
    parameters=[
        OpenApiParameter(name="task_id", type=int, location=OpenApiParameter.PATH),
    ],
    responses=LabelSerializer(many=True),
)
@api_view(['GET'])
def task_labels(request, task_id):
    labels = get_board().task_labels(task_id)
    return Response(LabelSerializer(labels, many=True).data)


@extend_schema(
    parameters=[
        OpenApiParameter(name="task_id", type=int, location=OpenApiParameter.PATH),
        OpenApiParameter(name="label_id", type=int, location=OpenApiParameter.PATH),
    ],
    request=None,
    responses={204: None},
)
@api_view(['POST', 'DELETE'])
def task_label(request, task_id, label_id):
    """Attach (POST) or detach (DELETE) a label. Both are no-ops when already in that state."""
    board = get_board()
    if request.method == 'POST':
        board.add_label_to_task(task_id, label_id)
    else:
        board.remove_label_from_task(task_id, label_id)
    return Response(status=status.HTTP_204_NO_CONTENT)
