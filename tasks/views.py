from drf_spectacular.utils import extend_schema, OpenApiParameter

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter

from rest_framework import generics, status, viewsets
from rest_framework.decorators import api_view
from rest_framework.response import Response

from tasks.apps import get_board
from tasks.filters import TaskFilter
from tasks.models import Task, Subtask, Label
from tasks.serializers import (
    TaskSerializer, TaskCreateSerializer, TaskUpdateSerializer,
    SubtaskSerializer, SubtaskCreateSerializer, SubtaskUpdateSerializer,
    LabelSerializer, LabelWriteSerializer, BoardSerializer,
)


class TaskListCreateView(generics.ListCreateAPIView):
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = TaskFilter
    ordering_fields = [
        'id', 'title', 'created_at', 'updated_at', 'due_date',
        'status', 'priority', 'position'
    ]
    # Column order first so clients can group without re-sorting
    ordering = ['status', 'position', 'id']

    def get_serializer_class(self):
        return TaskCreateSerializer if self.request.method == 'POST' else TaskSerializer

    def get_queryset(self):
        return Task.objects.using(get_board().using).prefetch_related('subtasks', 'task_labels')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = get_board().create_task(**serializer.validated_data)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


class TaskDetailView(generics.RetrieveUpdateDestroyAPIView):
    # partial updates only, status and position change through move/
    http_method_names = ['get', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return TaskUpdateSerializer
        return TaskSerializer

    def get_queryset(self):
        return Task.objects.using(get_board().using).prefetch_related('subtasks', 'task_labels')

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)
        task = get_board().update_task(self.kwargs['pk'], **serializer.validated_data)
        return Response(TaskSerializer(task).data)

    def destroy(self, request, *args, **kwargs):
        get_board().delete_task(self.kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    parameters=[OpenApiParameter(name="label", type=int, required=False)],
    responses=BoardSerializer,
)
@api_view(['GET'])
def board_view(request):
    """Tasks grouped into the todo, in-progress and done columns in position order."""
    label = request.query_params.get('label')
    if label is not None and not label.isdigit():
        return Response({'errors': {'label': ['A valid integer is required.']}}, status=status.HTTP_400_BAD_REQUEST)
    columns = get_board().board(label=int(label) if label is not None else None)
    return Response({
        column: TaskSerializer(tasks, many=True).data
        for column, tasks in columns.items()
    })


class SubtaskListCreateView(generics.ListCreateAPIView):
    """Checklist of one task, in position order"""
    filter_backends = []
    pagination_class = None

    def get_serializer_class(self):
        return SubtaskCreateSerializer if self.request.method == 'POST' else SubtaskSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Subtask.objects.none()
        return get_board().subtasks(self.kwargs['task_pk'])

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subtask = get_board().create_subtask(self.kwargs['task_pk'], serializer.validated_data['title'])
        return Response(SubtaskSerializer(subtask).data, status=status.HTTP_201_CREATED)


class SubtaskDetailView(generics.RetrieveUpdateDestroyAPIView):
    http_method_names = ['get', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        return SubtaskUpdateSerializer if self.request.method == 'PATCH' else SubtaskSerializer

    def get_queryset(self):
        return Subtask.objects.using(get_board().using)

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subtask = get_board().rename_subtask(self.kwargs['pk'], serializer.validated_data['title'])
        return Response(SubtaskSerializer(subtask).data)

    def destroy(self, request, *args, **kwargs):
        get_board().delete_subtask(self.kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)


class LabelViewSet(viewsets.ModelViewSet):
    """Labels available on the board. Deleting one detaches it from every task."""
    serializer_class = LabelSerializer
    pagination_class = None
    lookup_value_regex = r"\d+"
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return Label.objects.using(get_board().using).order_by('id')

    def create(self, request, *args, **kwargs):
        serializer = LabelWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        label = get_board().create_label(
            serializer.validated_data.get('name'),
            serializer.validated_data.get('color'),
        )
        return Response(LabelSerializer(label).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = LabelWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        label = get_board().update_label(self.kwargs['pk'], **serializer.validated_data)
        return Response(LabelSerializer(label).data)

    def destroy(self, request, *args, **kwargs):
        get_board().delete_label(self.kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)
