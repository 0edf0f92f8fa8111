from rest_framework import serializers

from common.enums import TaskStatus, PriorityLevel, LabelColor
from tasks.models import Task, Subtask, Label


class SubtaskSerializer(serializers.ModelSerializer):
    """Serializer for task checklist items"""

    class Meta:
        model = Subtask
        fields = ['id', 'task', 'title', 'completed', 'position', 'created_at', 'updated_at']
        read_only_fields = fields


class LabelSerializer(serializers.ModelSerializer):
    class Meta:
        model = Label
        fields = ['id', 'name', 'slug', 'color']
        read_only_fields = ['id', 'slug']


class LabelWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    color = serializers.ChoiceField(choices=LabelColor.choices, required=False)


class TaskSerializer(serializers.ModelSerializer):
    is_overdue = serializers.ReadOnlyField()
    due_label = serializers.SerializerMethodField()
    due_urgency = serializers.SerializerMethodField()
    subtasks = SubtaskSerializer(many=True, read_only=True)
    labels = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = (
            'id', 'title', 'description', 'status', 'priority', 'position',
            'due_date', 'due_label', 'due_urgency', 'is_overdue',
            'subtasks', 'labels', 'created_at', 'updated_at',
        )
        read_only_fields = fields

    def get_due_label(self, obj):
        return obj.due.label if obj.due else None

    def get_due_urgency(self, obj):
        return str(obj.due.urgency) if obj.due else None

    def get_labels(self, obj):
        """Label ids attached to the task"""
        return [link.tag_id for link in obj.task_labels.all()]


class TaskCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    priority = serializers.ChoiceField(choices=PriorityLevel.choices, required=False, default=PriorityLevel.MEDIUM)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)


class TaskUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=PriorityLevel.choices, required=False)
    due_date = serializers.DateField(required=False, allow_null=True)


class TaskMoveSerializer(serializers.Serializer):
    """Serializer for moving tasks within or between columns"""
    status = serializers.ChoiceField(choices=TaskStatus.choices)
    # Out-of-range positions are clamped, not rejected
    position = serializers.IntegerField()


class SubtaskCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)


class SubtaskUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)


class SubtaskToggleSerializer(serializers.Serializer):
    completed = serializers.BooleanField()


class SubtaskMoveSerializer(serializers.Serializer):
    position = serializers.IntegerField()
    task = serializers.IntegerField(required=False, allow_null=True, default=None)


class BoardSerializer(serializers.Serializer):
    todo = TaskSerializer(many=True, read_only=True)
    in_progress = TaskSerializer(many=True, read_only=True)
    done = TaskSerializer(many=True, read_only=True)
