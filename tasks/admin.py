from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from common.enums import TaskStatus
from tasks.apps import get_board
from .models import Task, Subtask, Label, TaskLabel


class OverdueFilter(admin.SimpleListFilter):
    title = 'Overdue'
    parameter_name = 'overdue'

    def lookups(self, request, model_admin):
        return (
            ('1', 'Overdue'),
        )

    def queryset(self, request, queryset):
        if self.value() == '1':
            from django.utils import timezone
            return queryset.exclude(status=TaskStatus.DONE).filter(due_date__lt=timezone.localdate())
        return queryset


class SubtaskInline(admin.TabularInline):
    model = Subtask
    extra = 0
    fields = ('title', 'completed', 'position')
    # Positions are owned by the board service
    readonly_fields = ('position',)
    ordering = ('position', 'id')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class TaskLabelInline(admin.TabularInline):
    model = TaskLabel
    extra = 0
    autocomplete_fields = ['tag']


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    save_on_top = True
    list_display = ('title', 'status', 'position', 'priority', 'due_date', 'is_overdue', 'created_at')
    list_filter = ('status', 'priority', 'due_date', OverdueFilter)
    search_fields = ['title', 'description']
    readonly_fields = ['status', 'position', 'is_overdue', 'created_at', 'updated_at']
    ordering = ['status', 'position']
    list_per_page = 50
    date_hierarchy = 'due_date'
    fieldsets = (
        (None, {
            'fields': ('title', 'description', 'priority', 'due_date')
        }),
        ('Board', {
            'fields': ('status', 'position', 'is_overdue', 'created_at', 'updated_at')
        }),
    )
    inlines = [SubtaskInline, TaskLabelInline]
    actions = ['delete_and_compact']

    def get_actions(self, request):
        actions = super().get_actions(request)
        # bulk queryset delete would leave gaps in the columns
        actions.pop('delete_selected', None)
        return actions

    def save_model(self, request, obj, form, change):
        if not change:
            # the change form already runs inside a transaction
            obj.status = TaskStatus.TODO
            obj.position = get_board().columns.next_position(TaskStatus.TODO)
        super().save_model(request, obj, form, change)

    def delete_model(self, request, obj):
        get_board().delete_task(obj.pk)

    @admin.action(description="Delete selected tasks and compact their columns")
    def delete_and_compact(self, request, queryset):
        board = get_board()
        count = 0
        for pk in queryset.values_list('pk', flat=True):
            board.delete_task(pk)
            count += 1
        self.message_user(request, f"Deleted {count} tasks.")


@admin.register(Subtask)
class SubtaskAdmin(admin.ModelAdmin):
    save_on_top = True
    list_display = ['title', 'task_link', 'completed', 'position', 'created_at']
    list_filter = ['completed', 'created_at']
    search_fields = ['title', 'task__title']
    readonly_fields = ['task', 'position', 'created_at', 'updated_at']
    ordering = ['task', 'position']
    list_select_related = ('task',)

    def has_add_permission(self, request):
        # subtasks are added from the task's checklist
        return False

    def task_link(self, obj):
        url = reverse("admin:tasks_task_change", args=[obj.task.pk])
        return format_html('<a href="{}">{}</a>', url, obj.task.title)
    task_link.short_description = 'Task'
    task_link.admin_order_field = 'task'

    def delete_model(self, request, obj):
        get_board().delete_subtask(obj.pk)

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    actions = ['mark_completed', 'mark_incomplete']

    @admin.action(description="Mark selected subtasks as completed")
    def mark_completed(self, request, queryset):
        updated = queryset.update(completed=True)
        self.message_user(request, f"Marked {updated} subtasks as completed.")

    @admin.action(description="Mark selected subtasks as incomplete")
    def mark_incomplete(self, request, queryset):
        updated = queryset.update(completed=False)
        self.message_user(request, f"Marked {updated} subtasks as incomplete.")


@admin.register(Label)
class LabelAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'color']
    list_filter = ['color']
    search_fields = ['name']
    readonly_fields = ['slug']
    ordering = ['id']
