import django_filters
from tasks.models import Task
from common.enums import TaskStatus


class TaskFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(lookup_expr='iexact')
    priority = django_filters.CharFilter(lookup_expr='iexact')
    due_date = django_filters.DateFromToRangeFilter()
    label = django_filters.NumberFilter(field_name='task_labels__tag_id')
    overdue = django_filters.BooleanFilter(method='filter_overdue')

    class Meta:
        model = Task
        fields = ['status', 'priority', 'due_date', 'label']

    def filter_overdue(self, queryset, name, value: bool):
        if not value:
            return queryset
        from django.utils import timezone
        return queryset.exclude(status=TaskStatus.DONE).filter(due_date__lt=timezone.localdate())
