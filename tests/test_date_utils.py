# tests/test_date_utils.py
from datetime import date, timedelta

import pytest

from common.date_utils import relative_due
from common.enums import DueUrgency, TaskStatus
from tests.factories import TaskFactory

TODAY = date(2025, 1, 15)


@pytest.mark.parametrize("offset, label, urgency", [
    (0, "today", DueUrgency.TODAY),
    (1, "tomorrow", DueUrgency.SOON),
    (3, "in 3 days", DueUrgency.SOON),
    (4, "in 4 days", DueUrgency.NORMAL),
    (13, "in 13 days", DueUrgency.NORMAL),
    (14, "in 2 weeks", DueUrgency.NORMAL),
    (-1, "yesterday", DueUrgency.OVERDUE),
    (-5, "5 days ago", DueUrgency.OVERDUE),
    (-21, "3 weeks ago", DueUrgency.OVERDUE),
])
def test_relative_due(offset, label, urgency):
    due = relative_due(TODAY + timedelta(days=offset), today=TODAY)
    assert due.label == label
    assert due.urgency == urgency


def test_weeks_start_at_two():
    assert relative_due(TODAY - timedelta(days=7), today=TODAY).label == "7 days ago"
    assert relative_due(TODAY + timedelta(days=20), today=TODAY).label == "in 2 weeks"


def test_task_overdue_ignores_done_column():
    past = date.today() - timedelta(days=10)
    assert TaskFactory.build(due_date=past).is_overdue is True
    assert TaskFactory.build(due_date=past, status=TaskStatus.DONE).is_overdue is False
    assert TaskFactory.build(due_date=None).is_overdue is False
    assert TaskFactory.build(due_date=None).due is None
