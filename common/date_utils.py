# common/date_utils.py
from dataclasses import dataclass
from datetime import date

from django.utils import timezone

from common.enums import DueUrgency

SOON_DAYS = 3


@dataclass(frozen=True)
class RelativeDue:
    label: str
    urgency: str


def _weeks(days: int) -> str:
    weeks = days // 7
    return f"{weeks} week{'s' if weeks > 1 else ''}"


def relative_due(due_date: date, today: date | None = None) -> RelativeDue:
    """
    Describe a due date relative to today.

    Args:
        due_date: The date the task is due
        today: Reference date (defaults to the active timezone's local date)

    Returns:
        RelativeDue with a human label ("tomorrow", "3 days ago", ...) and an
        urgency of overdue, today, soon (within 3 days) or normal
    """
    today = today or timezone.localdate()
    diff = (due_date - today).days

    if diff == 0:
        return RelativeDue("today", DueUrgency.TODAY)

    if diff > 0:
        urgency = DueUrgency.SOON if diff <= SOON_DAYS else DueUrgency.NORMAL
        if diff == 1:
            return RelativeDue("tomorrow", urgency)
        if diff < 14:
            return RelativeDue(f"in {diff} days", urgency)
        return RelativeDue(f"in {_weeks(diff)}", urgency)

    overdue = -diff
    if overdue == 1:
        return RelativeDue("yesterday", DueUrgency.OVERDUE)
    if overdue < 14:
        return RelativeDue(f"{overdue} days ago", DueUrgency.OVERDUE)
    return RelativeDue(f"{_weeks(overdue)} ago", DueUrgency.OVERDUE)
