from django.db import models


class PriorityLevel(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'


class TaskStatus(models.TextChoices):
    TODO = 'todo', 'To Do'
    IN_PROGRESS = 'in_progress', 'In Progress'
    DONE = 'done', 'Done'


class LabelColor(models.TextChoices):
    RED = 'red', 'Red'
    ORANGE = 'orange', 'Orange'
    YELLOW = 'yellow', 'Yellow'
    GREEN = 'green', 'Green'
    BLUE = 'blue', 'Blue'
    PURPLE = 'purple', 'Purple'
    PINK = 'pink', 'Pink'
    GRAY = 'gray', 'Gray'


class DueUrgency(models.TextChoices):
    OVERDUE = 'overdue', 'Overdue'
    TODAY = 'today', 'Today'
    SOON = 'soon', 'Soon'
    NORMAL = 'normal', 'Normal'
