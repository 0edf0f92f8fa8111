from django.apps import AppConfig
from django.conf import settings


class TasksConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tasks'
    verbose_name = 'Task Board'

    def ready(self):
        from tasks.services import BoardService

        # Built once per process; request handlers reach it through get_board()
        self.board = BoardService(using=getattr(settings, 'TASKBOARD_DATABASE', 'default'))


def get_board():
    from django.apps import apps

    return apps.get_app_config('tasks').board
