from django.apps import AppConfig


class QueueingConfig(AppConfig):
    name = 'queueing'
    default_auto_field = 'django.db.models.BigAutoField'
    context = None

    def ready(self):
        from .context import QueueingContext

        self.context = QueueingContext.from_settings()
