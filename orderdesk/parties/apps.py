from django.apps import AppConfig


class PartiesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'orderdesk.parties'
    label = 'parties'

    def ready(self):
        """Import signals when app is ready"""
        import orderdesk.parties.signals  # noqa: F401  # Cache invalidation signals
