from django.apps import AppConfig


class CommunityConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.domains.community"
    label = "community"
    verbose_name = "Community"

    def ready(self):
        import apps.domains.community.signals  # noqa: F401
