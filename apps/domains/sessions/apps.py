from django.apps import AppConfig


class SessionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.domains.sessions"

    # "sessions" is taken by django.contrib.sessions
    label = "class_sessions"
    verbose_name = "Class sessions"
