from django.apps import AppConfig


class CoursesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"

    # Django import path
    name = "apps.domains.courses"

    # app label used by migrations / FK strings (do not change)
    label = "courses"
