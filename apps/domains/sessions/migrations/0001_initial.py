import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.domains.sessions.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("courses", "0001_initial"),
        ("groups", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Session",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("session_number", models.PositiveIntegerField(default=1)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, max_length=1000)),
                ("scheduled_date", models.DateField(db_index=True)),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("duration", models.PositiveIntegerField(help_text="minutes", validators=[django.core.validators.MinValueValidator(15), django.core.validators.MaxValueValidator(480)])),
                ("is_online", models.BooleanField(default=False)),
                ("meeting_link", models.URLField(blank=True, default="")),
                ("location", models.CharField(blank=True, default="", max_length=200)),
                ("status", models.CharField(choices=[("scheduled", "Scheduled"), ("in_progress", "In progress"), ("completed", "Completed"), ("cancelled", "Cancelled")], db_index=True, default="scheduled", max_length=20)),
                ("cancellation_reason", models.CharField(blank=True, default="", max_length=500)),
                ("lesson_plan", models.JSONField(blank=True, default=apps.domains.sessions.models.default_lesson_plan)),
                ("actual_start_time", models.DateTimeField(blank=True, null=True)),
                ("actual_end_time", models.DateTimeField(blank=True, null=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sessions", to="courses.course")),
                ("group", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sessions", to="groups.group")),
                ("trainer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="trained_sessions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["scheduled_date", "start_time", "id"],
                "indexes": [
                    models.Index(fields=["group", "scheduled_date"], name="session_group_date_idx"),
                    models.Index(fields=["trainer", "scheduled_date"], name="session_trainer_date_idx"),
                ],
            },
        ),
    ]
