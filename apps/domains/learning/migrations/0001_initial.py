import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("courses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Module",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.CharField(blank=True, default="", max_length=1000)),
                ("order", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("type", models.CharField(choices=[("video", "Video"), ("pdf", "PDF"), ("text", "Text"), ("quiz", "Quiz"), ("assignment", "Assignment"), ("live_session", "Live session")], default="text", max_length=20)),
                ("video_url", models.URLField(blank=True, default="")),
                ("video_duration", models.PositiveIntegerField(blank=True, null=True)),
                ("pdf_url", models.URLField(blank=True, default="")),
                ("text_content", models.TextField(blank=True, default="")),
                ("duration", models.PositiveIntegerField(blank=True, null=True)),
                ("resources", models.JSONField(blank=True, default=list)),
                ("is_locked", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="modules", to="courses.course")),
                ("unlock_after", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="unlocks", to="learning.module")),
            ],
            options={
                "ordering": ["course_id", "order", "id"],
                "indexes": [models.Index(fields=["course", "order"], name="learning_module_course_order")],
            },
        ),
        migrations.CreateModel(
            name="ModuleProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("status", models.CharField(choices=[("not_started", "Not started"), ("in_progress", "In progress"), ("completed", "Completed")], db_index=True, default="not_started", max_length=20)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("last_accessed_at", models.DateTimeField(blank=True, null=True)),
                ("time_spent", models.PositiveIntegerField(default=0)),
                ("video_position", models.PositiveIntegerField(default=0)),
                ("video_length", models.PositiveIntegerField(default=0)),
                ("video_completed", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True, default="")),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="module_progress", to="courses.course")),
                ("module", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="progress_records", to="learning.module")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="module_progress", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["module__order", "id"],
                "unique_together": {("student", "module")},
            },
        ),
    ]
