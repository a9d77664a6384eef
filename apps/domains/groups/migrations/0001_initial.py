import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.domains.groups.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("courses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Group",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True, max_length=500)),
                ("max_students", models.PositiveSmallIntegerField(default=30, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(100)])),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("status", models.CharField(choices=[("active", "Active"), ("completed", "Completed"), ("archived", "Archived"), ("cancelled", "Cancelled")], db_index=True, default="active", max_length=20)),
                ("color", models.CharField(default=apps.domains.groups.models.default_group_color, max_length=7, validators=[django.core.validators.RegexValidator("^#[0-9A-Fa-f]{6}$", "color must be a hex code like #30c59b")])),
                ("total_sessions", models.PositiveIntegerField(default=0)),
                ("completed_sessions", models.PositiveIntegerField(default=0)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="groups", to="courses.course")),
                ("students", models.ManyToManyField(blank=True, related_name="student_groups", to=settings.AUTH_USER_MODEL)),
                ("trainer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="trained_groups", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-start_date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="GroupScheduleSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day_of_week", models.CharField(choices=[("Monday", "Monday"), ("Tuesday", "Tuesday"), ("Wednesday", "Wednesday"), ("Thursday", "Thursday"), ("Friday", "Friday"), ("Saturday", "Saturday"), ("Sunday", "Sunday")], max_length=10)),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("location", models.CharField(blank=True, default="", max_length=200)),
                ("group", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="schedule", to="groups.group")),
            ],
            options={
                "ordering": ["id"],
            },
        ),
    ]
