import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Competition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("status", models.CharField(choices=[("upcoming", "Upcoming"), ("ongoing", "Ongoing"), ("completed", "Completed")], db_index=True, default="upcoming", max_length=20)),
            ],
            options={
                "ordering": ["-start_date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("planning", "Planning"), ("active", "Active"), ("completed", "Completed")], db_index=True, default="planning", max_length=20)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="projects", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="ProjectPart",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("qty", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("part", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="project_parts", to="inventory.part")),
                ("project", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="project_parts", to="projects.project")),
            ],
            options={
                "ordering": ["id"],
                "unique_together": {("project", "part")},
            },
        ),
        migrations.AddField(
            model_name="project",
            name="parts",
            field=models.ManyToManyField(blank=True, related_name="projects", through="projects.ProjectPart", to="inventory.part"),
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                ("max_members", models.PositiveSmallIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(50)])),
                ("coach", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="coached_teams", to=settings.AUTH_USER_MODEL)),
                ("competition", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="teams", to="projects.competition")),
                ("members", models.ManyToManyField(blank=True, related_name="teams", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["competition_id", "name"],
                "unique_together": {("competition", "name")},
            },
        ),
    ]
