import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.domains.evaluations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("courses", "0001_initial"),
        ("groups", "0001_initial"),
        ("class_sessions", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="EvaluationCriteria",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("applies_to", models.CharField(choices=[("course", "Whole course"), ("groups", "Selected groups")], default="course", max_length=10)),
                ("parameters", models.JSONField(blank=True, default=list)),
                ("include_overall_rating", models.BooleanField(default=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluation_criteria", to="courses.course")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("groups", models.ManyToManyField(blank=True, related_name="evaluation_criteria", to="groups.group")),
            ],
            options={
                "ordering": ["-updated_at", "-id"],
                "verbose_name_plural": "evaluation criteria",
            },
        ),
        migrations.CreateModel(
            name="StudentEvaluation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("overall_rating", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("skill_ratings", models.JSONField(default=apps.domains.evaluations.models.default_skill_ratings)),
                ("participation_level", models.CharField(choices=[("very_low", "Very low"), ("low", "Low"), ("medium", "Medium"), ("high", "High"), ("very_high", "Very high")], default="medium", max_length=20)),
                ("comprehension_level", models.CharField(choices=[("struggling", "Struggling"), ("needs_support", "Needs support"), ("adequate", "Adequate"), ("good", "Good"), ("excellent", "Excellent")], default="adequate", max_length=20)),
                ("attitude", models.CharField(choices=[("negative", "Negative"), ("neutral", "Neutral"), ("positive", "Positive"), ("enthusiastic", "Enthusiastic")], default="positive", max_length=20)),
                ("focus", models.PositiveSmallIntegerField(default=3, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("attendance_status", models.CharField(choices=[("present", "Present"), ("late", "Late"), ("absent", "Absent"), ("excused", "Excused")], default="present", max_length=10)),
                ("parameters", models.JSONField(blank=True, default=dict)),
                ("notes", models.TextField(blank=True, default="")),
                ("needs_attention", models.BooleanField(db_index=True, default=False)),
                ("at_risk", models.BooleanField(db_index=True, default=False)),
                ("excelling", models.BooleanField(default=False)),
                ("parent_contact_needed", models.BooleanField(default=False)),
                ("shared_with_student", models.BooleanField(default=False)),
                ("shared_with_parent", models.BooleanField(default=False)),
                ("shared_at", models.DateTimeField(blank=True, null=True)),
                ("evaluation_date", models.DateField(default=django.utils.timezone.localdate)),
                ("criteria", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="evaluations", to="evaluations.evaluationcriteria")),
                ("group", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="groups.group")),
                ("session", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="class_sessions.session")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to=settings.AUTH_USER_MODEL)),
                ("trainer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="given_evaluations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-evaluation_date", "-id"],
            },
        ),
        migrations.AddConstraint(
            model_name="studentevaluation",
            constraint=models.UniqueConstraint(fields=("student", "session"), name="unique_evaluation_per_session_student"),
        ),
    ]
