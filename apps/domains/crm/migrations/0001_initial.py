import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [("interest", "Interest"), ("student", "Student"), ("blacklist", "Blacklist")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("full_name", models.CharField(max_length=200)),
                ("english_name", models.CharField(blank=True, default="", max_length=200)),
                ("first_name", models.CharField(blank=True, default="", max_length=100)),
                ("last_name", models.CharField(blank=True, default="", max_length=100)),
                ("gender", models.CharField(blank=True, choices=[("male", "Male"), ("female", "Female"), ("other", "Other")], default="", max_length=10)),
                ("father_name", models.CharField(blank=True, default="", max_length=200)),
                ("mother_name", models.CharField(blank=True, default="", max_length=200)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                ("age", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("residence", models.CharField(blank=True, default="", max_length=200)),
                ("school_name", models.CharField(blank=True, default="", max_length=200)),
                ("mobile_number", models.CharField(db_index=True, max_length=30)),
                ("mobile_number_label", models.CharField(blank=True, default="Main", max_length=50)),
                ("additional_numbers", models.JSONField(blank=True, default=list)),
                ("social_media", models.JSONField(blank=True, default=list)),
                ("interest_field", models.CharField(blank=True, default="", max_length=200)),
                ("referral_source", models.CharField(blank=True, default="", max_length=200)),
                ("notes", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="interest", max_length=20)),
                ("is_banned_from_platform", models.BooleanField(default=False)),
                ("blacklist_reason", models.CharField(blank=True, default="", max_length=500)),
                ("next_follow_up_date", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("converted_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_leads", to=settings.AUTH_USER_MODEL)),
                ("converted_student", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="source_leads", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="LeadFollowUp",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("note", models.TextField()),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("lead", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="follow_ups", to="crm.lead")),
            ],
            options={
                "ordering": ["-date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="LeadStatusChange",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_status", models.CharField(blank=True, choices=STATUS_CHOICES, default="", max_length=20)),
                ("to_status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("reason", models.CharField(max_length=500)),
                ("changed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("changed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("lead", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_history", to="crm.lead")),
            ],
            options={
                "ordering": ["changed_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="CalendarEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=300)),
                ("description", models.TextField(blank=True, default="")),
                ("start_time", models.DateTimeField(db_index=True)),
                ("end_time", models.DateTimeField()),
                ("color", models.CharField(choices=[("blue", "Blue"), ("green", "Green"), ("red", "Red"), ("yellow", "Yellow"), ("purple", "Purple"), ("gray", "Gray")], default="blue", max_length=10)),
                ("participants", models.JSONField(blank=True, default=list)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("lead", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="events", to="crm.lead")),
            ],
            options={
                "ordering": ["start_time", "id"],
            },
        ),
        migrations.CreateModel(
            name="ContactRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("contact_type", models.CharField(choices=[("call", "Call"), ("meeting", "Meeting"), ("email", "Email"), ("other", "Other")], db_index=True, max_length=20)),
                ("reason", models.CharField(max_length=500)),
                ("outcome", models.CharField(choices=[("successful", "Successful"), ("no_answer", "No answer"), ("callback_requested", "Callback requested"), ("not_interested", "Not interested"), ("converted", "Converted"), ("other", "Other")], db_index=True, max_length=30)),
                ("notes", models.TextField(blank=True, default="")),
                ("contact_date", models.DateTimeField()),
                ("duration", models.PositiveIntegerField(default=30)),
                ("next_follow_up_date", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("event", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="contact", to="crm.calendarevent")),
                ("lead", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="contacts", to="crm.lead")),
            ],
            options={
                "ordering": ["-contact_date", "-id"],
                "indexes": [models.Index(fields=["lead", "-contact_date"], name="crm_contact_lead_date")],
            },
        ),
    ]
