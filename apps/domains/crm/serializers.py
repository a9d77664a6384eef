from rest_framework import serializers

from .models import CalendarEvent, ContactRecord, Lead, LeadFollowUp, LeadStatusChange


class LeadFollowUpSerializer(serializers.ModelSerializer):
    by_name = serializers.CharField(source="by.display_name", read_only=True, default=None)

    class Meta:
        model = LeadFollowUp
        fields = ["id", "note", "date", "by", "by_name"]
        read_only_fields = fields


class LeadStatusChangeSerializer(serializers.ModelSerializer):
    class Meta:
        model = LeadStatusChange
        fields = ["id", "from_status", "to_status", "reason", "changed_by", "changed_at"]
        read_only_fields = fields


class LeadSerializer(serializers.ModelSerializer):
    assigned_to_name = serializers.CharField(source="assigned_to.display_name", read_only=True, default=None)
    calculated_age = serializers.IntegerField(read_only=True)

    class Meta:
        model = Lead
        fields = [
            "id",
            "full_name",
            "english_name",
            "first_name",
            "last_name",
            "gender",
            "father_name",
            "mother_name",
            "date_of_birth",
            "age",
            "calculated_age",
            "residence",
            "school_name",
            "mobile_number",
            "mobile_number_label",
            "additional_numbers",
            "social_media",
            "assigned_to",
            "assigned_to_name",
            "interest_field",
            "referral_source",
            "notes",
            "status",
            "is_banned_from_platform",
            "blacklist_reason",
            "next_follow_up_date",
            "converted_student",
            "converted_at",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "status",
            "is_banned_from_platform",
            "blacklist_reason",
            "converted_student",
            "converted_at",
            "created_by",
            "created_at",
            "updated_at",
        ]

    def validate_additional_numbers(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("additional_numbers must be a list")
        for item in value:
            if not isinstance(item, dict) or not (item.get("number") or "").strip():
                raise serializers.ValidationError("each additional number needs a number")
        return [
            {"number": item["number"].strip(), "label": (item.get("label") or "Other").strip()}
            for item in value
        ]

    def validate_social_media(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("social_media must be a list")
        for item in value:
            if not isinstance(item, dict) or not item.get("platform") or not item.get("handle"):
                raise serializers.ValidationError("each social media entry needs platform and handle")
        return [{"platform": item["platform"].strip(), "handle": item["handle"].strip()} for item in value]


class LeadDetailSerializer(LeadSerializer):
    follow_ups = LeadFollowUpSerializer(many=True, read_only=True)
    status_history = LeadStatusChangeSerializer(many=True, read_only=True)

    class Meta(LeadSerializer.Meta):
        fields = LeadSerializer.Meta.fields + ["follow_ups", "status_history"]


class FollowUpCreateSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=2000)
    next_follow_up_date = serializers.DateTimeField(required=False, allow_null=True)


class StatusChangeSerializer(serializers.Serializer):
    new_status = serializers.ChoiceField(choices=Lead.Status.choices)
    reason = serializers.CharField(max_length=500)
    is_banned_from_platform = serializers.BooleanField(required=False, default=False)


class ConvertSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    username = serializers.CharField(max_length=150, required=False)


# ------------------------------------
# Calendar / contact history
# ------------------------------------

class CalendarEventSerializer(serializers.ModelSerializer):
    lead_name = serializers.CharField(source="lead.full_name", read_only=True, default=None)

    class Meta:
        model = CalendarEvent
        fields = [
            "id",
            "title",
            "description",
            "start_time",
            "end_time",
            "color",
            "participants",
            "lead",
            "lead_name",
            "created_by",
            "created_at",
        ]
        read_only_fields = ["created_by", "created_at"]


class CalendarEventBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = CalendarEvent
        fields = ["id", "title", "start_time", "end_time", "color"]


class ContactRecordSerializer(serializers.ModelSerializer):
    lead_name = serializers.CharField(source="lead.full_name", read_only=True)
    created_by_name = serializers.CharField(source="created_by.display_name", read_only=True, default=None)
    event = CalendarEventBriefSerializer(read_only=True)

    event_title = serializers.CharField(max_length=300, required=False, write_only=True)
    event_color = serializers.ChoiceField(choices=CalendarEvent.Color.choices, required=False, write_only=True)

    class Meta:
        model = ContactRecord
        fields = [
            "id",
            "lead",
            "lead_name",
            "contact_type",
            "reason",
            "outcome",
            "notes",
            "contact_date",
            "duration",
            "next_follow_up_date",
            "event",
            "event_title",
            "event_color",
            "created_by",
            "created_by_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["lead", "created_by", "created_at", "updated_at"]
