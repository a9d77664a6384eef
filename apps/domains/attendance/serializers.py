# apps/domains/attendance/serializers.py

from rest_framework import serializers
from .models import Attendance


class AttendanceSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source="student.display_name", read_only=True)
    session_title = serializers.CharField(source="session.title", read_only=True)
    session_date = serializers.DateField(source="session.scheduled_date", read_only=True)
    group = serializers.IntegerField(source="session.group_id", read_only=True)
    course = serializers.IntegerField(source="session.course_id", read_only=True)

    class Meta:
        model = Attendance
        fields = [
            "id",
            "session",
            "session_title",
            "session_date",
            "group",
            "course",
            "student",
            "student_name",
            "status",
            "notes",
            "marked_by",
            "marked_at",
            "check_in_time",
        ]
        read_only_fields = fields


class AttendanceRecordSerializer(serializers.Serializer):
    student = serializers.IntegerField()
    status = serializers.ChoiceField(choices=Attendance.Status.choices)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)
    check_in_time = serializers.DateTimeField(required=False, allow_null=True)


class AttendanceBatchSerializer(serializers.Serializer):
    session = serializers.IntegerField()
    records = AttendanceRecordSerializer(many=True, allow_empty=False)


class AttendanceSheetRowSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    student_name = serializers.CharField()
    attendance_id = serializers.IntegerField(allow_null=True)
    status = serializers.CharField(allow_null=True)
    notes = serializers.CharField(allow_blank=True)
    marked_at = serializers.DateTimeField(allow_null=True)
    check_in_time = serializers.DateTimeField(allow_null=True)
