from rest_framework import serializers

from .models import Enrollment, Installment, Payment


# -------------------------------
# Enrollment
# -------------------------------

class InstallmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Installment
        fields = ["id", "number", "amount", "due_date", "status", "paid_at"]


class EnrollmentSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source="student.display_name", read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)
    group_name = serializers.CharField(source="group.name", read_only=True, default=None)
    remaining_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    installments = InstallmentSerializer(many=True, read_only=True)

    class Meta:
        model = Enrollment
        fields = "__all__"
        read_only_fields = ["paid_amount", "enrolled_by", "enrolled_at"]
        ref_name = "CourseEnrollment"


class EnrollmentCreateSerializer(serializers.Serializer):
    student = serializers.IntegerField()
    course = serializers.IntegerField()
    group = serializers.IntegerField(required=False, allow_null=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    installments = serializers.IntegerField(required=False, min_value=0, max_value=24, default=0)
    first_due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class EnrollmentUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Enrollment
        fields = ["status", "group", "total_amount", "notes"]

    def validate(self, attrs):
        group = attrs.get("group")
        if group is not None and group.course_id != self.instance.course_id:
            raise serializers.ValidationError({"group": "Group does not belong to this course"})
        total = attrs.get("total_amount")
        if total is not None and total < self.instance.paid_amount:
            raise serializers.ValidationError({"total_amount": "Total cannot be below the amount already paid"})
        return attrs


# -------------------------------
# Payment
# -------------------------------

class PaymentSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)
    student_name = serializers.CharField(source="student.display_name", read_only=True)

    class Meta:
        model = Payment
        fields = "__all__"
        read_only_fields = [
            "student",
            "course",
            "status",
            "paid_at",
            "receipt_number",
            "transaction_id",
            "processed_by",
        ]
        ref_name = "EnrollmentPayment"


class PaymentInitiateSerializer(serializers.Serializer):
    enrollment = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=Payment.Method.choices, default=Payment.Method.ONLINE)
    installment_number = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentConfirmSerializer(serializers.Serializer):
    transaction_id = serializers.CharField(max_length=100)


class RecordPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=Payment.Method.choices, default=Payment.Method.CASH)
    transaction_id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True)
