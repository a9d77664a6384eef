# PATH: apps/domains/enrollment/views.py

from django.http import HttpResponse
from django.shortcuts import get_object_or_404

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.models import User
from apps.core.permissions import IsReception, IsStudent
from apps.core.serializers import UserBriefSerializer
from apps.domains.courses.models import Course
from apps.domains.groups.models import Group
from apps.domains.groups.serializers import GroupSerializer
from trainhub.adapters.db.django import repositories_core as core_repo
from trainhub.adapters.db.django import repositories_enrollment as enroll_repo

from . import services
from .filters import EnrollmentFilter, PaymentFilter
from .models import Enrollment, Payment
from .permissions import IsPaymentOwnerOrDesk
from .receipts import build_receipt_pdf, receipt_filename
from .serializers import (
    EnrollmentCreateSerializer,
    EnrollmentSerializer,
    EnrollmentUpdateSerializer,
    PaymentConfirmSerializer,
    PaymentInitiateSerializer,
    PaymentSerializer,
    RecordPaymentSerializer,
)


def _receipt_response(payment):
    try:
        pdf = build_receipt_pdf(payment)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    response = HttpResponse(pdf, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{receipt_filename(payment)}"'
    return response


# ======================================================
# Student
# ======================================================

class StudentPaymentViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """
    Student's own payments

    ✔ initiate -> pending payment
    ✔ confirm  -> enter the transfer reference
    ✔ receipt  -> PDF for completed payments
    """
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsStudent, IsPaymentOwnerOrDesk]
    filter_backends = [DjangoFilterBackend]
    filterset_class = PaymentFilter

    def get_queryset(self):
        return enroll_repo.payment_filter_student(self.request.user)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response(services.payment_summary(request.user))

    @action(detail=False, methods=["get"], url_path=r"courses/(?P<course_id>\d+)")
    def course(self, request, course_id=None):
        enrollment = get_object_or_404(
            enroll_repo.enrollment_filter_student(request.user),
            course_id=course_id,
        )
        return Response({
            "enrollment": EnrollmentSerializer(enrollment).data,
            "payments": PaymentSerializer(
                self.get_queryset().filter(enrollment=enrollment), many=True
            ).data,
        })

    @action(detail=False, methods=["post"])
    def initiate(self, request):
        serializer = PaymentInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        enrollment = get_object_or_404(
            enroll_repo.enrollment_filter_student(request.user),
            id=data.pop("enrollment"),
        )
        payment = services.initiate_payment(student=request.user, enrollment=enrollment, **data)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):
        serializer = PaymentConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = services.confirm_payment(
            self.get_object(),
            transaction_id=serializer.validated_data["transaction_id"],
        )
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=["get"])
    def receipt(self, request, pk=None):
        return _receipt_response(self.get_object())


# ======================================================
# Reception
# ======================================================

class ReceptionEnrollmentViewSet(DomainErrorMixin, ModelViewSet):
    permission_classes = [IsAuthenticated, IsReception]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = EnrollmentFilter
    search_fields = ["student__name", "student__username", "course__title"]

    def get_queryset(self):
        return enroll_repo.enrollment_queryset().prefetch_related("installments")

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return EnrollmentUpdateSerializer
        return EnrollmentSerializer

    def create(self, request, *args, **kwargs):
        serializer = EnrollmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        student = get_object_or_404(User, id=data.pop("student"))
        course = get_object_or_404(Course, id=data.pop("course"))
        group_id = data.pop("group", None)
        group = get_object_or_404(Group, id=group_id) if group_id else None

        enrollment = services.create_enrollment(
            student=student,
            course=course,
            group=group,
            enrolled_by=request.user,
            **data,
        )
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        enrollment = self.get_object()
        serializer = EnrollmentUpdateSerializer(enrollment, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(EnrollmentSerializer(enrollment).data)

    def destroy(self, request, *args, **kwargs):
        enrollment = self.get_object()
        if enrollment.payments.filter(status=Payment.Status.COMPLETED).exists():
            return Response(
                {"detail": "Enrollments with completed payments cannot be deleted; set them inactive instead"},
                status=status.HTTP_409_CONFLICT,
            )
        enrollment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def payment(self, request, pk=None):
        """Cash-desk payment recorded as completed straight away."""
        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = services.record_payment(
            enrollment=self.get_object(),
            processed_by=request.user,
            **serializer.validated_data,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="available-courses")
    def available_courses(self, request):
        qs = Course.objects.filter(status=Course.Status.PUBLISHED).order_by("title")
        return Response([
            {"id": c.id, "title": c.title, "price": c.price, "level": c.level}
            for c in qs
        ])

    @action(detail=False, methods=["get"], url_path="available-groups")
    def available_groups(self, request):
        qs = Group.objects.filter(status=Group.Status.ACTIVE).select_related("course", "trainer")
        course = request.query_params.get("course")
        if course:
            qs = qs.filter(course_id=course)
        groups = [g for g in qs.order_by("name") if not g.is_full]
        return Response(GroupSerializer(groups, many=True).data)

    @action(detail=False, methods=["get"], url_path="available-students")
    def available_students(self, request):
        qs = core_repo.user_filter_roles([User.Role.STUDENT]).filter(is_active=True)
        course = request.query_params.get("course")
        if course:
            qs = qs.exclude(enrollments__course_id=course)
        q = request.query_params.get("search")
        if q:
            qs = qs.filter(name__icontains=q)
        return Response(UserBriefSerializer(qs.order_by("name", "id"), many=True).data)

    @action(detail=False, methods=["get"])
    def dashboard(self, request):
        return Response(services.reception_dashboard())


class ReceptionPaymentViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsReception]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = PaymentFilter
    search_fields = ["receipt_number", "transaction_id", "student__name"]

    def get_queryset(self):
        return enroll_repo.payment_queryset()

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):
        serializer = PaymentConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = services.confirm_payment(
            self.get_object(),
            transaction_id=serializer.validated_data["transaction_id"],
            processed_by=request.user,
        )
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=["post"])
    def process(self, request, pk=None):
        return Response(PaymentSerializer(services.mark_processing(self.get_object())).data)

    @action(detail=True, methods=["post"])
    def fail(self, request, pk=None):
        payment = services.fail_payment(self.get_object(), request.data.get("reason", ""))
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=["get"])
    def receipt(self, request, pk=None):
        return _receipt_response(self.get_object())
