# PATH: apps/domains/crm/views.py

import datetime as dt

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.exceptions import DomainError
from apps.core.permissions import IsReception
from apps.core.serializers import UserBriefSerializer
from trainhub.adapters.db.django import repositories_crm as crm_repo

from . import services
from .filters import ContactRecordFilter, LeadFilter
from .serializers import (
    CalendarEventSerializer,
    ContactRecordSerializer,
    ConvertSerializer,
    FollowUpCreateSerializer,
    LeadDetailSerializer,
    LeadSerializer,
    StatusChangeSerializer,
)


def _query_moment(value, *, end_of_day=False):
    """?start= / ?end= accept a datetime or a plain date."""
    if not value:
        return None
    moment = parse_datetime(value)
    if moment is None:
        day = parse_date(value)
        if day is None:
            raise DomainError(f"Invalid date: {value}")
        moment = dt.datetime.combine(day, dt.time.max if end_of_day else dt.time.min)
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


# ======================================================
# Leads
# ======================================================

class LeadViewSet(DomainErrorMixin, ModelViewSet):
    """
    Reception lead management

    ✔ duplicate mobile numbers are rejected (409)
    ✔ status moves only through change-status/ (reason required)
    ✔ convert/ creates the student account
    """
    permission_classes = [IsAuthenticated, IsReception]

    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = LeadFilter
    search_fields = ["full_name", "first_name", "last_name", "mobile_number"]
    ordering_fields = ["created_at", "next_follow_up_date", "full_name"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return crm_repo.lead_queryset()

    def get_serializer_class(self):
        if self.action == "retrieve":
            return LeadDetailSerializer
        return LeadSerializer

    def perform_create(self, serializer):
        serializer.instance = services.create_lead(
            dict(serializer.validated_data), by=self.request.user
        )

    def perform_update(self, serializer):
        services.update_lead(serializer.instance, dict(serializer.validated_data))

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.lead_stats())

    @action(detail=True, methods=["post"], url_path="follow-up")
    def follow_up(self, request, pk=None):
        lead = self.get_object()
        serializer = FollowUpCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.add_follow_up(
            lead,
            note=serializer.validated_data["note"],
            next_follow_up_date=serializer.validated_data.get("next_follow_up_date"),
            by=request.user,
        )
        return Response(LeadDetailSerializer(lead).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="change-status")
    def change_status(self, request, pk=None):
        lead = self.get_object()
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        services.change_status(
            lead,
            new_status=data["new_status"],
            reason=data["reason"],
            banned=data["is_banned_from_platform"],
            by=request.user,
        )
        return Response(LeadDetailSerializer(lead).data)

    @action(detail=True, methods=["post"])
    def convert(self, request, pk=None):
        lead = self.get_object()
        serializer = ConvertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lead, student = services.convert_to_student(
            lead,
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
            username=serializer.validated_data.get("username"),
            by=request.user,
        )
        return Response(
            {"student": UserBriefSerializer(student).data, "lead": LeadSerializer(lead).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["get", "post"], url_path="contact-history")
    def contact_history(self, request, pk=None):
        lead = self.get_object()
        if request.method == "GET":
            records = crm_repo.contact_queryset().filter(lead=lead)
            return Response({
                "lead": {"id": lead.id, "full_name": lead.full_name, "mobile_number": lead.mobile_number},
                "count": records.count(),
                "contacts": ContactRecordSerializer(records, many=True).data,
            })

        serializer = ContactRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = services.record_contact(lead, dict(serializer.validated_data), by=request.user)
        return Response(ContactRecordSerializer(record).data, status=status.HTTP_201_CREATED)


# ======================================================
# Contact history
# ======================================================

class ContactRecordViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Created through leads/{id}/contact-history/; edits keep the calendar event in step."""
    serializer_class = ContactRecordSerializer
    permission_classes = [IsAuthenticated, IsReception]

    filter_backends = [DjangoFilterBackend]
    filterset_class = ContactRecordFilter

    def get_queryset(self):
        return crm_repo.contact_queryset()

    def perform_update(self, serializer):
        services.update_contact(serializer.instance, dict(serializer.validated_data))

    def perform_destroy(self, instance):
        services.delete_contact(instance)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        qp = request.query_params
        return Response(services.contact_stats(
            start=_query_moment(qp.get("start_date")),
            end=_query_moment(qp.get("end_date"), end_of_day=True),
            lead_id=qp.get("lead"),
        ))


# ======================================================
# Calendar
# ======================================================

class CalendarEventViewSet(DomainErrorMixin, ModelViewSet):
    """
    GET /reception/events/?start=&end=   events starting inside the window
    """
    serializer_class = CalendarEventSerializer
    permission_classes = [IsAuthenticated, IsReception]
    pagination_class = None

    def get_queryset(self):
        if self.action != "list":
            return crm_repo.event_queryset()
        qp = self.request.query_params
        return services.events_between(
            _query_moment(qp.get("start")),
            _query_moment(qp.get("end"), end_of_day=True),
        )

    def perform_create(self, serializer):
        serializer.instance = services.create_event(
            dict(serializer.validated_data), by=self.request.user
        )

    def perform_update(self, serializer):
        services.update_event(serializer.instance, dict(serializer.validated_data))
