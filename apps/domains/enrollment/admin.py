from django.contrib import admin
from .models import Enrollment, Installment, Payment


class InstallmentInline(admin.TabularInline):
    model = Installment
    extra = 0


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("id", "student", "course", "group", "status", "total_amount", "paid_amount", "enrolled_at")
    list_display_links = ("id", "student")
    list_filter = ("status", "course")
    search_fields = ("student__name", "student__username", "course__title")
    ordering = ("-id",)
    inlines = [InstallmentInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "receipt_number", "student", "course", "amount", "method", "status", "paid_at")
    list_display_links = ("id", "receipt_number")
    list_filter = ("status", "method")
    search_fields = ("receipt_number", "transaction_id", "student__name")
    ordering = ("-id",)
