"""Admin registration for recurring groups."""

from __future__ import annotations

from django.contrib import admin

from apps.bookings.models import Booking

from .models import RecurringBookingGroup


class ChildBookingInline(admin.TabularInline):
    model = Booking
    fk_name = "recurring_group"
    extra = 0
    can_delete = False
    fields = ("recurring_sequence", "booking_code", "date", "status", "payment_status", "total")
    readonly_fields = fields
    ordering = ("recurring_sequence",)


@admin.register(RecurringBookingGroup)
class RecurringBookingGroupAdmin(admin.ModelAdmin):
    list_display = (
        "group_code",
        "customer_name",
        "court",
        "time_slot",
        "start_date",
        "end_date",
        "status",
        "payment_mode",
        "bulk_payment_status",
        "total_bookings",
    )
    list_filter = ("status", "payment_mode", "bulk_payment_status")
    search_fields = ("group_code", "customer_name", "customer_phone")
    readonly_fields = ("group_code", "skipped_dates", "total_bookings", "cancelled_bookings", "created_at", "updated_at")
    inlines = [ChildBookingInline]
