"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingHalfUnit


class BookingHalfUnitInline(admin.TabularInline):
    model = BookingHalfUnit
    extra = 0
    can_delete = False
    readonly_fields = ("court", "date", "time_slot", "half")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "court",
        "date",
        "time_slot",
        "start_minute",
        "duration_hours",
        "customer_name",
        "status",
        "payment_status",
        "total",
    )
    list_filter = ("status", "payment_status", "source", "date")
    search_fields = ("booking_code", "customer_name", "customer_phone")
    readonly_fields = (
        "booking_code",
        "created_at",
        "updated_at",
        "subtotal",
        "discount",
        "total",
    )
    inlines = [BookingHalfUnitInline]
