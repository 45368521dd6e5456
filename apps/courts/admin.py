"""Admin registration for the court catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import BlockedDate, Court, GroupPlayRule, TimeSlot


@admin.register(Court)
class CourtAdmin(admin.ModelAdmin):
    list_display = ("number", "name", "court_type", "status")
    list_filter = ("status", "court_type")
    search_fields = ("name",)


@admin.register(TimeSlot)
class TimeSlotAdmin(admin.ModelAdmin):
    list_display = ("start_time", "end_time", "day_type", "status", "is_peak", "normal_price", "peak_normal_price")
    list_filter = ("day_type", "status", "is_peak")
    readonly_fields = ("start_minute", "end_minute")


@admin.register(BlockedDate)
class BlockedDateAdmin(admin.ModelAdmin):
    list_display = ("date", "reason")
    date_hierarchy = "date"


@admin.register(GroupPlayRule)
class GroupPlayRuleAdmin(admin.ModelAdmin):
    list_display = ("session_name", "start_time", "end_time", "is_active")
    list_filter = ("is_active",)
    filter_horizontal = ("courts",)
