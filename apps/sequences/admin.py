"""Admin registration for sequence counters."""

from __future__ import annotations

from django.contrib import admin

from .models import SequenceCounter


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key",)
    readonly_fields = ("key", "value", "updated_at")
