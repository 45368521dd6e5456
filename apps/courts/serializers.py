"""Serializers for the court catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import BlockedDate, Court, TimeSlot


class CourtSerializer(serializers.ModelSerializer):
    class Meta:
        model = Court
        fields = ["id", "number", "name", "court_type", "status", "description"]


class TimeSlotSerializer(serializers.ModelSerializer):
    class Meta:
        model = TimeSlot
        fields = [
            "id",
            "start_time",
            "end_time",
            "day_type",
            "status",
            "is_peak",
            "normal_price",
            "member_price",
            "peak_normal_price",
            "peak_member_price",
        ]


class BlockedDateSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlockedDate
        fields = ["id", "date", "reason"]


class DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
