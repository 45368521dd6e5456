"""FilterSet definitions for booking listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    court = django_filters.NumberFilter(field_name="court_id")
    customer_phone = django_filters.CharFilter(field_name="customer_phone", lookup_expr="icontains")
    recurring_group = django_filters.NumberFilter(field_name="recurring_group_id")

    class Meta:
        model = Booking
        fields = ["date", "status", "payment_status", "source"]
