"""Court catalog models."""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain.catalog import (
    WEEKDAY_NAMES,
    CatalogSlot,
    format_time_of_day,
    parse_time_of_day,
)


class Court(models.Model):
    """A bookable court."""

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        MAINTENANCE = "maintenance", _("Maintenance")
        INACTIVE = "inactive", _("Inactive")

    class CourtType(models.TextChoices):
        NORMAL = "normal", _("Normal")
        PREMIUM = "premium", _("Premium")
        VIP = "vip", _("VIP")

    number = models.PositiveSmallIntegerField(unique=True)
    name = models.CharField(max_length=100)
    court_type = models.CharField(max_length=20, choices=CourtType.choices, default=CourtType.NORMAL)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Court")
        verbose_name_plural = _("Courts")
        ordering = ["number"]

    def __str__(self) -> str:
        return f"Court {self.number} ({self.name})"

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.AVAILABLE


class TimeSlot(models.Model):
    """An hour-long catalog entry for one day type, with its price table."""

    class DayType(models.TextChoices):
        WEEKDAY = "weekday", _("Weekday")
        WEEKEND = "weekend", _("Weekend")

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")

    start_time = models.CharField(max_length=5, help_text=_("HH:MM, 24-hour clock."))
    end_time = models.CharField(max_length=5, help_text=_("HH:MM, 24:00 allowed as end of day."))
    start_minute = models.PositiveSmallIntegerField(editable=False, default=0)
    end_minute = models.PositiveSmallIntegerField(editable=False, default=0)
    day_type = models.CharField(max_length=10, choices=DayType.choices)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    normal_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("150.00"))
    member_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("120.00"))
    peak_normal_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("200.00"))
    peak_member_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("170.00"))
    is_peak = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Time slot")
        verbose_name_plural = _("Time slots")
        ordering = ["day_type", "start_minute"]
        indexes = [
            models.Index(fields=["day_type", "status", "start_minute"], name="timeslot_catalog_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time} ({self.day_type})"

    def clean(self) -> None:
        try:
            start = parse_time_of_day(self.start_time)
            end = parse_time_of_day(self.end_time, allow_end_of_day=True)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if end <= start:
            raise ValidationError(_("End time must be after start time."))

        self.start_minute = start
        self.end_minute = end
        self.start_time = format_time_of_day(start)
        self.end_time = format_time_of_day(end)

        if self.status == self.Status.ACTIVE:
            overlapping = TimeSlot.objects.filter(
                day_type=self.day_type,
                status=self.Status.ACTIVE,
                start_minute__lt=end,
                end_minute__gt=start,
            )
            if self.pk:
                overlapping = overlapping.exclude(pk=self.pk)
            if overlapping.exists():
                raise ValidationError(_("Time slot overlaps another active slot of the same day type."))

    def save(self, *args, **kwargs):  # type: ignore
        self.clean()
        super().save(*args, **kwargs)

    def hourly_price(self, customer_type: str = "normal") -> Decimal:
        if customer_type == "member":
            return self.peak_member_price if self.is_peak else self.member_price
        return self.peak_normal_price if self.is_peak else self.normal_price

    def to_catalog_slot(self) -> CatalogSlot:
        return CatalogSlot(
            id=self.pk,
            start_minute=self.start_minute,
            end_minute=self.end_minute,
            day_type=self.day_type,
            is_peak=self.is_peak,
            normal_price=self.normal_price,
            peak_price=self.peak_normal_price,
        )


class BlockedDate(models.Model):
    """A date on which no court can be booked."""

    date = models.DateField(unique=True)
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Blocked date")
        verbose_name_plural = _("Blocked dates")
        ordering = ["date"]

    def __str__(self) -> str:
        return f"{self.date} ({self.reason or 'blocked'})"


def _weekday_choices_validator(value) -> None:
    if not isinstance(value, list) or not value:
        raise ValidationError(_("Select at least one day of week."))
    unknown = [day for day in value if day not in WEEKDAY_NAMES]
    if unknown:
        raise ValidationError(_("Unknown days of week: %(days)s"), params={"days": ", ".join(map(str, unknown))})


class GroupPlayRule(models.Model):
    """A recurring group-play session that holds courts on given weekdays."""

    session_name = models.CharField(max_length=100)
    courts = models.ManyToManyField(Court, related_name="group_play_rules", blank=True)
    days_of_week = models.JSONField(
        default=list,
        validators=[_weekday_choices_validator],
        help_text=_("Lower-case weekday names, e.g. [\"monday\", \"thursday\"]."),
    )
    start_time = models.CharField(max_length=5)
    end_time = models.CharField(max_length=5)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Group play rule")
        verbose_name_plural = _("Group play rules")
        ordering = ["session_name", "start_time"]

    def __str__(self) -> str:
        return f"{self.session_name} {self.start_time}-{self.end_time}"

    def clean(self) -> None:
        try:
            start = parse_time_of_day(self.start_time)
            end = parse_time_of_day(self.end_time, allow_end_of_day=True)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if end <= start:
            raise ValidationError(_("End time must be after start time."))
