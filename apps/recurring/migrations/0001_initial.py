from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.recurring.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("courts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="RecurringBookingGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("group_code", models.CharField(editable=False, max_length=20, unique=True)),
                ("customer_name", models.CharField(max_length=100)),
                ("customer_phone", models.CharField(max_length=20)),
                ("customer_email", models.EmailField(blank=True, max_length=254)),
                (
                    "weekdays",
                    models.JSONField(
                        default=list,
                        help_text="Days of the week, 0 = Sunday to 6 = Saturday.",
                        validators=[apps.recurring.models._weekday_numbers_validator],
                    ),
                ),
                ("duration_hours", models.DecimalField(decimal_places=1, default=Decimal("1.0"), max_digits=3)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "payment_mode",
                    models.CharField(
                        choices=[("bulk", "Pay for all sessions at once"), ("per_session", "Pay per session")],
                        default="per_session",
                        max_length=20,
                    ),
                ),
                ("bulk_total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("bulk_paid_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "bulk_payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("partial", "Partially paid"), ("paid", "Paid")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("bulk_payment_method", models.CharField(blank=True, max_length=20)),
                ("bulk_paid_at", models.DateTimeField(blank=True, null=True)),
                ("total_bookings", models.PositiveIntegerField(default=0)),
                ("cancelled_bookings", models.PositiveIntegerField(default=0)),
                ("skipped_dates", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "court",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="recurring_groups",
                        to="courts.court",
                    ),
                ),
                (
                    "time_slot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="recurring_groups",
                        to="courts.timeslot",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="recurring_groups",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Recurring booking group",
                "verbose_name_plural": "Recurring booking groups",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "end_date"], name="recurring_status_end_idx"),
                    models.Index(fields=["customer_phone"], name="recurring_phone_idx"),
                ],
            },
        ),
    ]
