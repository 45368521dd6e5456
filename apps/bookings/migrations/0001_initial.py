from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("courts", "0001_initial"),
        ("recurring", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("booking_code", models.CharField(editable=False, max_length=20, unique=True)),
                ("date", models.DateField()),
                (
                    "start_minute",
                    models.PositiveSmallIntegerField(
                        choices=[(0, ":00"), (30, ":30")],
                        default=0,
                        help_text="Minute within the anchor slot at which play starts.",
                    ),
                ),
                ("duration_hours", models.DecimalField(decimal_places=1, default=Decimal("1.0"), max_digits=3)),
                ("customer_name", models.CharField(max_length=100)),
                ("customer_phone", models.CharField(max_length=20)),
                ("customer_email", models.EmailField(blank=True, max_length=254)),
                (
                    "customer_type",
                    models.CharField(
                        choices=[("normal", "Normal"), ("member", "Member")], default="normal", max_length=10
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[("admin", "Front desk"), ("customer", "Customer"), ("recurring", "Recurring group")],
                        default="admin",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("payment_pending", "Awaiting payment"),
                            ("confirmed", "Confirmed"),
                            ("checked-in", "Checked in"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="confirmed",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("partial", "Partially paid"), ("paid", "Paid")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("cash", "Cash"),
                            ("transfer", "Transfer"),
                            ("bank_transfer", "Bank transfer"),
                            ("qr", "QR code"),
                            ("promptpay", "PromptPay"),
                            ("card", "Card"),
                        ],
                        max_length=20,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("discount_percent", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                (
                    "deposit",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), help_text="Amount paid so far.", max_digits=10
                    ),
                ),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("currency", models.CharField(default="THB", max_length=3)),
                ("payment_deadline", models.DateTimeField(blank=True, null=True)),
                ("recurring_sequence", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "court",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="bookings", to="courts.court"
                    ),
                ),
                (
                    "time_slot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="bookings", to="courts.timeslot"
                    ),
                ),
                (
                    "recurring_group",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="recurring.recurringbookinggroup",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="court_bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-date", "court__number"],
                "indexes": [
                    models.Index(fields=["court", "date"], name="booking_court_date_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(recurring_group__isnull=False),
                        fields=("recurring_group", "recurring_sequence"),
                        name="booking_unique_group_sequence",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(start_minute__in=[0, 30]),
                        name="booking_start_minute_half_hour",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingHalfUnit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("half", models.PositiveSmallIntegerField(choices=[(0, "first"), (1, "second")])),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="half_units",
                        to="bookings.booking",
                    ),
                ),
                (
                    "court",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="+", to="courts.court"
                    ),
                ),
                (
                    "time_slot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="+", to="courts.timeslot"
                    ),
                ),
            ],
            options={
                "verbose_name": "Booked half-unit",
                "verbose_name_plural": "Booked half-units",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("court", "date", "time_slot", "half"),
                        name="unique_court_date_half_unit",
                    ),
                ],
            },
        ),
    ]
