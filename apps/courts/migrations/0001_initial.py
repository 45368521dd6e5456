from decimal import Decimal

from django.db import migrations, models

import apps.courts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BlockedDate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField(unique=True)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Blocked date",
                "verbose_name_plural": "Blocked dates",
                "ordering": ["date"],
            },
        ),
        migrations.CreateModel(
            name="Court",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.PositiveSmallIntegerField(unique=True)),
                ("name", models.CharField(max_length=100)),
                (
                    "court_type",
                    models.CharField(
                        choices=[("normal", "Normal"), ("premium", "Premium"), ("vip", "VIP")],
                        default="normal",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("available", "Available"), ("maintenance", "Maintenance"), ("inactive", "Inactive")],
                        default="available",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Court",
                "verbose_name_plural": "Courts",
                "ordering": ["number"],
            },
        ),
        migrations.CreateModel(
            name="TimeSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.CharField(help_text="HH:MM, 24-hour clock.", max_length=5)),
                ("end_time", models.CharField(help_text="HH:MM, 24:00 allowed as end of day.", max_length=5)),
                ("start_minute", models.PositiveSmallIntegerField(default=0, editable=False)),
                ("end_minute", models.PositiveSmallIntegerField(default=0, editable=False)),
                (
                    "day_type",
                    models.CharField(choices=[("weekday", "Weekday"), ("weekend", "Weekend")], max_length=10),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")], default="active", max_length=10
                    ),
                ),
                ("normal_price", models.DecimalField(decimal_places=2, default=Decimal("150.00"), max_digits=10)),
                ("member_price", models.DecimalField(decimal_places=2, default=Decimal("120.00"), max_digits=10)),
                ("peak_normal_price", models.DecimalField(decimal_places=2, default=Decimal("200.00"), max_digits=10)),
                ("peak_member_price", models.DecimalField(decimal_places=2, default=Decimal("170.00"), max_digits=10)),
                ("is_peak", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Time slot",
                "verbose_name_plural": "Time slots",
                "ordering": ["day_type", "start_minute"],
                "indexes": [
                    models.Index(fields=["day_type", "status", "start_minute"], name="timeslot_catalog_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="GroupPlayRule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("session_name", models.CharField(max_length=100)),
                (
                    "days_of_week",
                    models.JSONField(
                        default=list,
                        help_text='Lower-case weekday names, e.g. ["monday", "thursday"].',
                        validators=[apps.courts.models._weekday_choices_validator],
                    ),
                ),
                ("start_time", models.CharField(max_length=5)),
                ("end_time", models.CharField(max_length=5)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "courts",
                    models.ManyToManyField(blank=True, related_name="group_play_rules", to="courts.court"),
                ),
            ],
            options={
                "verbose_name": "Group play rule",
                "verbose_name_plural": "Group play rules",
                "ordering": ["session_name", "start_time"],
            },
        ),
    ]
