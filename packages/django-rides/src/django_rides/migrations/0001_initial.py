# Generated manually for standalone django-rides package

import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Ride",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "posting_type",
                    models.CharField(
                        choices=[
                            ("driver", "Driver"),
                            ("passenger", "Passenger"),
                            ("flexible", "Flexible"),
                        ],
                        default="driver",
                        max_length=20,
                    ),
                ),
                ("title", models.CharField(blank=True, max_length=100)),
                ("start_location", models.CharField(max_length=100)),
                ("end_location", models.CharField(max_length=100)),
                ("start_lat", models.FloatField(blank=True, null=True)),
                ("start_lng", models.FloatField(blank=True, null=True)),
                ("end_lat", models.FloatField(blank=True, null=True)),
                ("end_lng", models.FloatField(blank=True, null=True)),
                ("departure_date", models.DateField(db_index=True)),
                ("departure_time", models.TimeField()),
                ("is_round_trip", models.BooleanField(default=False)),
                (
                    "trip_direction",
                    models.CharField(
                        choices=[
                            ("departure", "Departure"),
                            ("return", "Return"),
                            ("none", "None"),
                        ],
                        default="none",
                        max_length=20,
                    ),
                ),
                (
                    "round_trip_group_id",
                    models.UUIDField(
                        blank=True,
                        help_text="Shared by the legs of a round trip or the dates of a series",
                        null=True,
                    ),
                ),
                (
                    "is_recurring",
                    models.BooleanField(
                        default=False,
                        help_text="True for multi-date series members",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("pricing_type", models.CharField(blank=True, max_length=20)),
                (
                    "price_per_seat",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "total_seats",
                    models.PositiveSmallIntegerField(
                        default=1,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(10),
                        ],
                    ),
                ),
                (
                    "available_seats",
                    models.PositiveSmallIntegerField(
                        default=1,
                        validators=[django.core.validators.MaxValueValidator(10)],
                    ),
                ),
                ("car_type", models.CharField(blank=True, max_length=100)),
                ("has_awd", models.BooleanField(default=False)),
                ("description", models.TextField(blank=True, max_length=500)),
                ("special_instructions", models.TextField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "poster",
                    models.ForeignKey(
                        help_text="User who posted the ride",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rides",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["departure_date", "departure_time", "id"],
                "indexes": [
                    models.Index(
                        fields=["round_trip_group_id", "is_recurring", "departure_date"],
                        name="ride_series_date_idx",
                    ),
                    models.Index(
                        fields=["poster", "departure_date"],
                        name="ride_poster_date_idx",
                    ),
                    models.Index(
                        fields=["status", "departure_date"],
                        name="ride_status_date_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("is_round_trip", True),
                                ("trip_direction__in", ["departure", "return"]),
                            ),
                            models.Q(
                                ("is_round_trip", False),
                                ("trip_direction", "none"),
                            ),
                            _connector="OR",
                        ),
                        name="ride_direction_requires_round_trip",
                    ),
                ],
            },
        ),
    ]
