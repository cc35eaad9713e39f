"""Ride model: one dated trip posting.

A posting is created as a batch of rows:
- one row for a one-way ride
- two rows (departure + return leg) sharing round_trip_group_id for a round trip
- N rows sharing round_trip_group_id with is_recurring=True for a series

Rows are never collapsed; round-trip pairing and series grouping exist only
for display (see grouping.py).
"""
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from django_rides.querysets import RideQuerySet


class PostingType(models.TextChoices):
    DRIVER = 'driver', _('Driver')
    PASSENGER = 'passenger', _('Passenger')
    FLEXIBLE = 'flexible', _('Flexible')


class TripDirection(models.TextChoices):
    DEPARTURE = 'departure', _('Departure')
    RETURN = 'return', _('Return')
    NONE = 'none', _('None')


class RideStatus(models.TextChoices):
    ACTIVE = 'active', _('Active')
    INACTIVE = 'inactive', _('Inactive')
    COMPLETED = 'completed', _('Completed')
    CANCELLED = 'cancelled', _('Cancelled')


class Ride(models.Model):
    """
    One dated trip posting (an occurrence).

    Series membership (round_trip_group_id set and is_recurring=True) and
    round-trip membership are fixed at creation; the update services never
    accept either field in a patch.

    Usage:
        from django_rides.services import create_series

        rides = create_series(poster=user, data=form_data, dates=[d1, d2, d3])
        Ride.objects.series_members(rides[0].round_trip_group_id)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    poster = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='rides',
        help_text="User who posted the ride"
    )
    posting_type = models.CharField(
        max_length=20,
        choices=PostingType.choices,
        default=PostingType.DRIVER,
    )

    # Itinerary
    title = models.CharField(max_length=100, blank=True)
    start_location = models.CharField(max_length=100)
    end_location = models.CharField(max_length=100)
    start_lat = models.FloatField(null=True, blank=True)
    start_lng = models.FloatField(null=True, blank=True)
    end_lat = models.FloatField(null=True, blank=True)
    end_lng = models.FloatField(null=True, blank=True)

    departure_date = models.DateField(db_index=True)
    departure_time = models.TimeField()

    # Round trip / series membership
    is_round_trip = models.BooleanField(default=False)
    trip_direction = models.CharField(
        max_length=20,
        choices=TripDirection.choices,
        default=TripDirection.NONE,
    )
    round_trip_group_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Shared by the legs of a round trip or the dates of a series"
    )
    is_recurring = models.BooleanField(
        default=False,
        help_text="True for multi-date series members"
    )

    status = models.CharField(
        max_length=20,
        choices=RideStatus.choices,
        default=RideStatus.ACTIVE,
    )

    # Seats and pricing (carried, not interpreted here)
    pricing_type = models.CharField(max_length=20, blank=True)
    price_per_seat = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
    )
    total_seats = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(10)],
    )
    available_seats = models.PositiveSmallIntegerField(
        default=1,
        validators=[MaxValueValidator(10)],
    )
    car_type = models.CharField(max_length=100, blank=True)
    has_awd = models.BooleanField(default=False)
    description = models.TextField(max_length=500, blank=True)
    special_instructions = models.TextField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RideQuerySet.as_manager()

    class Meta:
        ordering = ['departure_date', 'departure_time', 'id']
        indexes = [
            models.Index(
                fields=['round_trip_group_id', 'is_recurring', 'departure_date'],
                name='ride_series_date_idx',
            ),
            models.Index(fields=['poster', 'departure_date'], name='ride_poster_date_idx'),
            models.Index(fields=['status', 'departure_date'], name='ride_status_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(is_round_trip=True, trip_direction__in=['departure', 'return'])
                    | Q(is_round_trip=False, trip_direction='none')
                ),
                name='ride_direction_requires_round_trip',
            ),
        ]

    def __str__(self):
        return f"{self.start_location} → {self.end_location} on {self.departure_date}"

    @property
    def is_series_member(self) -> bool:
        """True when the ride belongs to a recurring series."""
        return self.round_trip_group_id is not None and self.is_recurring

    def clean(self):
        """Validate the round-trip direction invariant."""
        super().clean()
        if self.is_round_trip:
            if self.trip_direction == TripDirection.NONE:
                raise ValidationError({
                    'trip_direction': 'Round trip legs must be departure or return'
                })
        elif self.trip_direction != TripDirection.NONE:
            raise ValidationError({
                'trip_direction': 'Only round trip legs may have a direction'
            })
