"""Pytest configuration for django-rides tests."""

import uuid
from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from django_rides.projections import RideRow


@pytest.fixture
def user(django_user_model):
    """Create the poster used by most tests."""
    return django_user_model.objects.create_user(username='driver', password='test')


@pytest.fixture
def other_user(django_user_model):
    """Create a second user who owns nothing."""
    return django_user_model.objects.create_user(username='passenger', password='test')


@pytest.fixture
def make_ride(db):
    """Factory creating stored Ride rows with sensible defaults."""
    from django_rides.models import Ride

    def _make(poster, **overrides):
        values = {
            'posting_type': 'driver',
            'title': 'Commute',
            'start_location': 'San Francisco',
            'end_location': 'Lake Tahoe',
            'departure_date': date(2025, 2, 1),
            'departure_time': time(8, 0),
            'total_seats': 3,
            'available_seats': 3,
        }
        values.update(overrides)
        return Ride.objects.create(poster=poster, **values)

    return _make


@pytest.fixture
def series(user, make_ride):
    """Three-date recurring series sharing one group id."""
    group_id = uuid.uuid4()
    return [
        make_ride(
            user,
            departure_date=day,
            round_trip_group_id=group_id,
            is_recurring=True,
        )
        for day in (date(2025, 2, 1), date(2025, 2, 8), date(2025, 2, 15))
    ]


@pytest.fixture
def round_trip(user, make_ride):
    """Departure and return legs of a non-recurring round trip."""
    group_id = uuid.uuid4()
    departure = make_ride(
        user,
        departure_date=date(2025, 2, 1),
        is_round_trip=True,
        trip_direction='departure',
        round_trip_group_id=group_id,
    )
    ret = make_ride(
        user,
        start_location='Lake Tahoe',
        end_location='San Francisco',
        departure_date=date(2025, 2, 8),
        departure_time=time(17, 30),
        is_round_trip=True,
        trip_direction='return',
        round_trip_group_id=group_id,
    )
    return departure, ret


@pytest.fixture
def upcoming():
    """Return a date `days` from today."""
    def _upcoming(days):
        return timezone.localdate() + timedelta(days=days)

    return _upcoming


@pytest.fixture
def make_row():
    """Factory building unsaved RideRow projections for pure-function tests."""

    def _make(**overrides):
        values = {
            'id': uuid.uuid4(),
            'poster_id': 1,
            'posting_type': 'driver',
            'title': 'Commute',
            'start_location': 'San Francisco',
            'end_location': 'Lake Tahoe',
            'start_lat': None,
            'start_lng': None,
            'end_lat': None,
            'end_lng': None,
            'departure_date': date(2025, 2, 1),
            'departure_time': time(8, 0),
            'is_round_trip': False,
            'trip_direction': 'none',
            'round_trip_group_id': None,
            'is_recurring': False,
            'status': 'active',
            'pricing_type': '',
            'price_per_seat': Decimal('0.00'),
            'total_seats': 3,
            'available_seats': 3,
            'car_type': '',
            'has_awd': False,
            'description': '',
            'special_instructions': '',
        }
        values.update(overrides)
        return RideRow(**values)

    return _make
