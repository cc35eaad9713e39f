"""Explicit row shapes for ride reads.

Listings and scope previews read rides through `RideRow` instead of passing
model instances or loose dicts around. The projection names every column it
needs, so a renamed or missing field fails at query time rather than showing
up later as a silently missing value.
"""
from dataclasses import asdict, dataclass, fields
from datetime import date, time
from decimal import Decimal
from typing import Any
from uuid import UUID

# Display-only attributes filled in by the grouping helpers, never stored.
DISPLAY_ONLY_FIELDS = ('return_date', 'return_time')


@dataclass(frozen=True)
class RideRow:
    """
    Read-only projection of a Ride row.

    Usage:
        rows = RideRow.from_queryset(Ride.objects.filter(poster_id=user.pk))

        # Merged round trips are new rows, the inputs stay untouched
        merged = dataclasses.replace(departure, return_date=ret.departure_date)
    """

    id: UUID
    poster_id: Any
    posting_type: str
    title: str
    start_location: str
    end_location: str
    start_lat: float | None
    start_lng: float | None
    end_lat: float | None
    end_lng: float | None
    departure_date: date
    departure_time: time
    is_round_trip: bool
    trip_direction: str
    round_trip_group_id: UUID | None
    is_recurring: bool
    status: str
    pricing_type: str
    price_per_seat: Decimal
    total_seats: int
    available_seats: int
    car_type: str
    has_awd: bool
    description: str
    special_instructions: str
    return_date: date | None = None
    return_time: time | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        """Stored columns selected for this projection."""
        return tuple(
            f.name for f in fields(cls) if f.name not in DISPLAY_ONLY_FIELDS
        )

    @classmethod
    def from_values(cls, values: dict) -> 'RideRow':
        """Build from a `.values(*RideRow.field_names())` dict."""
        return cls(**{name: values[name] for name in cls.field_names()})

    @classmethod
    def from_instance(cls, ride) -> 'RideRow':
        """Build from a Ride model instance."""
        return cls(**{name: getattr(ride, name) for name in cls.field_names()})

    @classmethod
    def from_queryset(cls, queryset) -> list['RideRow']:
        """Evaluate a Ride queryset into projections, preserving its order."""
        return [cls.from_values(v) for v in queryset.values(*cls.field_names())]

    @property
    def is_series_member(self) -> bool:
        return self.round_trip_group_id is not None and self.is_recurring

    def as_dict(self) -> dict:
        """JSON-ready dict (dates, times, UUIDs and decimals as strings)."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, (date, time)):
                data[key] = value.isoformat()
            elif isinstance(value, (UUID, Decimal)):
                data[key] = str(value)
        return data
