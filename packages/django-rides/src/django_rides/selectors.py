"""
Django Rides Selectors - Public read-only API for the rides app.

Every selector takes the database alias explicitly (`using`) so callers
thread one store handle through previews and mutations.

Usage:
    from django_rides.selectors import get_ride_row, get_series_rows
"""
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS

from django_rides.exceptions import RideNotFound
from django_rides.grouping import assemble_listing
from django_rides.models import Ride
from django_rides.projections import RideRow


@dataclass(frozen=True)
class ListingPage:
    """One page of an assembled ride listing."""

    rides: list
    total_count: int
    has_more: bool


def ride_queryset(using: str = DEFAULT_DB_ALIAS):
    """Base queryset bound to the given database alias."""
    return Ride.objects.using(using)


def get_ride_row(ride_id, using: str = DEFAULT_DB_ALIAS) -> RideRow:
    """
    Get one ride as a projection.

    Raises:
        RideNotFound: If no ride has this id
    """
    try:
        rows = RideRow.from_queryset(ride_queryset(using).filter(pk=ride_id))
    except ValidationError:
        # Malformed UUID: nothing can match it
        rows = []
    if not rows:
        raise RideNotFound(ride_id)
    return rows[0]


def get_series_rows(anchor: RideRow, using: str = DEFAULT_DB_ALIAS) -> list[RideRow]:
    """
    Get the anchor's series members ordered by (departure_date, id).

    A ride outside any series is its own only sibling.
    """
    if not anchor.is_series_member:
        return [anchor]
    return RideRow.from_queryset(
        ride_queryset(using).series_members(anchor.round_trip_group_id).in_series_order()
    )


def get_rides_for_poster(poster_id, using: str = DEFAULT_DB_ALIAS) -> list[RideRow]:
    """Get every ride posted by a user, in series order."""
    return RideRow.from_queryset(
        ride_queryset(using).filter(poster_id=poster_id).in_series_order()
    )


def get_upcoming_listing(
    *,
    exclude_poster_id=None,
    posting_type: str | None = None,
    page: int = 1,
    page_size: int = 20,
    using: str = DEFAULT_DB_ALIAS,
) -> ListingPage:
    """
    Get a page of the public listing of upcoming active rides.

    Rows are assembled (round trips merged, series collapsed to their
    earliest upcoming date, stray return legs dropped) before paging, so
    the counts refer to listing entries rather than stored rows.

    Args:
        exclude_poster_id: Hide this user's own rides
        posting_type: Restrict to driver, passenger or flexible postings
        page: 1-indexed page number
        page_size: Entries per page
        using: Database alias
    """
    queryset = ride_queryset(using).active().upcoming()
    if exclude_poster_id is not None:
        queryset = queryset.exclude(poster_id=exclude_poster_id)
    if posting_type:
        queryset = queryset.filter(posting_type=posting_type)

    listing = assemble_listing(RideRow.from_queryset(queryset.in_series_order()))
    start = (page - 1) * page_size
    entries = listing[start:start + page_size]
    return ListingPage(
        rides=entries,
        total_count=len(listing),
        has_more=start + len(entries) < len(listing),
    )
