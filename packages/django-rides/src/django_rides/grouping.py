"""Ride grouping utilities for listings.

Pure functions that organise ride rows for display:
- Departure vs return leg filtering
- Multi-date series extraction (recurring rides sharing a group id)
- Round-trip merging (departure leg + return leg shown as one entry)

None of these functions touch the database or mutate their inputs.
"""
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from django_rides.projections import RideRow

UNTITLED_SERIES = 'Untitled Series'


@dataclass(frozen=True)
class SeriesGroup:
    """
    A multi-date series of rides.

    Attributes:
        group_id: The shared round_trip_group_id
        rides: Members ordered by (departure_date, id)
        title: Title of the earliest member
        start_location: Start location of the earliest member
        end_location: End location of the earliest member
    """

    group_id: object
    rides: tuple
    title: str
    start_location: str
    end_location: str

    @property
    def first(self):
        return self.rides[0]


def series_sort_key(ride):
    """Total order within a series: date first, id breaks ties."""
    return (ride.departure_date, str(ride.id))


def listing_sort_key(ride):
    return (ride.departure_date, ride.departure_time, str(ride.id))


def is_departure_leg(ride) -> bool:
    """Standalone rides and departure legs are listable; return legs are not."""
    return ride.trip_direction in ('none', 'departure', None, '')


def filter_departure_legs(rides: Iterable) -> list:
    """
    Filter rides to only departure legs.

    A return leg is not an independent posting, so it never appears on its
    own. A return leg whose departure sibling is missing is dropped too.

    Args:
        rides: Ride rows to filter

    Returns:
        Rides whose trip_direction is 'none' or 'departure', in input order
    """
    return [ride for ride in rides if is_departure_leg(ride)]


def extract_series_groups(rides: Iterable) -> list[SeriesGroup]:
    """
    Extract multi-date series groups from a list of rides.

    Only series members (round_trip_group_id set and is_recurring=True) are
    grouped; everything else is ignored. A group with a single member is
    returned as-is.

    Args:
        rides: Ride rows to filter and group

    Returns:
        Series groups ordered by their earliest member's departure date

    Usage:
        for series in extract_series_groups(my_rides):
            print(f"{series.title}: {len(series.rides)} trips")
    """
    members = {}
    for ride in rides:
        if ride.round_trip_group_id and ride.is_recurring:
            members.setdefault(ride.round_trip_group_id, []).append(ride)

    groups = []
    for group_id, group_rides in members.items():
        ordered = tuple(sorted(group_rides, key=series_sort_key))
        first = ordered[0]
        groups.append(SeriesGroup(
            group_id=group_id,
            rides=ordered,
            title=first.title or UNTITLED_SERIES,
            start_location=first.start_location,
            end_location=first.end_location,
        ))

    return sorted(groups, key=lambda g: (g.first.departure_date, str(g.group_id)))


def series_siblings(anchor, rides: Iterable) -> list:
    """
    Return the series members sharing the anchor's group, in series order.

    A ride that is not a series member has no siblings besides itself.
    """
    if not anchor.is_series_member:
        return [anchor]
    for group in extract_series_groups(rides):
        if group.group_id == anchor.round_trip_group_id:
            return list(group.rides)
    return [anchor]


def merge_round_trip_pair(departure_leg: RideRow, return_leg: RideRow) -> RideRow:
    """
    Combine a round trip's two legs into one display-only row.

    The result equals `departure_leg` with return_date/return_time taken
    from the return leg's departure date and time. Neither input changes.
    """
    return replace(
        departure_leg,
        return_date=return_leg.departure_date,
        return_time=return_leg.departure_time,
    )


def _group_representative(group_rides: Sequence):
    if len(group_rides) == 1:
        return group_rides[0]

    if any(ride.is_recurring for ride in group_rides):
        return min(group_rides, key=series_sort_key)

    departure_leg = next(
        (r for r in group_rides if r.trip_direction == 'departure'),
        group_rides[0],
    )
    return_leg = next(
        (r for r in group_rides if r.trip_direction == 'return'),
        None,
    )
    if return_leg is None:
        return departure_leg
    return merge_round_trip_pair(departure_leg, return_leg)


def assemble_listing(rides: Iterable) -> list:
    """
    Build the display listing for a set of rides.

    Entries are collected in first-encountered order; every group of rides
    sharing a round_trip_group_id is replaced by one representative:
    - a series by its earliest occurrence
    - a round trip by its merged departure/return pair
    Return legs left standing on their own are then dropped, and the
    listing is sorted by (departure_date, departure_time, id).
    """
    groups = {}
    entries = []
    for ride in rides:
        group_id = ride.round_trip_group_id
        if not group_id:
            entries.append(('ride', ride))
            continue
        if group_id not in groups:
            groups[group_id] = []
            entries.append(('group', group_id))
        groups[group_id].append(ride)

    listing = [
        value if kind == 'ride' else _group_representative(groups[value])
        for kind, value in entries
    ]
    return sorted(filter_departure_legs(listing), key=listing_sort_key)
