"""Tests for the listing grouping helpers."""

import uuid
from dataclasses import FrozenInstanceError
from datetime import date, time

import pytest

from django_rides.grouping import (
    UNTITLED_SERIES,
    assemble_listing,
    extract_series_groups,
    filter_departure_legs,
    merge_round_trip_pair,
    series_siblings,
)


@pytest.fixture
def series_rows(make_row):
    group_id = uuid.uuid4()
    return [
        make_row(departure_date=day, round_trip_group_id=group_id, is_recurring=True)
        for day in (date(2025, 2, 15), date(2025, 2, 1), date(2025, 2, 8))
    ]


@pytest.fixture
def round_trip_rows(make_row):
    group_id = uuid.uuid4()
    departure = make_row(
        departure_date=date(2025, 2, 1),
        is_round_trip=True,
        trip_direction='departure',
        round_trip_group_id=group_id,
    )
    ret = make_row(
        start_location='Lake Tahoe',
        end_location='San Francisco',
        departure_date=date(2025, 2, 8),
        departure_time=time(17, 30),
        is_round_trip=True,
        trip_direction='return',
        round_trip_group_id=group_id,
    )
    return departure, ret


class TestFilterDepartureLegs:
    """Tests for filter_departure_legs."""

    def test_keeps_standalone_and_departure_legs(self, make_row, round_trip_rows):
        one_way = make_row()
        departure, ret = round_trip_rows

        result = filter_departure_legs([one_way, departure, ret])

        assert result == [one_way, departure]

    def test_never_returns_a_return_leg(self, round_trip_rows):
        _, ret = round_trip_rows

        assert filter_departure_legs([ret, ret]) == []


class TestExtractSeriesGroups:
    """Tests for extract_series_groups."""

    def test_members_sorted_by_date(self, series_rows):
        groups = extract_series_groups(series_rows)

        assert len(groups) == 1
        dates = [r.departure_date for r in groups[0].rides]
        assert dates == [date(2025, 2, 1), date(2025, 2, 8), date(2025, 2, 15)]

    def test_metadata_from_earliest_member(self, make_row):
        group_id = uuid.uuid4()
        late = make_row(
            title='Later', departure_date=date(2025, 3, 1),
            round_trip_group_id=group_id, is_recurring=True,
        )
        early = make_row(
            title='Earlier', start_location='Oakland', departure_date=date(2025, 2, 1),
            round_trip_group_id=group_id, is_recurring=True,
        )

        group = extract_series_groups([late, early])[0]

        assert group.title == 'Earlier'
        assert group.start_location == 'Oakland'
        assert group.first == early

    def test_untitled_series_fallback(self, make_row):
        row = make_row(title='', round_trip_group_id=uuid.uuid4(), is_recurring=True)

        assert extract_series_groups([row])[0].title == UNTITLED_SERIES

    def test_ignores_round_trips_and_one_way_rides(self, make_row, round_trip_rows):
        assert extract_series_groups([make_row(), *round_trip_rows]) == []

    def test_single_member_group_is_valid(self, make_row):
        row = make_row(round_trip_group_id=uuid.uuid4(), is_recurring=True)

        groups = extract_series_groups([row])

        assert len(groups) == 1
        assert groups[0].rides == (row,)

    def test_groups_ordered_by_first_date(self, make_row):
        later_group = uuid.uuid4()
        earlier_group = uuid.uuid4()
        rows = [
            make_row(departure_date=date(2025, 5, 1), round_trip_group_id=later_group, is_recurring=True),
            make_row(departure_date=date(2025, 1, 1), round_trip_group_id=earlier_group, is_recurring=True),
        ]

        groups = extract_series_groups(rows)

        assert [g.group_id for g in groups] == [earlier_group, later_group]

    def test_idempotent(self, series_rows, make_row):
        other = [
            make_row(round_trip_group_id=uuid.uuid4(), is_recurring=True)
            for _ in range(2)
        ]
        groups = extract_series_groups(series_rows + other)

        regrouped = extract_series_groups(
            [ride for group in groups for ride in group.rides]
        )

        assert regrouped == groups


class TestMergeRoundTripPair:
    """Tests for merge_round_trip_pair."""

    def test_copies_return_date_and_time(self, round_trip_rows):
        departure, ret = round_trip_rows

        merged = merge_round_trip_pair(departure, ret)

        assert merged.return_date == date(2025, 2, 8)
        assert merged.return_time == time(17, 30)
        assert merged.id == departure.id
        assert merged.start_location == departure.start_location

    def test_inputs_unmodified(self, round_trip_rows):
        departure, ret = round_trip_rows

        merge_round_trip_pair(departure, ret)

        assert departure.return_date is None
        assert ret.return_date is None

    def test_rows_are_frozen(self, make_row):
        row = make_row()

        with pytest.raises(FrozenInstanceError):
            row.title = 'Changed'


class TestSeriesSiblings:
    """Tests for series_siblings."""

    def test_returns_group_members_in_order(self, series_rows, make_row):
        anchor = series_rows[0]

        siblings = series_siblings(anchor, series_rows + [make_row()])

        assert len(siblings) == 3
        assert siblings[0].departure_date == date(2025, 2, 1)

    def test_non_series_anchor_is_alone(self, make_row):
        anchor = make_row()

        assert series_siblings(anchor, [anchor, make_row()]) == [anchor]


class TestAssembleListing:
    """Tests for assemble_listing."""

    def test_round_trip_shown_as_one_merged_entry(self, round_trip_rows):
        listing = assemble_listing(list(round_trip_rows))

        assert len(listing) == 1
        assert listing[0].trip_direction == 'departure'
        assert listing[0].return_date == date(2025, 2, 8)

    def test_series_collapsed_to_earliest_date(self, series_rows):
        listing = assemble_listing(series_rows)

        assert len(listing) == 1
        assert listing[0].departure_date == date(2025, 2, 1)

    def test_orphan_return_leg_dropped(self, round_trip_rows):
        _, ret = round_trip_rows

        assert assemble_listing([ret]) == []

    def test_sorted_by_date_then_time(self, make_row):
        late = make_row(departure_date=date(2025, 2, 2), departure_time=time(7, 0))
        early_evening = make_row(departure_date=date(2025, 2, 1), departure_time=time(18, 0))
        early_morning = make_row(departure_date=date(2025, 2, 1), departure_time=time(6, 0))

        listing = assemble_listing([late, early_evening, early_morning])

        assert listing == [early_morning, early_evening, late]

    def test_mixed_listing(self, make_row, series_rows, round_trip_rows):
        one_way = make_row(departure_date=date(2025, 1, 20))

        listing = assemble_listing([*round_trip_rows, one_way, *series_rows])

        assert len(listing) == 3
        assert listing[0] == one_way


class TestSameDateOrdering:
    """Series members on the same date are ordered by id."""

    def test_extract_series_groups_breaks_date_ties_by_id(self, make_row):
        group_id = uuid.uuid4()
        low = make_row(
            id=uuid.UUID('00000000-0000-4000-8000-000000000001'),
            departure_date=date(2025, 2, 8), round_trip_group_id=group_id, is_recurring=True,
        )
        high = make_row(
            id=uuid.UUID('ffffffff-0000-4000-8000-000000000001'),
            departure_date=date(2025, 2, 8), round_trip_group_id=group_id, is_recurring=True,
        )
        first = make_row(
            id=uuid.UUID('80000000-0000-4000-8000-000000000001'),
            departure_date=date(2025, 2, 1), round_trip_group_id=group_id, is_recurring=True,
        )

        group = extract_series_groups([high, low, first])[0]

        assert group.rides == (first, low, high)

    def test_assemble_listing_picks_lowest_id_on_shared_first_date(self, make_row):
        group_id = uuid.uuid4()
        low = make_row(
            id=uuid.UUID('00000000-0000-4000-8000-000000000002'),
            round_trip_group_id=group_id, is_recurring=True,
        )
        high = make_row(
            id=uuid.UUID('ffffffff-0000-4000-8000-000000000002'),
            round_trip_group_id=group_id, is_recurring=True,
        )

        assert assemble_listing([high, low]) == [low]
