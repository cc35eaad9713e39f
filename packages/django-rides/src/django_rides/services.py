"""Ride services for posting, editing and deleting rides.

- Postings are created in one batch: 1 row one-way, 2 rows for a round
  trip, N rows sharing a group id for a recurring series
- Edits and deletes are initiated against one ride (the anchor) with a
  scope: single, future or series
- Only the poster may mutate their rides
- Each mutation is one bulk UPDATE or DELETE statement inside an atomic
  block, so readers see the series before or after, never half of it
- A scope that matches nothing succeeds with an empty result
"""
import logging
import uuid
from dataclasses import dataclass

from django import forms
from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.db.models import F
from django.db.models.functions import Least
from django.utils import timezone

from django_rides.conf import max_series_length
from django_rides.exceptions import RideForbidden, RideStoreError, RideValidationError
from django_rides.forms import clean_patch, clean_ride_data
from django_rides.models import Ride, TripDirection
from django_rides.projections import RideRow
from django_rides.scopes import Scope, ScopeOption, parse_scope, scope_filter, scope_options
from django_rides.selectors import get_ride_row, get_series_rows, ride_queryset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of update_series.

    Attributes:
        updated_count: Number of rides written
        occurrences: Updated rides ordered by (departure_date, id)
        message: Human-readable summary
    """

    updated_count: int
    occurrences: list
    message: str


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of delete_series."""

    deleted_ids: list
    message: str


@dataclass(frozen=True)
class ScopePreview:
    """Anchor, its series siblings and the scope options they allow."""

    anchor: RideRow
    siblings: list
    options: list[ScopeOption]


def _plural(count: int) -> str:
    return 'ride' if count == 1 else 'rides'


def _get_owned_anchor(anchor_id, requester_id, using: str, anchor: RideRow | None = None) -> RideRow:
    """Load the anchor and check ownership before anything is written."""
    if anchor is None:
        anchor = get_ride_row(anchor_id, using=using)
    if str(anchor.poster_id) != str(requester_id):
        logger.warning(
            f"Requester {requester_id} attempted to mutate ride {anchor.id} "
            f"owned by {anchor.poster_id}"
        )
        raise RideForbidden(anchor.id, requester_id)
    return anchor


def _lock_targets(anchor: RideRow, scope: Scope, using: str) -> list:
    """Lock the rows the scope predicate matches and return their ids."""
    return list(
        ride_queryset(using)
        .filter(scope_filter(anchor, scope), poster_id=anchor.poster_id)
        .select_for_update()
        .in_series_order()
        .values_list('pk', flat=True)
    )


def _check_available_seats(ids, available: int, using: str) -> None:
    """Reject an available_seats patch that exceeds any target's total_seats."""
    overbooked = ride_queryset(using).filter(pk__in=ids, total_seats__lt=available).count()
    if overbooked:
        raise RideValidationError({
            'available_seats': [
                f'Available seats cannot exceed total seats ({overbooked} {_plural(overbooked)} affected)'
            ]
        })


def preview_scopes(anchor_id, requester_id, *, using: str = DEFAULT_DB_ALIAS) -> ScopePreview:
    """
    Compute what each scope would touch for an anchor.

    Raises:
        RideNotFound: If the anchor does not exist
        RideForbidden: If the requester does not own the anchor
    """
    anchor = _get_owned_anchor(anchor_id, requester_id, using)
    siblings = get_series_rows(anchor, using=using)
    return ScopePreview(
        anchor=anchor,
        siblings=siblings,
        options=scope_options(anchor, siblings),
    )


def update_series(
    anchor_id,
    scope,
    patch,
    requester_id,
    *,
    using: str = DEFAULT_DB_ALIAS,
    anchor: RideRow | None = None,
) -> UpdateResult:
    """
    Apply an allow-listed patch to the rides a scope targets.

    Args:
        anchor_id: The ride the edit is initiated against
        scope: single, future or series
        patch: Field name to new value; keys outside the allow-list are rejected
        requester_id: Must equal the anchor's poster_id
        using: Database alias
        anchor: Previously loaded anchor row; skips the anchor lookup

    Returns:
        UpdateResult with the updated rows ordered by (departure_date, id)

    Raises:
        RideNotFound: If the anchor does not exist
        RideForbidden: If the requester does not own the anchor
        RideValidationError: If the scope or patch is invalid
        RideStoreError: If the database statement fails
    """
    scope = parse_scope(scope)
    anchor = _get_owned_anchor(anchor_id, requester_id, using, anchor=anchor)
    values = clean_patch(patch)
    if 'total_seats' in values and 'available_seats' not in values:
        # Shrinking a ride never leaves more seats available than it has
        values['available_seats'] = Least(F('available_seats'), values['total_seats'])
    values['updated_at'] = timezone.now()

    try:
        with transaction.atomic(using=using):
            ids = _lock_targets(anchor, scope, using)
            if 'available_seats' in patch and 'total_seats' not in patch:
                _check_available_seats(ids, values['available_seats'], using)
            updated_count = 0
            if ids:
                updated_count = ride_queryset(using).filter(pk__in=ids).update(**values)
            occurrences = RideRow.from_queryset(
                ride_queryset(using).filter(pk__in=ids).in_series_order()
            )
    except DatabaseError as e:
        logger.exception(f"Failed to update rides for anchor {anchor.id} with scope {scope.value}")
        raise RideStoreError(str(e)) from e

    logger.info(
        f"Updated {updated_count} {_plural(updated_count)} "
        f"(anchor={anchor.id}, scope={scope.value}, fields={sorted(patch)})"
    )
    return UpdateResult(
        updated_count=updated_count,
        occurrences=occurrences,
        message=f"Updated {updated_count} {_plural(updated_count)}",
    )


def delete_series(
    anchor_id,
    scope,
    requester_id,
    *,
    using: str = DEFAULT_DB_ALIAS,
    anchor: RideRow | None = None,
) -> DeleteResult:
    """
    Delete the rides a scope targets.

    When a previously loaded `anchor` row is given, the anchor lookup is
    skipped, so repeating a delete whose rows are already gone returns an
    empty result instead of RideNotFound.

    Returns:
        DeleteResult with the ids that were deleted

    Raises:
        RideNotFound: If the anchor does not exist and no anchor row is given
        RideForbidden: If the requester does not own the anchor
        RideStoreError: If the database statement fails
    """
    scope = parse_scope(scope)
    anchor = _get_owned_anchor(anchor_id, requester_id, using, anchor=anchor)

    try:
        with transaction.atomic(using=using):
            ids = _lock_targets(anchor, scope, using)
            if ids:
                ride_queryset(using).filter(pk__in=ids).delete()
    except DatabaseError as e:
        logger.exception(f"Failed to delete rides for anchor {anchor.id} with scope {scope.value}")
        raise RideStoreError(str(e)) from e

    logger.info(
        f"Deleted {len(ids)} {_plural(len(ids))} "
        f"(anchor={anchor.id}, scope={scope.value})"
    )
    return DeleteResult(
        deleted_ids=ids,
        message=f"Deleted {len(ids)} {_plural(len(ids))}",
    )


# =============================================================================
# Posting
# =============================================================================


def _save_batch(rides: list[Ride], using: str) -> list[RideRow]:
    try:
        with transaction.atomic(using=using):
            Ride.objects.using(using).bulk_create(rides)
    except DatabaseError as e:
        logger.exception("Failed to create rides")
        raise RideStoreError(str(e), message="Failed to create rides") from e
    return sorted(
        (RideRow.from_instance(ride) for ride in rides),
        key=lambda row: (row.departure_date, str(row.id)),
    )


def create_ride(*, poster, data, using: str = DEFAULT_DB_ALIAS) -> list[RideRow]:
    """
    Post a one-way ride.

    Raises:
        RideValidationError: If the ride data is invalid
    """
    cleaned = clean_ride_data(data)
    rows = _save_batch([Ride(poster=poster, **cleaned)], using)
    logger.info(f"Created ride {rows[0].id} for poster {poster.pk}")
    return rows


def create_round_trip(
    *,
    poster,
    data,
    return_date,
    return_time,
    using: str = DEFAULT_DB_ALIAS,
) -> list[RideRow]:
    """
    Post a round trip as two linked rides.

    The return leg swaps the start and end of the outbound itinerary and
    departs on return_date at return_time. Both legs share a new group id.

    Returns:
        [departure leg, return leg]

    Raises:
        RideValidationError: If either leg is invalid or the return departs
            before the outbound trip
    """
    if not isinstance(data, dict):
        raise RideValidationError({'__all__': ['Ride data must be an object']})

    outbound = clean_ride_data(data)
    inbound = clean_ride_data({
        **data,
        'start_location': data.get('end_location'),
        'end_location': data.get('start_location'),
        'start_lat': data.get('end_lat'),
        'start_lng': data.get('end_lng'),
        'end_lat': data.get('start_lat'),
        'end_lng': data.get('start_lng'),
        'departure_date': return_date,
        'departure_time': return_time,
    })
    outbound_at = (outbound['departure_date'], outbound['departure_time'])
    if (inbound['departure_date'], inbound['departure_time']) < outbound_at:
        raise RideValidationError({'return_date': ['Return must be after departure']})

    group_id = uuid.uuid4()
    legs = [
        Ride(
            poster=poster,
            is_round_trip=True,
            trip_direction=direction,
            round_trip_group_id=group_id,
            is_recurring=False,
            **cleaned,
        )
        for direction, cleaned in (
            (TripDirection.DEPARTURE, outbound),
            (TripDirection.RETURN, inbound),
        )
    ]
    _save_batch(legs, using)
    logger.info(f"Created round trip {group_id} for poster {poster.pk}")
    return [RideRow.from_instance(leg) for leg in legs]


def _clean_series_dates(dates) -> list:
    if not isinstance(dates, (list, tuple)) or not dates:
        raise RideValidationError({'dates': ['At least one date is required']})

    field = forms.DateField(input_formats=['%Y-%m-%d'])
    try:
        cleaned = sorted({field.clean(value) for value in dates})
    except ValidationError as e:
        raise RideValidationError({'dates': list(e.messages)}) from e

    limit = max_series_length()
    if len(cleaned) > limit:
        raise RideValidationError({'dates': [f'A series may have at most {limit} dates']})
    return cleaned


def create_series(*, poster, data, dates, using: str = DEFAULT_DB_ALIAS) -> list[RideRow]:
    """
    Post a recurring series: one ride per distinct date.

    Every occurrence carries the same itinerary and attributes and shares a
    new group id. Duplicate dates collapse to one occurrence.

    Returns:
        Occurrences ordered by (departure_date, id)

    Raises:
        RideValidationError: If the data is invalid, no dates are given, or
            more than RIDES_MAX_SERIES_LENGTH distinct dates are given
    """
    series_dates = _clean_series_dates(dates)
    if not isinstance(data, dict):
        raise RideValidationError({'__all__': ['Ride data must be an object']})
    cleaned = clean_ride_data({**data, 'departure_date': series_dates[0].isoformat()})
    cleaned.pop('departure_date')

    group_id = uuid.uuid4()
    occurrences = [
        Ride(
            poster=poster,
            departure_date=day,
            round_trip_group_id=group_id,
            is_recurring=True,
            **cleaned,
        )
        for day in series_dates
    ]
    rows = _save_batch(occurrences, using)
    logger.info(f"Created series {group_id} with {len(rows)} dates for poster {poster.pk}")
    return rows
