"""Scope resolution for series mutations.

A scope is the blast radius of an edit or delete initiated against one ride
(the anchor):

    single  -> the anchor only
    future  -> series members departing on or after the anchor's date
    series  -> every series member, past dates included

`future` includes the anchor itself. The date comparison is date-only, so
other members on the anchor's date are included as well.
"""
from dataclasses import dataclass

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from django_rides.exceptions import RideValidationError


class Scope(models.TextChoices):
    SINGLE = 'single', _('This date only')
    FUTURE = 'future', _('This and all future dates')
    SERIES = 'series', _('Entire series')


@dataclass(frozen=True)
class ScopeOption:
    """
    One selectable scope with its literal target count.

    Attributes:
        scope: The scope value
        count: Number of rides the scope would touch
        disabled: True when the option must not be offered
    """

    scope: Scope
    count: int
    disabled: bool = False

    def as_dict(self) -> dict:
        return {
            'scope': self.scope.value,
            'label': str(self.scope.label),
            'count': self.count,
            'disabled': self.disabled,
        }


def parse_scope(value) -> Scope:
    """
    Parse a transport-level scope value.

    Missing or empty values default to single.

    Raises:
        RideValidationError: If the value is not single, future or series
    """
    if value in (None, ''):
        return Scope.SINGLE
    try:
        return Scope(value)
    except ValueError:
        raise RideValidationError({
            'scope': [f"Scope must be one of: {', '.join(Scope.values)}"]
        })


def resolve_targets(anchor, siblings, scope) -> list:
    """
    Compute the rides a scope targets.

    Args:
        anchor: The ride the mutation is initiated against
        siblings: The anchor's series members (anchor included)
        scope: single, future or series

    Returns:
        Target rides; always [anchor] for single or for a non-series anchor
    """
    scope = Scope(scope)
    if scope == Scope.SINGLE or not anchor.is_series_member:
        return [anchor]
    if scope == Scope.FUTURE:
        return [r for r in siblings if r.departure_date >= anchor.departure_date]
    return list(siblings)


def scope_options(anchor, siblings) -> list[ScopeOption]:
    """
    List the scope options with their target counts.

    `future` is disabled when it would touch at most one ride, because it
    is then the same as `single`.
    """
    future_count = len(resolve_targets(anchor, siblings, Scope.FUTURE))
    return [
        ScopeOption(Scope.SINGLE, 1),
        ScopeOption(Scope.FUTURE, future_count, disabled=future_count <= 1),
        ScopeOption(
            Scope.SERIES,
            len(resolve_targets(anchor, siblings, Scope.SERIES)),
        ),
    ]


def scope_filter(anchor, scope) -> Q:
    """
    Translate a scope into the filter for one bulk statement.

    The same rules as resolve_targets, expressed as a database predicate:
    single filters by id; future and series filter by the series key, and
    future adds the departure date bound.
    """
    scope = Scope(scope)
    if scope == Scope.SINGLE or not anchor.is_series_member:
        return Q(pk=anchor.id)

    condition = Q(round_trip_group_id=anchor.round_trip_group_id, is_recurring=True)
    if scope == Scope.FUTURE:
        condition &= Q(departure_date__gte=anchor.departure_date)
    return condition
