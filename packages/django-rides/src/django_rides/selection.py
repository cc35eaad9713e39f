"""Scope selection for editing or deleting a ride that belongs to a series.

The coordinator is a small state machine holding exactly one state:

    Closed --open()--> Open --confirm()--> Confirming --(settled)--> Closed
                        |  ^
                select()+--+ cancel() returns to Closed

While Confirming, a second confirm() or a cancel() is rejected, so a double
submission can never run the executor twice.

Usage:
    selection = ScopeSelection.for_ride('delete', ride_id, request.user.pk)
    selection.select(Scope.FUTURE)
    result = selection.confirm(
        lambda scope: delete_series(
            selection.anchor.id, scope, request.user.pk, anchor=selection.anchor
        )
    )
"""
from dataclasses import dataclass
from typing import Callable, Union

from django.db import DEFAULT_DB_ALIAS

from django_rides.exceptions import ScopeSelectionError
from django_rides.projections import RideRow
from django_rides.scopes import Scope, ScopeOption, scope_options

VARIANTS = ('edit', 'delete')


@dataclass(frozen=True)
class Closed:
    pass


@dataclass(frozen=True)
class Open:
    variant: str
    anchor: RideRow
    siblings: tuple
    selected: Scope = Scope.SINGLE


@dataclass(frozen=True)
class Confirming:
    variant: str
    anchor: RideRow
    siblings: tuple
    scope: Scope


State = Union[Closed, Open, Confirming]


class ScopeSelection:
    """Coordinates choosing and confirming the scope of one series mutation."""

    def __init__(self):
        self.state: State = Closed()

    @classmethod
    def for_ride(cls, variant: str, anchor_id, requester_id, using: str = DEFAULT_DB_ALIAS):
        """
        Build an open coordinator for a ride the requester owns.

        Raises:
            RideNotFound: If the ride does not exist
            RideForbidden: If the requester does not own the ride
        """
        from django_rides.services import preview_scopes

        preview = preview_scopes(anchor_id, requester_id, using=using)
        selection = cls()
        selection.open(variant, preview.anchor, preview.siblings)
        return selection

    @property
    def is_open(self) -> bool:
        return isinstance(self.state, Open)

    @property
    def is_confirming(self) -> bool:
        return isinstance(self.state, Confirming)

    @property
    def anchor(self) -> RideRow | None:
        return getattr(self.state, 'anchor', None)

    @property
    def selected(self) -> Scope | None:
        if isinstance(self.state, Open):
            return self.state.selected
        if isinstance(self.state, Confirming):
            return self.state.scope
        return None

    @property
    def options(self) -> list[ScopeOption]:
        """Scope options with target counts for the open anchor."""
        if isinstance(self.state, Closed):
            return []
        return scope_options(self.state.anchor, self.state.siblings)

    def open(self, variant: str, anchor: RideRow, siblings) -> None:
        if not isinstance(self.state, Closed):
            raise ScopeSelectionError("A scope selection is already in progress")
        if variant not in VARIANTS:
            raise ScopeSelectionError(f"Unknown variant '{variant}'")
        self.state = Open(variant=variant, anchor=anchor, siblings=tuple(siblings))

    def select(self, scope) -> None:
        """
        Choose a scope.

        Raises:
            ScopeSelectionError: If not open, or if the scope is unknown or disabled
        """
        if not isinstance(self.state, Open):
            raise ScopeSelectionError("Nothing to select: no scope selection is open")
        try:
            scope = Scope(scope)
        except ValueError:
            raise ScopeSelectionError(f"Unknown scope '{scope}'")
        option = next(o for o in self.options if o.scope == scope)
        if option.disabled:
            raise ScopeSelectionError(f"Scope '{scope.value}' is not available for this ride")
        self.state = Open(
            variant=self.state.variant,
            anchor=self.state.anchor,
            siblings=self.state.siblings,
            selected=scope,
        )

    def confirm(self, executor: Callable[[Scope], object]):
        """
        Run the executor with the selected scope.

        The coordinator closes once the executor returns or raises; an
        exception from the executor propagates to the caller.

        Raises:
            ScopeSelectionError: If not open (including while confirming)
        """
        if isinstance(self.state, Confirming):
            raise ScopeSelectionError("Confirmation already in progress")
        if not isinstance(self.state, Open):
            raise ScopeSelectionError("Nothing to confirm: no scope selection is open")

        current = self.state
        self.state = Confirming(
            variant=current.variant,
            anchor=current.anchor,
            siblings=current.siblings,
            scope=current.selected,
        )
        try:
            return executor(current.selected)
        finally:
            self.state = Closed()

    def cancel(self) -> None:
        if isinstance(self.state, Confirming):
            raise ScopeSelectionError("Cannot cancel while confirmation is in progress")
        self.state = Closed()
