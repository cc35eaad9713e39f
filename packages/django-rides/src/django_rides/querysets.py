"""QuerySet helpers for ride queries."""
from django.db import models
from django.utils import timezone


class RideQuerySet(models.QuerySet):
    """
    QuerySet for Ride occurrences.

    The series helpers mirror the predicates used by the bulk mutation
    services, so previews and writes always agree on the target set.
    """

    def series_members(self, group_id):
        """
        Return rides belonging to the recurring series `group_id`.

        Series membership requires both the group id and is_recurring=True;
        a non-recurring round trip shares a group id but is not a series.
        """
        return self.filter(round_trip_group_id=group_id, is_recurring=True)

    def on_or_after(self, day):
        """Return rides departing on or after `day` (date-only comparison)."""
        return self.filter(departure_date__gte=day)

    def departure_legs(self):
        """Exclude return legs, which never appear as standalone postings."""
        return self.exclude(trip_direction='return')

    def active(self):
        """Return rides with status=active."""
        return self.filter(status='active')

    def upcoming(self, today=None):
        """Return rides departing today or later."""
        return self.on_or_after(today or timezone.localdate())

    def in_series_order(self):
        """Order by (departure_date, id), the total order within a series."""
        return self.order_by('departure_date', 'id')
