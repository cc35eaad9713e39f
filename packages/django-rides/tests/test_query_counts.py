"""
Query count tests for django-rides.

A series mutation must be one bulk statement no matter how many rides it
touches. Run with: pytest tests/test_query_counts.py -v
"""
import uuid
from datetime import date, timedelta

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from django_rides.services import create_series, delete_series, preview_scopes, update_series


def statements(context, verb):
    return [q['sql'] for q in context.captured_queries if q['sql'].lstrip().upper().startswith(verb)]


@pytest.fixture
def long_series(user, make_ride):
    group_id = uuid.uuid4()
    return [
        make_ride(
            user,
            departure_date=date(2025, 1, 1) + timedelta(weeks=week),
            round_trip_group_id=group_id,
            is_recurring=True,
        )
        for week in range(12)
    ]


class TestQueryBudgets:
    """Enforce statement limits on the mutation paths."""

    @pytest.mark.django_db
    def test_update_series_is_one_update(self, user, long_series):
        with CaptureQueriesContext(connection) as context:
            result = update_series(long_series[0].id, 'series', {'title': 'Bulk'}, user.pk)

        assert result.updated_count == 12
        updates = statements(context, 'UPDATE')
        assert len(updates) == 1, "\n".join(updates)

    @pytest.mark.django_db
    def test_delete_series_is_one_delete(self, user, long_series):
        with CaptureQueriesContext(connection) as context:
            result = delete_series(long_series[3].id, 'future', user.pk)

        assert len(result.deleted_ids) == 9
        deletes = statements(context, 'DELETE')
        assert len(deletes) == 1, "\n".join(deletes)

    @pytest.mark.django_db
    def test_update_query_budget(self, user, long_series):
        with CaptureQueriesContext(connection) as context:
            update_series(long_series[0].id, 'series', {'title': 'Bulk'}, user.pk)

        # anchor, lock, update, re-read
        queries = [
            q['sql'] for q in context.captured_queries
            if 'SAVEPOINT' not in q['sql'].upper()
        ]
        expected_queries = 4
        assert len(queries) <= expected_queries, (
            f"Query budget exceeded: {len(queries)} > {expected_queries}\n"
            f"Queries:\n" + "\n".join(queries)
        )

    @pytest.mark.django_db
    def test_preview_query_budget(self, user, long_series):
        with CaptureQueriesContext(connection) as context:
            preview_scopes(long_series[5].id, user.pk)

        assert len(context) == 2

    @pytest.mark.django_db
    def test_create_series_is_one_insert(self, user):
        dates = [(date(2025, 1, 1) + timedelta(weeks=w)).isoformat() for w in range(8)]

        with CaptureQueriesContext(connection) as context:
            rows = create_series(
                poster=user,
                data={
                    'start_location': 'Oakland',
                    'end_location': 'Berkeley',
                    'departure_time': '07:45',
                },
                dates=dates,
            )

        assert len(rows) == 8
        assert len(statements(context, 'INSERT')) == 1

    @pytest.mark.django_db
    def test_total_seats_update_is_one_update(self, user, long_series):
        with CaptureQueriesContext(connection) as context:
            result = update_series(long_series[0].id, 'series', {'total_seats': 1}, user.pk)

        assert all(r.available_seats == 1 for r in result.occurrences)
        updates = statements(context, 'UPDATE')
        assert len(updates) == 1, "\n".join(updates)
