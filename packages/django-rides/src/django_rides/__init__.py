"""Django Rides - Ride postings with series and round-trip scope mutations.

Provides:
- Ride: One dated trip posting (an occurrence of an itinerary)
- Grouping helpers for listings (departure legs, series groups, round trips)
- Scope resolution for single / future / series mutations
- update_series / delete_series: single-statement bulk mutations

Usage:
    INSTALLED_APPS = [
        ...
        'django_rides',
    ]

    from django_rides import delete_series

    result = delete_series(ride_id, 'future', requester_id=request.user.pk)
    result.deleted_ids

See conf.py for all configuration options.
"""

__version__ = "0.1.0"

__all__ = [
    # Models
    "Ride",
    # Scopes
    "Scope",
    # Services
    "update_series",
    "delete_series",
    "preview_scopes",
    # Exceptions
    "RideError",
    "RideNotFound",
    "RideForbidden",
    "RideValidationError",
    "RideStoreError",
]


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name == "Ride":
        from django_rides import models
        return getattr(models, name)
    if name == "Scope":
        from django_rides import scopes
        return getattr(scopes, name)
    if name in ("update_series", "delete_series", "preview_scopes"):
        from django_rides import services
        return getattr(services, name)
    if name in (
        "RideError",
        "RideNotFound",
        "RideForbidden",
        "RideValidationError",
        "RideStoreError",
    ):
        from django_rides import exceptions
        return getattr(exceptions, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
