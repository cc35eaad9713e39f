"""Django Rides configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    RIDES_MAX_SERIES_LENGTH = 26
    RIDES_LISTING_PAGE_SIZE = 50
"""

from django.conf import settings


def get_setting(name: str, default=None):
    """Get a setting with RIDES_ prefix."""
    return getattr(settings, f"RIDES_{name}", default)


def max_series_length() -> int:
    """Most dates a single recurring series may be created with."""
    return get_setting("MAX_SERIES_LENGTH", 52)


def listing_page_size() -> int:
    """Default page size for ride listings."""
    return get_setting("LISTING_PAGE_SIZE", 20)


def listing_max_page_size() -> int:
    """Upper bound for a caller-supplied page size."""
    return get_setting("LISTING_MAX_PAGE_SIZE", 100)


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# RIDES_MAX_SERIES_LENGTH = 52  # Optional - dates per recurring series
# RIDES_LISTING_PAGE_SIZE = 20  # Optional - default listing page size
# RIDES_LISTING_MAX_PAGE_SIZE = 100  # Optional - clamp for page_size
