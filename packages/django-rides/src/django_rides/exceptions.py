"""Exceptions for django-rides."""


class RideError(Exception):
    """Base exception for ride errors."""

    pass


class RideNotFound(RideError):
    """Raised when the anchor ride does not exist."""

    def __init__(self, ride_id):
        self.ride_id = ride_id
        super().__init__(f"Ride '{ride_id}' not found")


class RideForbidden(RideError):
    """Raised when the requester does not own the ride."""

    def __init__(self, ride_id, requester_id):
        self.ride_id = ride_id
        self.requester_id = requester_id
        super().__init__(f"Requester '{requester_id}' does not own ride '{ride_id}'")


class RideValidationError(RideError):
    """Raised when input contains disallowed or malformed fields.

    Attributes:
        errors: Dict mapping field name to a list of messages
    """

    def __init__(self, errors: dict):
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid ride data: {fields}")


class RideStoreError(RideError):
    """Raised when the underlying database statement fails.

    The message is safe to show end users; `detail` carries the
    database error text for operators.
    """

    def __init__(self, detail: str, message: str = "Failed to apply ride changes"):
        self.detail = detail
        super().__init__(message)


class ScopeSelectionError(RideError):
    """Raised on an invalid scope selection transition."""

    pass
