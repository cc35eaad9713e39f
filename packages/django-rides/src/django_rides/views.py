"""Django Rides views - JSON API for ride postings.

Every endpoint requires an authenticated user; the requester id passed to
the services is always request.user.pk.
"""
import json
from uuid import UUID

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from . import services
from .conf import listing_max_page_size, listing_page_size
from .exceptions import RideError, RideForbidden, RideNotFound, RideValidationError
from .grouping import extract_series_groups, filter_departure_legs
from .selectors import get_ride_row, get_rides_for_poster, get_upcoming_listing


def _unauthorized():
    return JsonResponse({"error": "Authentication required"}, status=401)


def _error_response(error):
    """Map a ride error to its JSON response."""
    if isinstance(error, RideValidationError):
        return JsonResponse({"error": "Invalid ride data", "details": error.errors}, status=400)
    if isinstance(error, RideForbidden):
        return JsonResponse({"error": "You can only modify your own rides"}, status=403)
    if isinstance(error, RideNotFound):
        return JsonResponse({"error": "Ride not found"}, status=404)
    return JsonResponse(
        {"error": str(error), "details": getattr(error, "detail", "")}, status=500
    )


def _read_json(request):
    """Decode the request body; raises RideValidationError on malformed JSON."""
    try:
        return json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise RideValidationError({"__all__": ["Request body must be valid JSON"]})


def _request_scope(request):
    return request.GET.get("scope") or request.GET.get("apply_to")


def _positive_int(value, default: int, field: str) -> int:
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except ValueError:
        raise RideValidationError({field: ["Must be a whole number"]})
    if number < 1:
        raise RideValidationError({field: ["Must be at least 1"]})
    return number


def _series_dict(group) -> dict:
    return {
        "groupId": str(group.group_id),
        "title": group.title,
        "startLocation": group.start_location,
        "endLocation": group.end_location,
        "rides": [ride.as_dict() for ride in group.rides],
    }


# =============================================================================
# Collection
# =============================================================================

@csrf_exempt
@require_http_methods(["GET", "POST"])
def ride_list(request):
    """API: List upcoming rides or post new ones.

    GET /rides/?posting_type=<type>&page=<n>&page_size=<n>
        Returns {rides, totalCount, hasMore}; the requester's own rides
        are excluded.

    POST /rides/
        Body is the ride data plus, optionally, `dates` (a recurring
        series) or `return_date` and `return_time` (a round trip).
        Returns 201 {rides}.
    """
    if not request.user.is_authenticated:
        return _unauthorized()

    try:
        if request.method == "GET":
            page = _positive_int(request.GET.get("page"), 1, "page")
            page_size = min(
                _positive_int(request.GET.get("page_size"), listing_page_size(), "page_size"),
                listing_max_page_size(),
            )
            listing = get_upcoming_listing(
                exclude_poster_id=request.user.pk,
                posting_type=request.GET.get("posting_type") or None,
                page=page,
                page_size=page_size,
            )
            return JsonResponse({
                "rides": [ride.as_dict() for ride in listing.rides],
                "totalCount": listing.total_count,
                "hasMore": listing.has_more,
            })

        body = _read_json(request)
        if not isinstance(body, dict):
            raise RideValidationError({"__all__": ["Ride data must be an object"]})
        data = {
            key: value for key, value in body.items()
            if key not in ("dates", "return_date", "return_time")
        }
        if body.get("dates"):
            rides = services.create_series(poster=request.user, data=data, dates=body["dates"])
        elif body.get("return_date") or body.get("return_time"):
            rides = services.create_round_trip(
                poster=request.user,
                data=data,
                return_date=body.get("return_date"),
                return_time=body.get("return_time"),
            )
        else:
            rides = services.create_ride(poster=request.user, data=data)
        return JsonResponse({"rides": [ride.as_dict() for ride in rides]}, status=201)
    except RideError as e:
        return _error_response(e)


@require_GET
def my_rides(request):
    """API: The requester's own postings.

    Returns {rides, series}: rides holds departure legs only; series holds
    each recurring series with its dates.
    """
    if not request.user.is_authenticated:
        return _unauthorized()

    rows = get_rides_for_poster(request.user.pk)
    return JsonResponse({
        "rides": [ride.as_dict() for ride in filter_departure_legs(rows)],
        "series": [_series_dict(group) for group in extract_series_groups(rows)],
    })


# =============================================================================
# Single ride
# =============================================================================

@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
def ride_detail(request, ride_id: UUID):
    """API: Read, edit or delete a ride.

    PATCH  /rides/<id>/?scope=single|future|series  body: allowed fields
        Returns {message, occurrences}
    DELETE /rides/<id>/?scope=single|future|series
        Returns {message, deletedIds}. Repeating a delete whose anchor is
        already gone answers 404, not an empty deletedIds list.
    """
    if not request.user.is_authenticated:
        return _unauthorized()

    try:
        if request.method == "GET":
            return JsonResponse({"ride": get_ride_row(ride_id).as_dict()})

        if request.method == "PATCH":
            patch = _read_json(request)
            result = services.update_series(
                ride_id, _request_scope(request), patch, request.user.pk
            )
            return JsonResponse({
                "message": result.message,
                "occurrences": [ride.as_dict() for ride in result.occurrences],
            })

        result = services.delete_series(ride_id, _request_scope(request), request.user.pk)
        return JsonResponse({
            "message": result.message,
            "deletedIds": [str(pk) for pk in result.deleted_ids],
        })
    except RideError as e:
        return _error_response(e)


@require_GET
def ride_scopes(request, ride_id: UUID):
    """API: Scope options with target counts for editing or deleting a ride."""
    if not request.user.is_authenticated:
        return _unauthorized()

    try:
        preview = services.preview_scopes(ride_id, request.user.pk)
    except RideError as e:
        return _error_response(e)
    return JsonResponse({
        "isSeries": preview.anchor.is_series_member,
        "options": [option.as_dict() for option in preview.options],
    })
