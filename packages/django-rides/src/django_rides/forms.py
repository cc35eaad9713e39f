"""Django Rides forms.

RideCreateForm validates a new posting; RidePatchForm validates the
allow-listed fields an owner may change on existing rides.
"""
from django import forms
from django.core.validators import MinLengthValidator

from .exceptions import RideValidationError
from .models import Ride, RideStatus

# Fields an update patch may contain. Identity, ownership and
# series/round-trip membership are never patchable.
MUTABLE_FIELDS = (
    'title',
    'start_location',
    'end_location',
    'start_lat',
    'start_lng',
    'end_lat',
    'end_lng',
    'departure_date',
    'departure_time',
    'pricing_type',
    'price_per_seat',
    'total_seats',
    'available_seats',
    'car_type',
    'has_awd',
    'description',
    'special_instructions',
    'status',
)

# Present-but-empty is an error for these.
NON_EMPTY_FIELDS = (
    'start_location',
    'end_location',
    'departure_date',
    'departure_time',
    'total_seats',
    'available_seats',
    'status',
)

# Model defaults used when a creation payload omits the field.
CREATE_DEFAULTS = {
    'posting_type': 'driver',
    'price_per_seat': 0,
    'total_seats': 1,
    'has_awd': False,
}


def _error_dict(form) -> dict:
    return {field: [str(m) for m in messages] for field, messages in form.errors.items()}


class RideCreateForm(forms.ModelForm):
    """Form for validating a new ride posting (one occurrence's fields)."""

    class Meta:
        model = Ride
        fields = [
            'posting_type', 'title', 'start_location', 'end_location',
            'start_lat', 'start_lng', 'end_lat', 'end_lng',
            'departure_date', 'departure_time', 'pricing_type',
            'price_per_seat', 'total_seats', 'available_seats',
            'car_type', 'has_awd', 'description', 'special_instructions',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ('posting_type', 'price_per_seat', 'total_seats', 'available_seats'):
            self.fields[name].required = False
        for name in ('title', 'start_location', 'end_location'):
            self.fields[name].validators.append(MinLengthValidator(3))

    def clean(self):
        cleaned = super().clean()
        for name, default in CREATE_DEFAULTS.items():
            if cleaned.get(name) in (None, ''):
                cleaned[name] = default
        if cleaned.get('available_seats') is None:
            cleaned['available_seats'] = cleaned.get('total_seats') or 1
        total = cleaned.get('total_seats')
        available = cleaned.get('available_seats')
        if total is not None and available is not None and available > total:
            self.add_error('available_seats', 'Available seats cannot exceed total seats')
        return cleaned


class RidePatchForm(forms.Form):
    """Allow-listed partial update for one or more rides.

    Every field is optional; only the keys present in the submitted data
    end up in the patch.
    """

    title = forms.CharField(min_length=3, max_length=100, required=False)
    start_location = forms.CharField(min_length=3, max_length=100, required=False)
    end_location = forms.CharField(min_length=3, max_length=100, required=False)
    start_lat = forms.FloatField(required=False)
    start_lng = forms.FloatField(required=False)
    end_lat = forms.FloatField(required=False)
    end_lng = forms.FloatField(required=False)
    departure_date = forms.DateField(required=False, input_formats=['%Y-%m-%d'])
    departure_time = forms.TimeField(required=False, input_formats=['%H:%M', '%H:%M:%S'])
    pricing_type = forms.CharField(max_length=20, required=False)
    price_per_seat = forms.DecimalField(min_value=0, max_digits=8, decimal_places=2, required=False)
    total_seats = forms.IntegerField(min_value=1, max_value=10, required=False)
    available_seats = forms.IntegerField(min_value=0, max_value=10, required=False)
    car_type = forms.CharField(max_length=100, required=False)
    has_awd = forms.BooleanField(required=False)
    description = forms.CharField(max_length=500, required=False)
    special_instructions = forms.CharField(max_length=500, required=False)
    status = forms.ChoiceField(choices=RideStatus.choices, required=False)

    def clean(self):
        cleaned = super().clean()
        for name in NON_EMPTY_FIELDS:
            if name in self.data and cleaned.get(name) in (None, ''):
                self.add_error(name, 'This field cannot be empty.')

        total = cleaned.get('total_seats') if 'total_seats' in self.data else None
        available = cleaned.get('available_seats') if 'available_seats' in self.data else None
        if total is not None and available is not None and available > total:
            self.add_error('available_seats', 'Available seats cannot exceed total seats')
        return cleaned


def clean_patch(data) -> dict:
    """
    Validate an update patch against the allow-list.

    Unknown or disallowed keys (e.g. `round_trip_group_id`, `poster_id`)
    are rejected, not stripped.

    Args:
        data: Mapping of field name to new value

    Returns:
        Dict of cleaned values for exactly the submitted keys

    Raises:
        RideValidationError: If the patch is empty, not a mapping, contains
            a key outside MUTABLE_FIELDS, or has malformed values
    """
    if not isinstance(data, dict):
        raise RideValidationError({'__all__': ['Patch must be an object']})
    if not data:
        raise RideValidationError({'__all__': ['Patch contains no fields']})

    disallowed = sorted(set(data) - set(MUTABLE_FIELDS))
    if disallowed:
        raise RideValidationError(
            {name: ['This field cannot be updated.'] for name in disallowed}
        )

    form = RidePatchForm(data)
    if not form.is_valid():
        raise RideValidationError(_error_dict(form))
    return {name: form.cleaned_data[name] for name in data}


def clean_ride_data(data) -> dict:
    """
    Validate the fields of a new posting.

    Raises:
        RideValidationError: If the data is not a mapping or fails validation
    """
    if not isinstance(data, dict):
        raise RideValidationError({'__all__': ['Ride data must be an object']})

    form = RideCreateForm(data)
    if not form.is_valid():
        raise RideValidationError(_error_dict(form))
    return dict(form.cleaned_data)
