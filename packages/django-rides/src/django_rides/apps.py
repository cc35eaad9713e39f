"""Django app configuration for django-rides."""

from django.apps import AppConfig


class DjangoRidesConfig(AppConfig):
    """App configuration for django-rides."""

    name = 'django_rides'
    verbose_name = 'Django Rides'
    default_auto_field = 'django.db.models.BigAutoField'
