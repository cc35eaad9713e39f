"""URL patterns for django-rides."""
from django.urls import path

from . import views

app_name = 'django_rides'

urlpatterns = [
    path('rides/', views.ride_list, name='ride_list'),
    path('rides/mine/', views.my_rides, name='my_rides'),
    path('rides/<uuid:ride_id>/', views.ride_detail, name='ride_detail'),
    path('rides/<uuid:ride_id>/scopes/', views.ride_scopes, name='ride_scopes'),
]
