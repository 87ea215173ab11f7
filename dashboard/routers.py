"""
URL mappings for the dashboard API.

Paths have no trailing slash, matching what the dashboard UI requests.
"""
from django.urls import include, path

from .auth_views import login_view
from .views import baskets, health, incidents, meals, removals, residents, uploads, welfare

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    # Tables
    path('api/meals', meals.list_meals, name='meals'),
    path('api/welfare-checks', welfare.list_welfare_checks, name='welfare_checks'),
    path('api/incidents', incidents.list_incidents, name='incidents'),
    path('api/service-users', residents.list_service_users, name='service_users'),
    path('api/in-transit', removals.list_in_transit, name='in_transit'),
    path('api/other-removals', removals.list_other_removals, name='other_removals'),
    path('api/baskets', baskets.list_baskets, name='baskets'),
    # Incident actions
    path('api/incidents/<str:incident_id>/resolve', incidents.resolve_incident, name='resolve_incident'),
    # Residents
    path('api/service-users/<str:guest_id>/relocation-options', residents.relocation_options,
         name='relocation_options'),
    path('api/service-users/<str:guest_id>/relocate', residents.relocate, name='relocate'),
    # Transfers and removals
    path('api/in-transit/selection', removals.transfer_selection, name='transfer_selection'),
    path('api/in-transit/<str:request_id>/approve', removals.approve_transfer, name='approve_transfer'),
    path('api/in-transit/<str:request_id>/reject', removals.reject_transfer, name='reject_transfer'),
    path('api/other-removals/<str:request_id>/approve', removals.approve_other_removal,
         name='approve_other_removal'),
    path('api/other-removals/<str:request_id>/reject', removals.reject_other_removal,
         name='reject_other_removal'),
    # Signatures and rooms
    path('api/signatures', uploads.save_signature, name='save_signature'),
    path('api/rooms/<str:room_id>', uploads.update_room, name='update_room'),
]
