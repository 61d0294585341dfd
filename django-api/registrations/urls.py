from django.urls import path

from registrations.handlers import CleanupExpiredRegistrationsView, StartRegistrationView

urlpatterns = [
    path(
        "distances/<str:distance_id>/registrations",
        StartRegistrationView.as_view(),
        name="start-registration",
    ),
    path(
        "cron/cleanup-expired-registrations",
        CleanupExpiredRegistrationsView.as_view(),
        name="cleanup-expired-registrations",
    ),
]
