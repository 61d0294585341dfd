from registrations.handlers.views import CleanupExpiredRegistrationsView, StartRegistrationView

__all__ = ["CleanupExpiredRegistrationsView", "StartRegistrationView"]
