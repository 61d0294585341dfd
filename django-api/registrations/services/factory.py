"""Wiring for services backed by the Django store and project settings."""

from django.conf import settings

from registrations.domain.holds import HoldPolicy
from registrations.services.discount_service import DiscountService
from registrations.services.expiration_service import ExpirationService
from registrations.services.registration_service import RegistrationService
from registrations.stores.django_store import DjangoRegistrationStore


def build_hold_policy() -> HoldPolicy:
    return HoldPolicy.from_values(
        started_minutes=settings.REGISTRATION_STARTED_TTL_MINUTES,
        submitted_minutes=settings.REGISTRATION_SUBMITTED_TTL_MINUTES,
        payment_pending_hours=settings.REGISTRATION_PAYMENT_PENDING_TTL_HOURS,
    )


def build_registration_service() -> RegistrationService:
    return RegistrationService(
        DjangoRegistrationStore(),
        hold_policy=build_hold_policy(),
        fee_percent=settings.REGISTRATION_FEE_PERCENT,
    )


def build_discount_service() -> DiscountService:
    return DiscountService(DjangoRegistrationStore())


def build_expiration_service() -> ExpirationService:
    return ExpirationService(DjangoRegistrationStore())
