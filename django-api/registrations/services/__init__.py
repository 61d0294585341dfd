"""Service layer entry points.

The module-level functions build a service per call so settings overrides
are always honoured.
"""

from datetime import datetime

from registrations.domain import DiscountSnapshot, StartRegistrationResult
from registrations.services.discount_service import DiscountService
from registrations.services.expiration_service import ExpirationService
from registrations.services.factory import (
    build_discount_service,
    build_expiration_service,
    build_registration_service,
)
from registrations.services.registration_service import RegistrationService


def start_registration(
    user_id: str, distance_id: str, now: datetime | None = None
) -> StartRegistrationResult:
    return build_registration_service().start_registration(user_id, distance_id, now)


def sync_group_discount(
    registration_id: str, now: datetime | None = None
) -> DiscountSnapshot | None:
    return build_discount_service().sync_group_discount(registration_id, now)


def cleanup_expired_registrations(now: datetime | None = None) -> int:
    return build_expiration_service().cleanup_expired_registrations(now)


__all__ = [
    "DiscountService",
    "ExpirationService",
    "RegistrationService",
    "cleanup_expired_registrations",
    "start_registration",
    "sync_group_discount",
]
