"""Hold-duration policy for unconfirmed registrations."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Self

from registrations.domain.value_objects import HOLD_STATUSES, RegistrationStatus

DEFAULT_STARTED_TTL_MINUTES = 30
DEFAULT_SUBMITTED_TTL_MINUTES = 30
DEFAULT_PAYMENT_PENDING_TTL_HOURS = 24


def _positive_or_default(value: Any, fallback: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number) or number <= 0:
        return fallback
    return number


@dataclass(frozen=True)
class HoldPolicy:
    """How long each hold status reserves a spot."""

    started_ttl: timedelta = timedelta(minutes=DEFAULT_STARTED_TTL_MINUTES)
    submitted_ttl: timedelta = timedelta(minutes=DEFAULT_SUBMITTED_TTL_MINUTES)
    payment_pending_ttl: timedelta = timedelta(hours=DEFAULT_PAYMENT_PENDING_TTL_HOURS)

    @classmethod
    def from_values(
        cls,
        started_minutes: Any = None,
        submitted_minutes: Any = None,
        payment_pending_hours: Any = None,
    ) -> Self:
        """Build a policy from raw config values; bad or non-positive values use the defaults."""
        return cls(
            started_ttl=timedelta(
                minutes=_positive_or_default(started_minutes, DEFAULT_STARTED_TTL_MINUTES)
            ),
            submitted_ttl=timedelta(
                minutes=_positive_or_default(submitted_minutes, DEFAULT_SUBMITTED_TTL_MINUTES)
            ),
            payment_pending_ttl=timedelta(
                hours=_positive_or_default(payment_pending_hours, DEFAULT_PAYMENT_PENDING_TTL_HOURS)
            ),
        )

    def expires_at(self, now: datetime, status: RegistrationStatus) -> datetime:
        if status is RegistrationStatus.STARTED:
            return now + self.started_ttl
        if status is RegistrationStatus.SUBMITTED:
            return now + self.submitted_ttl
        if status is RegistrationStatus.PAYMENT_PENDING:
            return now + self.payment_pending_ttl
        raise ValueError(f"{status.value} registrations do not expire")


def is_expired_hold(
    status: RegistrationStatus, expires_at: datetime | None, now: datetime
) -> bool:
    """Return True if the registration no longer reserves a spot as a hold.

    Cancelled rows count as expired and confirmed rows never do. A hold
    without an expiry is treated as already lapsed.
    """
    if status is RegistrationStatus.CANCELLED:
        return True
    if status is RegistrationStatus.CONFIRMED:
        return False
    if status in HOLD_STATUSES:
        return expires_at is None or expires_at <= now
    return True
