"""Capacity and registration-window policy.

Pure predicates over edition/distance snapshots and a clock reading.
"""

from datetime import datetime

from registrations.domain.errors import (
    NotPublishedError,
    RegistrationClosedError,
    RegistrationNotOpenError,
    RegistrationPausedError,
)
from registrations.domain.models import Distance, Edition
from registrations.domain.value_objects import (
    HOLD_STATUSES,
    Capacity,
    CapacityScope,
    RegistrationStatus,
    Visibility,
)


def is_published(edition: Edition) -> bool:
    return edition.visibility is Visibility.PUBLISHED


def is_within_window(edition: Edition, now: datetime) -> bool:
    """Return True if registration is unpaused and ``now`` lies inside the window.

    Both window bounds are inclusive; an unset bound is unbounded.
    """
    if edition.is_registration_paused:
        return False
    if edition.registration_opens_at is not None and now < edition.registration_opens_at:
        return False
    if edition.registration_closes_at is not None and now > edition.registration_closes_at:
        return False
    return True


def ensure_registration_open(edition: Edition, now: datetime) -> None:
    """Raise the typed error for the first failing edition check.

    Checks run in a fixed order: published, paused, opens-at, closes-at.
    """
    if not is_published(edition):
        raise NotPublishedError()
    if edition.is_registration_paused:
        raise RegistrationPausedError()
    if edition.registration_opens_at is not None and now < edition.registration_opens_at:
        raise RegistrationNotOpenError()
    if edition.registration_closes_at is not None and now > edition.registration_closes_at:
        raise RegistrationClosedError()


def is_active_registration(
    status: RegistrationStatus, expires_at: datetime | None, now: datetime
) -> bool:
    """Confirmed rows are always active; holds only until they lapse."""
    if status is RegistrationStatus.CONFIRMED:
        return True
    return status in HOLD_STATUSES and expires_at is not None and expires_at > now


def counts_edition_wide(distance: Distance) -> bool:
    """True when the distance draws from the edition's shared pool.

    A shared-pool distance on an edition without a shared capacity falls back
    to its own per-distance limit.
    """
    return (
        distance.capacity_scope is CapacityScope.SHARED_POOL
        and distance.edition.shared_capacity is not None
    )


def capacity_limit(distance: Distance) -> Capacity | None:
    """Return the limit that applies to the distance, or None for unlimited."""
    if counts_edition_wide(distance):
        return distance.edition.shared_capacity
    return distance.capacity


def has_capacity(distance: Distance, active_count: int) -> bool:
    """Compare the scoped active count against the applicable limit.

    ``active_count`` must be edition-wide when ``counts_edition_wide`` is true,
    and distance-scoped otherwise.
    """
    limit = capacity_limit(distance)
    if limit is None:
        return True
    return active_count < limit.value


def spots_remaining(distance: Distance, active_count: int) -> int | None:
    limit = capacity_limit(distance)
    if limit is None:
        return None
    return max(limit.value - active_count, 0)
