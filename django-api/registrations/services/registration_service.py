"""Registration ledger - reserves spots in capacity-limited distances.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from datetime import datetime

from registrations.domain import (
    DistanceId,
    NewRegistration,
    RegistrationStatus,
    StartRegistrationResult,
)
from registrations.domain.clock import Clock, SystemClock
from registrations.domain.errors import (
    AlreadyRegisteredError,
    DistanceNotFoundError,
    DomainError,
    InvalidIdentifierError,
    SoldOutError,
)
from registrations.domain.holds import HoldPolicy
from registrations.domain.policy import counts_edition_wide, ensure_registration_open, has_capacity
from registrations.domain.pricing import DEFAULT_FEE_PERCENT, quote_price
from registrations.domain.value_objects import RESUMABLE_STATUSES
from registrations.stores.interfaces import RegistrationStore

logger = logging.getLogger(__name__)


class RegistrationService:
    """Service for starting registrations under edition and distance locks."""

    def __init__(
        self,
        store: RegistrationStore,
        clock: Clock | None = None,
        hold_policy: HoldPolicy | None = None,
        fee_percent: int = DEFAULT_FEE_PERCENT,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._hold_policy = hold_policy or HoldPolicy()
        self._fee_percent = fee_percent

    def start_registration(
        self, user_id: str, distance_id: str, now: datetime | None = None
    ) -> StartRegistrationResult:
        """Reserve a spot for the user, or resume their in-progress hold.

        Returns the existing row unchanged when the user already has a
        started/submitted hold on the same distance.

        Raises:
            DistanceNotFoundError: The distance or its edition is missing or deleted.
            InvalidIdentifierError: ``distance_id`` is not a valid UUID.
            NotPublishedError, RegistrationPausedError, RegistrationNotOpenError,
            RegistrationClosedError: The edition is not accepting registrations.
            AlreadyRegisteredError: The user holds another active registration in the edition.
            SoldOutError: No capacity is left for the distance or its shared pool.
        """
        now = now or self._clock.now()
        try:
            result = self._start(user_id, self._parse_distance_id(distance_id), now)
        except DomainError as exc:
            logger.info(
                "Registration rejected for distance %s: %s", distance_id, exc.code.value
            )
            raise

        if result.created:
            logger.info(
                "Created hold %s on distance %s", result.registration.id, distance_id
            )
        else:
            logger.info(
                "Resumed hold %s on distance %s", result.registration.id, distance_id
            )
        return result

    def _start(
        self, user_id: str, distance_id: DistanceId, now: datetime
    ) -> StartRegistrationResult:
        distance = self._store.get_distance(distance_id)
        if distance is None:
            raise DistanceNotFoundError(str(distance_id.value))

        ensure_registration_open(distance.edition, now)
        price = quote_price(distance.pricing_tiers, now, self._fee_percent)

        with self._store.atomic():
            # Edition before distance, for every caller. The edition lock
            # covers the one-active-registration rule across distances.
            self._store.lock_edition(distance.edition.id)
            locked = self._store.lock_distance(distance.id)
            if locked is None:
                raise DistanceNotFoundError(str(distance_id.value))

            existing = self._store.find_active_registration(user_id, locked.edition.id, now)
            if existing is not None:
                if existing.distance_id == locked.id and existing.status in RESUMABLE_STATUSES:
                    return StartRegistrationResult(registration=existing, created=False)
                raise AlreadyRegisteredError()

            if counts_edition_wide(locked):
                active_count = self._store.count_active_for_edition(locked.edition.id, now)
            else:
                active_count = self._store.count_active_for_distance(locked.id, now)
            if not has_capacity(locked, active_count):
                raise SoldOutError()

            registration = self._store.create_registration(
                NewRegistration(
                    edition_id=locked.edition.id,
                    distance_id=locked.id,
                    buyer_user_id=user_id,
                    status=RegistrationStatus.STARTED,
                    price=price,
                    expires_at=self._hold_policy.expires_at(now, RegistrationStatus.STARTED),
                )
            )
        return StartRegistrationResult(registration=registration, created=True)

    def spots_remaining(self, distance_id: str, now: datetime | None = None) -> int | None:
        """Return open spots for a distance, or None when it is unlimited.

        Raises:
            InvalidIdentifierError: ``distance_id`` is not a valid UUID.
        """
        now = now or self._clock.now()
        return self._store.spots_remaining(self._parse_distance_id(distance_id), now)

    @staticmethod
    def _parse_distance_id(distance_id: str) -> DistanceId:
        try:
            return DistanceId.from_string(distance_id)
        except (TypeError, ValueError, AttributeError) as exc:
            raise InvalidIdentifierError() from exc
