"""Expiration sweeper - cancels holds whose reservation window has lapsed."""

import logging
from datetime import datetime

from registrations.domain.clock import Clock, SystemClock
from registrations.stores.interfaces import RegistrationStore

logger = logging.getLogger(__name__)


class ExpirationService:
    """Batch cancellation of lapsed holds, run out-of-band by a scheduler."""

    def __init__(self, store: RegistrationStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def cleanup_expired_registrations(self, now: datetime | None = None) -> int:
        """Cancel lapsed holds and expire their pending invites.

        Invites are selected by their parent registration only, not by their
        own expiry. Returns the number of registrations cancelled.
        """
        now = now or self._clock.now()
        with self._store.atomic():
            expired_ids = self._store.lock_lapsed_registration_ids(now)
            if not expired_ids:
                return 0
            self._store.cancel_registrations(expired_ids, now)
            expired_invites = self._store.expire_invites_for_registrations(expired_ids, now)

        logger.info(
            "Cancelled %d expired registrations and expired %d invites",
            len(expired_ids),
            expired_invites,
        )
        return len(expired_ids)
