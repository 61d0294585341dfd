"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from uuid import UUID

from registrations.domain import (
    DiscountSnapshot,
    Distance,
    DistanceId,
    EditionId,
    GroupDiscount,
    GroupDiscountRule,
    NewRegistration,
    Registration,
    RegistrationId,
)


class RegistrationStore(ABC):
    """Interface for registration persistence operations.

    Lock methods only serialize when called inside ``atomic()``; locks are
    released when that transaction ends.
    """

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a context manager wrapping one all-or-nothing transaction."""
        ...

    # Ledger

    @abstractmethod
    def get_distance(self, distance_id: DistanceId) -> Distance | None:
        """Return a live distance with its live edition and live pricing tiers."""
        ...

    @abstractmethod
    def lock_edition(self, edition_id: EditionId) -> None:
        """Take an exclusive row lock on the edition."""
        ...

    @abstractmethod
    def lock_distance(self, distance_id: DistanceId) -> Distance | None:
        """Take an exclusive row lock on the distance and re-read it, or None if gone."""
        ...

    @abstractmethod
    def find_active_registration(
        self, user_id: str, edition_id: EditionId, now: datetime
    ) -> Registration | None:
        """Return the user's active registration in the edition, if any."""
        ...

    @abstractmethod
    def count_active_for_distance(self, distance_id: DistanceId, now: datetime) -> int:
        ...

    @abstractmethod
    def count_active_for_edition(self, edition_id: EditionId, now: datetime) -> int:
        ...

    @abstractmethod
    def create_registration(self, new: NewRegistration) -> Registration:
        ...

    # Aggregator

    @abstractmethod
    def lock_registration(self, registration_id: RegistrationId) -> Registration | None:
        """Take an exclusive row lock on the registration and return it, or None if gone."""
        ...

    @abstractmethod
    def get_redemption_amount(self, registration_id: RegistrationId) -> int | None:
        """Return the redeemed discount amount, or None when nothing was redeemed."""
        ...

    @abstractmethod
    def sum_add_on_totals(self, registration_id: RegistrationId) -> int:
        ...

    @abstractmethod
    def count_joined_group_members(self, group_id: UUID) -> int:
        """Count members who have not left and whose email is verified."""
        ...

    @abstractmethod
    def list_group_discount_rules(self, edition_id: EditionId) -> list[GroupDiscountRule]:
        """Return active rules ordered by min_participants descending."""
        ...

    @abstractmethod
    def update_discount_fields(
        self,
        registration_id: RegistrationId,
        *,
        group_discount: GroupDiscount | None,
        total_cents: int,
        now: datetime,
    ) -> DiscountSnapshot:
        ...

    # Sweeper

    @abstractmethod
    def lock_lapsed_registration_ids(self, now: datetime) -> list[RegistrationId]:
        """Lock and return live holds whose expiry is at or before ``now``."""
        ...

    @abstractmethod
    def cancel_registrations(self, ids: list[RegistrationId], now: datetime) -> int:
        """Cancel the registrations and clear their expiry."""
        ...

    @abstractmethod
    def expire_invites_for_registrations(self, ids: list[RegistrationId], now: datetime) -> int:
        """Expire draft/sent invites with an expiry that belong to the registrations."""
        ...

    # Read models

    @abstractmethod
    def spots_remaining(self, distance_id: DistanceId, now: datetime) -> int | None:
        """Return open spots for the distance, or None when unlimited."""
        ...
