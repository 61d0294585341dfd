"""Discount and add-on aggregation for in-progress registrations."""

import logging
from datetime import datetime
from uuid import UUID

from registrations.domain import (
    DiscountSnapshot,
    EditionId,
    GroupDiscount,
    GroupDiscountMatch,
    PercentOff,
    RegistrationId,
)
from registrations.domain.clock import Clock, SystemClock
from registrations.domain.pricing import compute_total, percent_of
from registrations.domain.value_objects import RESUMABLE_STATUSES
from registrations.stores.interfaces import RegistrationStore

logger = logging.getLogger(__name__)


class DiscountService:
    """Service for keeping a registration's discount fields and total in sync."""

    def __init__(self, store: RegistrationStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def resolve_group_discount(
        self, group_id: UUID, edition_id: EditionId
    ) -> GroupDiscountMatch | None:
        """Return the best active rule the group's joined member count reaches."""
        joined = self._store.count_joined_group_members(group_id)
        for rule in self._store.list_group_discount_rules(edition_id):
            if joined >= rule.min_participants:
                return GroupDiscountMatch(
                    percent_off=rule.percent_off,
                    rule_id=rule.id,
                    joined_member_count=joined,
                )
        return None

    def sync_group_discount(
        self, registration_id: str, now: datetime | None = None
    ) -> DiscountSnapshot | None:
        """Recompute group discount and total for a registration.

        Returns None when the registration is missing or deleted, and the
        persisted snapshot unchanged when it is no longer started/submitted.
        A granted group percentage is never lowered. Nothing is written
        unless a derived field changes.
        """
        now = now or self._clock.now()
        try:
            reg_id = RegistrationId.from_string(registration_id)
        except (TypeError, ValueError, AttributeError):
            return None

        with self._store.atomic():
            registration = self._store.lock_registration(reg_id)
            if registration is None:
                return None

            current = DiscountSnapshot.of(registration)
            if registration.status not in RESUMABLE_STATUSES:
                return current

            base_price_cents = registration.base_price_cents
            redemption_amount = self._store.get_redemption_amount(reg_id)
            add_on_total_cents = self._store.sum_add_on_totals(reg_id)

            next_discount = registration.group_discount
            if registration.registration_group_id is not None and redemption_amount is None:
                match = self.resolve_group_discount(
                    registration.registration_group_id, registration.edition_id
                )
                if match is not None and (
                    next_discount is None or match.percent_off > next_discount.percent_off.value
                ):
                    next_discount = GroupDiscount(
                        percent_off=PercentOff(match.percent_off),
                        amount_cents=percent_of(base_price_cents, match.percent_off),
                    )

            if next_discount is not None and next_discount.amount_cents is None:
                next_discount = GroupDiscount(
                    percent_off=next_discount.percent_off,
                    amount_cents=percent_of(base_price_cents, next_discount.percent_off.value),
                )

            total_cents = compute_total(
                base_price_cents=base_price_cents,
                fees_cents=registration.fees_cents,
                tax_cents=registration.tax_cents,
                add_on_total_cents=add_on_total_cents,
                discount_amount_cents=redemption_amount or 0,
                group_discount_amount_cents=next_discount.amount_cents if next_discount else 0,
            )

            if next_discount == registration.group_discount and total_cents == registration.total_cents:
                return current

            snapshot = self._store.update_discount_fields(
                reg_id,
                group_discount=next_discount,
                total_cents=total_cents,
                now=now,
            )

        logger.info(
            "Synced registration %s: percent_off=%s total_cents=%s",
            reg_id,
            snapshot.group_discount_percent_off,
            snapshot.total_cents,
        )
        return snapshot
