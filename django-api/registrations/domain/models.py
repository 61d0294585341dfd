"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in registrations/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Self
from uuid import UUID

from registrations.domain.value_objects import (
    Capacity,
    CapacityScope,
    DistanceId,
    EditionId,
    GroupDiscount,
    RegistrationId,
    RegistrationStatus,
    Visibility,
)


@dataclass(frozen=True)
class Edition:
    """Domain representation of an EventEdition."""

    id: EditionId
    visibility: Visibility
    is_registration_paused: bool
    registration_opens_at: datetime | None
    registration_closes_at: datetime | None
    shared_capacity: Capacity | None


@dataclass(frozen=True)
class PricingTier:
    """Domain representation of a PricingTier."""

    id: UUID
    price_cents: int
    sort_order: int
    starts_at: datetime | None = None
    ends_at: datetime | None = None


@dataclass(frozen=True)
class Distance:
    """Domain representation of an EventDistance with its edition."""

    id: DistanceId
    edition: Edition
    capacity: Capacity | None
    capacity_scope: CapacityScope
    pricing_tiers: tuple[PricingTier, ...] = ()


@dataclass(frozen=True)
class Registration:
    """Domain representation of a Registration."""

    id: RegistrationId
    edition_id: EditionId
    distance_id: DistanceId
    buyer_user_id: str | None
    status: RegistrationStatus
    base_price_cents: int
    fees_cents: int
    tax_cents: int
    total_cents: int | None
    group_discount: GroupDiscount | None
    registration_group_id: UUID | None
    expires_at: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class PriceQuote:
    """Price components for a new hold."""

    base_price_cents: int
    fees_cents: int
    tax_cents: int
    total_cents: int


@dataclass(frozen=True)
class NewRegistration:
    """Values for a registration row about to be inserted."""

    edition_id: EditionId
    distance_id: DistanceId
    buyer_user_id: str
    status: RegistrationStatus
    price: PriceQuote
    expires_at: datetime | None


@dataclass(frozen=True)
class StartRegistrationResult:
    """Outcome of starting a registration: the hold and whether it is new."""

    registration: Registration
    created: bool


@dataclass(frozen=True)
class DiscountSnapshot:
    """Discount-derived fields of a registration after a sync."""

    id: RegistrationId
    group_discount_percent_off: int | None
    group_discount_amount_cents: int | None
    total_cents: int | None

    @classmethod
    def of(cls, registration: Registration) -> Self:
        discount = registration.group_discount
        return cls(
            id=registration.id,
            group_discount_percent_off=discount.percent_off.value if discount else None,
            group_discount_amount_cents=discount.amount_cents if discount else None,
            total_cents=registration.total_cents,
        )


@dataclass(frozen=True)
class GroupDiscountRule:
    """Domain representation of a GroupDiscountRule."""

    id: UUID
    min_participants: int
    percent_off: int


@dataclass(frozen=True)
class GroupDiscountMatch:
    """The rule a registration group currently qualifies for."""

    percent_off: int
    rule_id: UUID
    joined_member_count: int
