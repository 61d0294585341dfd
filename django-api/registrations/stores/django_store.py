"""Django ORM implementation of the RegistrationStore."""

from contextlib import AbstractContextManager
from datetime import datetime
from uuid import UUID

from django.db import transaction
from django.db.models import IntegerField, Prefetch, QuerySet, Sum
from django.db.models.functions import Coalesce

from registrations import models
from registrations.domain import (
    Capacity,
    CapacityScope,
    DiscountSnapshot,
    Distance,
    DistanceId,
    Edition,
    EditionId,
    GroupDiscount,
    GroupDiscountRule,
    InviteStatus,
    NewRegistration,
    PercentOff,
    PricingTier,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Visibility,
)
from registrations.domain import policy
from registrations.stores.interfaces import RegistrationStore


def _capacity(value: int | None) -> Capacity | None:
    return Capacity(value) if value is not None else None


def to_edition(row: models.EventEdition) -> Edition:
    return Edition(
        id=EditionId(row.id),
        visibility=Visibility(row.visibility),
        is_registration_paused=row.is_registration_paused,
        registration_opens_at=row.registration_opens_at,
        registration_closes_at=row.registration_closes_at,
        shared_capacity=_capacity(row.shared_capacity),
    )


def to_distance(row: models.EventDistance) -> Distance:
    return Distance(
        id=DistanceId(row.id),
        edition=to_edition(row.edition),
        capacity=_capacity(row.capacity),
        capacity_scope=CapacityScope(row.capacity_scope),
        pricing_tiers=tuple(
            PricingTier(
                id=tier.id,
                price_cents=tier.price_cents,
                sort_order=tier.sort_order,
                starts_at=tier.starts_at,
                ends_at=tier.ends_at,
            )
            for tier in row.pricing_tiers.all()
        ),
    )


def to_registration(row: models.Registration) -> Registration:
    group_discount = None
    if row.group_discount_percent_off is not None:
        group_discount = GroupDiscount(
            percent_off=PercentOff(row.group_discount_percent_off),
            amount_cents=row.group_discount_amount_cents,
        )
    return Registration(
        id=RegistrationId(row.id),
        edition_id=EditionId(row.edition_id),
        distance_id=DistanceId(row.distance_id),
        buyer_user_id=row.buyer_user_id,
        status=RegistrationStatus(row.status),
        base_price_cents=row.base_price_cents,
        fees_cents=row.fees_cents,
        tax_cents=row.tax_cents,
        total_cents=row.total_cents,
        group_discount=group_discount,
        registration_group_id=row.registration_group_id,
        expires_at=row.expires_at,
        created_at=row.created_at,
    )


def _live_distances() -> QuerySet:
    return (
        models.EventDistance.objects.alive()
        .filter(edition__deleted_at__isnull=True)
        .select_related("edition")
        .prefetch_related(
            Prefetch("pricing_tiers", queryset=models.PricingTier.objects.alive())
        )
    )


class DjangoRegistrationStore(RegistrationStore):
    """Relational registration store using Django ORM row locks."""

    def atomic(self) -> AbstractContextManager[None]:
        return transaction.atomic()

    def get_distance(self, distance_id: DistanceId) -> Distance | None:
        row = _live_distances().filter(pk=distance_id.value).first()
        return to_distance(row) if row is not None else None

    def lock_edition(self, edition_id: EditionId) -> None:
        # Evaluate the queryset so the FOR UPDATE statement actually runs.
        list(
            models.EventEdition.objects.select_for_update()
            .filter(pk=edition_id.value)
            .values_list("pk", flat=True)
        )

    def lock_distance(self, distance_id: DistanceId) -> Distance | None:
        locked = list(
            models.EventDistance.objects.select_for_update()
            .filter(pk=distance_id.value)
            .values_list("pk", flat=True)
        )
        if not locked:
            return None
        return self.get_distance(distance_id)

    def find_active_registration(
        self, user_id: str, edition_id: EditionId, now: datetime
    ) -> Registration | None:
        row = (
            models.Registration.objects.active(now)
            .filter(buyer_user_id=user_id, edition_id=edition_id.value)
            .order_by("created_at")
            .first()
        )
        return to_registration(row) if row is not None else None

    def count_active_for_distance(self, distance_id: DistanceId, now: datetime) -> int:
        return models.Registration.objects.active(now).filter(distance_id=distance_id.value).count()

    def count_active_for_edition(self, edition_id: EditionId, now: datetime) -> int:
        return models.Registration.objects.active(now).filter(edition_id=edition_id.value).count()

    def create_registration(self, new: NewRegistration) -> Registration:
        row = models.Registration.objects.create(
            edition_id=new.edition_id.value,
            distance_id=new.distance_id.value,
            buyer_user_id=new.buyer_user_id,
            status=new.status.value,
            base_price_cents=new.price.base_price_cents,
            fees_cents=new.price.fees_cents,
            tax_cents=new.price.tax_cents,
            total_cents=new.price.total_cents,
            expires_at=new.expires_at,
        )
        return to_registration(row)

    def lock_registration(self, registration_id: RegistrationId) -> Registration | None:
        row = (
            models.Registration.objects.alive()
            .select_for_update()
            .filter(pk=registration_id.value)
            .first()
        )
        return to_registration(row) if row is not None else None

    def get_redemption_amount(self, registration_id: RegistrationId) -> int | None:
        return (
            models.DiscountRedemption.objects.filter(registration_id=registration_id.value)
            .values_list("discount_amount_cents", flat=True)
            .first()
        )

    def sum_add_on_totals(self, registration_id: RegistrationId) -> int:
        totals = models.AddOnSelection.objects.alive().filter(
            registration_id=registration_id.value
        ).aggregate(total=Coalesce(Sum("line_total_cents"), 0, output_field=IntegerField()))
        return totals["total"]

    def count_joined_group_members(self, group_id: UUID) -> int:
        return models.RegistrationGroupMember.objects.filter(
            group_id=group_id,
            left_at__isnull=True,
            email_verified=True,
        ).count()

    def list_group_discount_rules(self, edition_id: EditionId) -> list[GroupDiscountRule]:
        rows = models.GroupDiscountRule.objects.filter(
            edition_id=edition_id.value, is_active=True
        ).order_by("-min_participants")
        return [
            GroupDiscountRule(
                id=row.id,
                min_participants=row.min_participants,
                percent_off=row.percent_off,
            )
            for row in rows
        ]

    def update_discount_fields(
        self,
        registration_id: RegistrationId,
        *,
        group_discount: GroupDiscount | None,
        total_cents: int,
        now: datetime,
    ) -> DiscountSnapshot:
        percent_off = group_discount.percent_off.value if group_discount else None
        amount_cents = group_discount.amount_cents if group_discount else None
        models.Registration.objects.filter(pk=registration_id.value).update(
            group_discount_percent_off=percent_off,
            group_discount_amount_cents=amount_cents,
            total_cents=total_cents,
            updated_at=now,
        )
        return DiscountSnapshot(
            id=registration_id,
            group_discount_percent_off=percent_off,
            group_discount_amount_cents=amount_cents,
            total_cents=total_cents,
        )

    def lock_lapsed_registration_ids(self, now: datetime) -> list[RegistrationId]:
        ids = (
            models.Registration.objects.lapsed(now)
            .select_for_update()
            .values_list("pk", flat=True)
        )
        return [RegistrationId(pk) for pk in ids]

    def cancel_registrations(self, ids: list[RegistrationId], now: datetime) -> int:
        return models.Registration.objects.filter(pk__in=[i.value for i in ids]).update(
            status=RegistrationStatus.CANCELLED.value,
            expires_at=None,
            updated_at=now,
        )

    def expire_invites_for_registrations(self, ids: list[RegistrationId], now: datetime) -> int:
        return models.RegistrationInvite.objects.filter(
            registration_id__in=[i.value for i in ids],
            status__in=[InviteStatus.DRAFT.value, InviteStatus.SENT.value],
            expires_at__isnull=False,
        ).update(
            status=InviteStatus.EXPIRED.value,
            is_current=False,
            updated_at=now,
        )

    def spots_remaining(self, distance_id: DistanceId, now: datetime) -> int | None:
        distance = self.get_distance(distance_id)
        if distance is None:
            return None
        if policy.counts_edition_wide(distance):
            active_count = self.count_active_for_edition(distance.edition.id, now)
        else:
            active_count = self.count_active_for_distance(distance.id, now)
        return policy.spots_remaining(distance, active_count)
