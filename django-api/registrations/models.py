"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid
from datetime import datetime

from django.db import models
from django.db.models import Q

from registrations.domain.value_objects import (
    HOLD_STATUSES,
    CapacityScope,
    InviteStatus,
    RegistrationStatus,
    Visibility,
)


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").capitalize()) for member in enum_cls]


class SoftDeleteQuerySet(models.QuerySet):
    """Queryset for tables that tombstone rows with ``deleted_at``."""

    def alive(self) -> "SoftDeleteQuerySet":
        return self.filter(deleted_at__isnull=True)


class RegistrationQuerySet(SoftDeleteQuerySet):
    """Shared registration predicates used by the ledger, aggregator and sweeper."""

    def active(self, now: datetime) -> "RegistrationQuerySet":
        """Rows holding a spot: confirmed, or a hold that has not lapsed."""
        return self.alive().filter(
            Q(status=RegistrationStatus.CONFIRMED.value)
            | Q(status__in=[s.value for s in HOLD_STATUSES], expires_at__gt=now)
        )

    def lapsed(self, now: datetime) -> "RegistrationQuerySet":
        """Holds whose expiry has passed and that the sweeper should cancel."""
        return self.alive().filter(
            status__in=[s.value for s in HOLD_STATUSES],
            expires_at__isnull=False,
            expires_at__lte=now,
        )


class EventEdition(models.Model):
    """Persistence model for event editions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    label = models.CharField(max_length=50)
    visibility = models.CharField(
        max_length=20, choices=_choices(Visibility), default=Visibility.DRAFT.value
    )
    registration_opens_at = models.DateTimeField(blank=True, null=True)
    registration_closes_at = models.DateTimeField(blank=True, null=True)
    is_registration_paused = models.BooleanField(default=False)
    shared_capacity = models.PositiveIntegerField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.label


class EventDistance(models.Model):
    """Persistence model for race distances within an edition."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    edition = models.ForeignKey(
        EventEdition, on_delete=models.CASCADE, related_name="distances"
    )
    label = models.CharField(max_length=100)
    capacity = models.PositiveIntegerField(blank=True, null=True)
    capacity_scope = models.CharField(
        max_length=20,
        choices=_choices(CapacityScope),
        default=CapacityScope.PER_DISTANCE.value,
    )
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        ordering = ["sort_order"]
        indexes = [
            models.Index(fields=["edition", "sort_order"]),
        ]

    def __str__(self) -> str:
        return f"{self.edition.label} - {self.label}"


class PricingTier(models.Model):
    """Persistence model for time-boxed distance prices."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    distance = models.ForeignKey(
        EventDistance, on_delete=models.CASCADE, related_name="pricing_tiers"
    )
    label = models.CharField(max_length=100, blank=True)
    price_cents = models.PositiveIntegerField()
    sort_order = models.IntegerField(default=0)
    starts_at = models.DateTimeField(blank=True, null=True)
    ends_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        ordering = ["sort_order"]
        indexes = [
            models.Index(fields=["distance"]),
        ]

    def __str__(self) -> str:
        return f"{self.label or 'Tier'} - {self.price_cents}"


class RegistrationGroup(models.Model):
    """A set of participants registering together for group discounts."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    edition = models.ForeignKey(
        EventEdition, on_delete=models.CASCADE, related_name="registration_groups"
    )
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = SoftDeleteQuerySet.as_manager()

    def __str__(self) -> str:
        return self.name


class RegistrationGroupMember(models.Model):
    """Persistence model for a user's membership in a registration group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(
        RegistrationGroup, on_delete=models.CASCADE, related_name="members"
    )
    user_id = models.CharField(max_length=64)
    email_verified = models.BooleanField(default=False)
    joined_at = models.DateTimeField(auto_now_add=True)
    left_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        indexes = [
            models.Index(fields=["group", "left_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.group.name} - {self.user_id}"


class GroupDiscountRule(models.Model):
    """Percent-off granted once a group reaches a participant threshold."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    edition = models.ForeignKey(
        EventEdition, on_delete=models.CASCADE, related_name="group_discount_rules"
    )
    min_participants = models.PositiveIntegerField()
    percent_off = models.PositiveSmallIntegerField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["edition", "min_participants"],
                name="group_discount_rules_edition_threshold_uniq",
            ),
            models.CheckConstraint(
                condition=Q(percent_off__lte=100),
                name="group_discount_rules_percent_off_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.percent_off}% from {self.min_participants}"


class Registration(models.Model):
    """Persistence model for a user's claim on a distance."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    edition = models.ForeignKey(
        EventEdition, on_delete=models.CASCADE, related_name="registrations"
    )
    distance = models.ForeignKey(
        EventDistance, on_delete=models.CASCADE, related_name="registrations"
    )
    buyer_user_id = models.CharField(max_length=64, blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=_choices(RegistrationStatus),
        default=RegistrationStatus.STARTED.value,
    )
    base_price_cents = models.PositiveIntegerField(default=0)
    fees_cents = models.PositiveIntegerField(default=0)
    tax_cents = models.PositiveIntegerField(default=0)
    total_cents = models.PositiveIntegerField(blank=True, null=True)
    group_discount_percent_off = models.PositiveSmallIntegerField(blank=True, null=True)
    group_discount_amount_cents = models.PositiveIntegerField(blank=True, null=True)
    registration_group = models.ForeignKey(
        RegistrationGroup,
        on_delete=models.SET_NULL,
        related_name="registrations",
        blank=True,
        null=True,
    )
    expires_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"]),
            models.Index(fields=["buyer_user_id", "edition"]),
            models.Index(fields=["distance", "status"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(group_discount_percent_off__isnull=True)
                | Q(group_discount_percent_off__lte=100),
                name="registrations_group_discount_percent_range",
            ),
            models.CheckConstraint(
                condition=Q(group_discount_percent_off__isnull=False)
                | Q(group_discount_amount_cents__isnull=True),
                name="registrations_group_discount_amount_requires_percent",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.distance.label} - {self.buyer_user_id} ({self.status})"


class RegistrationInvite(models.Model):
    """Invitation linking a group-upload participant to a reserved registration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    edition = models.ForeignKey(
        EventEdition, on_delete=models.CASCADE, related_name="registration_invites"
    )
    registration = models.ForeignKey(
        Registration, on_delete=models.CASCADE, related_name="invites"
    )
    email = models.EmailField(max_length=255)
    status = models.CharField(
        max_length=20, choices=_choices(InviteStatus), default=InviteStatus.DRAFT.value
    )
    is_current = models.BooleanField(default=True)
    expires_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["registration", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.email} ({self.status})"


class DiscountRedemption(models.Model):
    """A promo-code redemption applied to a registration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    registration = models.OneToOneField(
        Registration, on_delete=models.CASCADE, related_name="discount_redemption"
    )
    code = models.CharField(max_length=50)
    discount_amount_cents = models.PositiveIntegerField()
    redeemed_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.code} - {self.discount_amount_cents}"


class AddOnSelection(models.Model):
    """An extra (merch, donation) added to a registration's order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    registration = models.ForeignKey(
        Registration, on_delete=models.CASCADE, related_name="add_on_selections"
    )
    label = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(default=1)
    line_total_cents = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["registration"]),
        ]

    def __str__(self) -> str:
        return f"{self.label} x{self.quantity}"
