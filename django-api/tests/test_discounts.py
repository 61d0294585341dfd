"""Integration tests for discount and add-on aggregation."""

import uuid

import pytest

from registrations.models import (
    AddOnSelection,
    DiscountRedemption,
    GroupDiscountRule,
    Registration,
    RegistrationGroup,
    RegistrationGroupMember,
)


@pytest.fixture
def group_with_rules(make_edition):
    """An edition with a registration group and 2/5% and 4/15% rules."""

    def _make(members: int, edition=None):
        edition = edition or make_edition()
        group = RegistrationGroup.objects.create(edition=edition, name="Running Club")
        for n in range(members):
            RegistrationGroupMember.objects.create(group=group, user_id=f"member-{n}", email_verified=True)
        GroupDiscountRule.objects.create(edition=edition, min_participants=2, percent_off=5)
        GroupDiscountRule.objects.create(edition=edition, min_participants=4, percent_off=15)
        return edition, group

    return _make


def add_member(group, user_id, email_verified=True, left_at=None):
    return RegistrationGroupMember.objects.create(
        group=group, user_id=user_id, email_verified=email_verified, left_at=left_at
    )


def recomputed_total(row: Registration) -> int:
    add_ons = sum(a.line_total_cents for a in row.add_on_selections.filter(deleted_at__isnull=True))
    redemption = getattr(row, "discount_redemption", None)
    total = (
        row.base_price_cents
        + row.fees_cents
        + row.tax_cents
        + add_ons
        - (redemption.discount_amount_cents if redemption else 0)
        - (row.group_discount_amount_cents or 0)
    )
    return max(0, total)


@pytest.mark.django_db
class TestAddOnsAndRedemptions:
    """Tests for totals driven by add-ons and promo codes."""

    def test_add_ons_raise_total(self, discount_service, make_distance, make_registration):
        """Live add-on line totals are added; deleted ones are not."""
        reg = make_registration(make_distance())
        AddOnSelection.objects.create(registration=reg, label="T-shirt", line_total_cents=2000)
        AddOnSelection.objects.create(registration=reg, label="Medal", quantity=2, line_total_cents=1000)
        AddOnSelection.objects.create(
            registration=reg, label="Removed", line_total_cents=9999, deleted_at=reg.created_at
        )

        snapshot = discount_service.sync_group_discount(str(reg.id))

        assert snapshot.total_cents == 5250 + 3000
        reg.refresh_from_db()
        assert reg.total_cents == 8250
        assert reg.total_cents == recomputed_total(reg)

    def test_redemption_lowers_total(self, discount_service, make_distance, make_registration, now):
        """A redeemed discount amount is subtracted."""
        reg = make_registration(make_distance())
        DiscountRedemption.objects.create(
            registration=reg, code="SPRING10", discount_amount_cents=1000, redeemed_at=now
        )
        assert discount_service.sync_group_discount(str(reg.id)).total_cents == 4250

    def test_total_floors_at_zero(self, discount_service, make_distance, make_registration, now):
        """A redemption larger than the order produces a zero total."""
        reg = make_registration(make_distance())
        DiscountRedemption.objects.create(
            registration=reg, code="FREE", discount_amount_cents=100_000, redeemed_at=now
        )
        assert discount_service.sync_group_discount(str(reg.id)).total_cents == 0

    def test_unchanged_registration_is_not_written(self, discount_service, make_distance, make_registration, now):
        """No derived change means updated_at is untouched."""
        reg = make_registration(make_distance())
        before = Registration.objects.get(pk=reg.id).updated_at

        snapshot = discount_service.sync_group_discount(str(reg.id), now=now)

        assert snapshot.total_cents == 5250
        assert Registration.objects.get(pk=reg.id).updated_at == before

    def test_null_total_is_computed(self, discount_service, make_distance, make_registration):
        """A registration without a total gets one."""
        reg = make_registration(make_distance(), total_cents=None)
        assert discount_service.sync_group_discount(str(reg.id)).total_cents == 5250


@pytest.mark.django_db
class TestGroupDiscount:
    """Tests for group discount resolution and monotonicity."""

    def test_grants_best_reached_rule(self, discount_service, make_distance, make_registration, group_with_rules):
        """Four joined members reach the 15% rule."""
        edition, group = group_with_rules(members=4)
        reg = make_registration(make_distance(edition=edition), registration_group=group)

        snapshot = discount_service.sync_group_discount(str(reg.id))

        assert snapshot.group_discount_percent_off == 15
        assert snapshot.group_discount_amount_cents == 750
        assert snapshot.total_cents == 4500
        reg.refresh_from_db()
        assert (reg.group_discount_percent_off, reg.group_discount_amount_cents, reg.total_cents) == (15, 750, 4500)

    def test_unverified_and_departed_members_do_not_count(
        self, discount_service, make_distance, make_registration, group_with_rules, now
    ):
        """Only verified members who have not left are counted."""
        edition, group = group_with_rules(members=2)
        add_member(group, "unverified", email_verified=False)
        add_member(group, "gone", left_at=now)
        reg = make_registration(make_distance(edition=edition), registration_group=group)

        assert discount_service.sync_group_discount(str(reg.id)).group_discount_percent_off == 5

    def test_inactive_rules_are_ignored(self, discount_service, make_distance, make_registration, group_with_rules):
        """Deactivated rules are never applied."""
        edition, group = group_with_rules(members=4)
        GroupDiscountRule.objects.filter(edition=edition, min_participants=4).update(is_active=False)
        reg = make_registration(make_distance(edition=edition), registration_group=group)

        assert discount_service.sync_group_discount(str(reg.id)).group_discount_percent_off == 5

    def test_discount_improves_as_group_grows(
        self, discount_service, make_distance, make_registration, group_with_rules
    ):
        """Reaching a higher threshold raises the percentage."""
        edition, group = group_with_rules(members=2)
        reg = make_registration(make_distance(edition=edition), registration_group=group)
        assert discount_service.sync_group_discount(str(reg.id)).group_discount_percent_off == 5

        add_member(group, "member-3")
        add_member(group, "member-4")

        assert discount_service.sync_group_discount(str(reg.id)).group_discount_percent_off == 15

    def test_discount_never_regresses(
        self, discount_service, make_distance, make_registration, group_with_rules, now
    ):
        """Members leaving does not lower a granted percentage."""
        edition, group = group_with_rules(members=4)
        reg = make_registration(make_distance(edition=edition), registration_group=group)
        discount_service.sync_group_discount(str(reg.id))

        group.members.update(left_at=now)
        snapshot = discount_service.sync_group_discount(str(reg.id))

        assert snapshot.group_discount_percent_off == 15
        assert snapshot.group_discount_amount_cents == 750

    def test_redemption_suppresses_new_group_discount(
        self, discount_service, make_distance, make_registration, group_with_rules, now
    ):
        """A promo redemption on file stops a group discount from being granted."""
        edition, group = group_with_rules(members=4)
        reg = make_registration(make_distance(edition=edition), registration_group=group)
        DiscountRedemption.objects.create(registration=reg, code="X", discount_amount_cents=250, redeemed_at=now)

        snapshot = discount_service.sync_group_discount(str(reg.id))

        assert snapshot.group_discount_percent_off is None
        assert snapshot.group_discount_amount_cents is None
        assert snapshot.total_cents == 5000

    def test_group_and_add_ons_combine(self, discount_service, make_distance, make_registration, group_with_rules):
        """The group discount applies to the base price only; add-ons are added in full."""
        edition, group = group_with_rules(members=2)
        reg = make_registration(make_distance(edition=edition), registration_group=group)
        AddOnSelection.objects.create(registration=reg, label="T-shirt", line_total_cents=2000)

        discount_service.sync_group_discount(str(reg.id))

        reg.refresh_from_db()
        assert reg.group_discount_amount_cents == 250
        assert reg.total_cents == 5250 + 2000 - 250
        assert reg.total_cents == recomputed_total(reg)


@pytest.mark.django_db
class TestSyncEdgeCases:
    def test_malformed_id(self, discount_service):
        """Malformed ids yield None."""
        assert discount_service.sync_group_discount("bogus") is None

    def test_unknown_registration(self, discount_service):
        """Unknown ids yield None."""
        assert discount_service.sync_group_discount(str(uuid.uuid4())) is None

    def test_deleted_registration(self, discount_service, make_distance, make_registration, now):
        """Soft-deleted registrations yield None."""
        reg = make_registration(make_distance(), deleted_at=now)
        assert discount_service.sync_group_discount(str(reg.id)) is None

    @pytest.mark.parametrize("status", ["payment_pending", "confirmed", "cancelled"])
    def test_finalized_registrations_are_untouched(
        self, discount_service, make_distance, make_registration, status
    ):
        """Registrations past submitted return their stored values."""
        reg = make_registration(make_distance(), status=status, total_cents=5250)
        AddOnSelection.objects.create(registration=reg, label="T-shirt", line_total_cents=2000)

        snapshot = discount_service.sync_group_discount(str(reg.id))

        assert snapshot.total_cents == 5250
        reg.refresh_from_db()
        assert reg.total_cents == 5250
