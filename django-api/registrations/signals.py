"""Django signals for re-syncing registration totals.

Totals follow order composition: add-ons, promo redemptions and group
membership. The sync runs after the surrounding transaction commits so it
sees the committed child rows and takes its own registration lock.
"""

from functools import partial

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from registrations.domain.value_objects import RESUMABLE_STATUSES
from registrations.models import (
    AddOnSelection,
    DiscountRedemption,
    Registration,
    RegistrationGroupMember,
)
from registrations.services import sync_group_discount


def schedule_sync(registration_id) -> None:
    transaction.on_commit(partial(sync_group_discount, str(registration_id)))


@receiver([post_save, post_delete], sender=AddOnSelection)
def sync_on_add_on_change(sender, instance, **kwargs):
    """Recompute the total when an add-on is saved or deleted."""
    schedule_sync(instance.registration_id)


@receiver([post_save, post_delete], sender=DiscountRedemption)
def sync_on_redemption_change(sender, instance, **kwargs):
    """Recompute the total when a promo redemption is saved or deleted."""
    schedule_sync(instance.registration_id)


@receiver(post_save, sender=RegistrationGroupMember)
def sync_on_group_member_change(sender, instance, **kwargs):
    """Re-resolve group discounts for the group's in-progress registrations."""
    registration_ids = Registration.objects.alive().filter(
        registration_group_id=instance.group_id,
        status__in=[s.value for s in RESUMABLE_STATUSES],
    ).values_list("pk", flat=True)
    for registration_id in registration_ids:
        schedule_sync(registration_id)
