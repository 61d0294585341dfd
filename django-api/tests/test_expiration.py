"""Integration tests for the expiration sweeper and its management command."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from registrations.models import Registration, RegistrationInvite


def make_invite(registration, now, **overrides):
    fields = {
        "email": "runner@example.com",
        "status": "sent",
        "expires_at": now + timedelta(days=7),
    }
    fields.update(overrides)
    return RegistrationInvite.objects.create(
        edition=registration.edition, registration=registration, **fields
    )


@pytest.mark.django_db
class TestCleanupExpiredRegistrations:
    """Tests for cancelling lapsed holds."""

    def test_cancels_lapsed_holds_only(self, expiration_service, make_distance, make_registration, now):
        """Holds at or past expiry are cancelled; live holds and confirmed rows are not."""
        distance = make_distance()
        lapsed_started = make_registration(distance, buyer_user_id="a", expires_at=now - timedelta(minutes=1))
        lapsed_pending = make_registration(
            distance, buyer_user_id="b", status="payment_pending", expires_at=now
        )
        live = make_registration(distance, buyer_user_id="c", expires_at=now + timedelta(minutes=1))
        confirmed = make_registration(distance, buyer_user_id="d", status="confirmed", expires_at=None)

        assert expiration_service.cleanup_expired_registrations() == 2

        for row in (lapsed_started, lapsed_pending):
            row.refresh_from_db()
            assert row.status == "cancelled"
            assert row.expires_at is None
            assert row.updated_at == now
        live.refresh_from_db()
        confirmed.refresh_from_db()
        assert live.status == "started"
        assert confirmed.status == "confirmed"

    def test_hold_without_expiry_is_left_alone(self, expiration_service, make_distance, make_registration):
        """Holds with a null expiry are not swept."""
        reg = make_registration(make_distance(), expires_at=None)
        assert expiration_service.cleanup_expired_registrations() == 0
        reg.refresh_from_db()
        assert reg.status == "started"

    def test_deleted_registrations_are_ignored(self, expiration_service, make_distance, make_registration, now):
        """Soft-deleted holds are not swept."""
        make_registration(make_distance(), expires_at=now - timedelta(hours=1), deleted_at=now)
        assert expiration_service.cleanup_expired_registrations() == 0

    def test_second_run_is_a_no_op(self, expiration_service, make_distance, make_registration, now):
        """Running twice without new expirations cancels rows only once."""
        reg = make_registration(make_distance(), expires_at=now - timedelta(minutes=5))

        assert expiration_service.cleanup_expired_registrations() == 1
        reg.refresh_from_db()
        first_update = reg.updated_at

        assert expiration_service.cleanup_expired_registrations(now + timedelta(minutes=1)) == 0
        reg.refresh_from_db()
        assert reg.updated_at == first_update

    def test_expires_pending_invites(self, expiration_service, make_distance, make_registration, now):
        """Draft/sent invites with an expiry are expired with their registration."""
        reg = make_registration(make_distance(), expires_at=now - timedelta(minutes=1))
        sent = make_invite(reg, now, status="sent")
        draft = make_invite(reg, now, status="draft")
        claimed = make_invite(reg, now, status="claimed")
        no_expiry = make_invite(reg, now, status="sent", expires_at=None)

        expiration_service.cleanup_expired_registrations()

        for invite in (sent, draft):
            invite.refresh_from_db()
            assert invite.status == "expired"
            assert invite.is_current is False
        claimed.refresh_from_db()
        no_expiry.refresh_from_db()
        assert claimed.status == "claimed"
        assert no_expiry.status == "sent"

    def test_invites_of_live_registrations_are_untouched(
        self, expiration_service, make_distance, make_registration, now
    ):
        """An invite whose own expiry passed is left alone while its registration is live."""
        reg = make_registration(make_distance(), expires_at=now + timedelta(minutes=5))
        invite = make_invite(reg, now, expires_at=now - timedelta(days=1))

        expiration_service.cleanup_expired_registrations()

        invite.refresh_from_db()
        assert invite.status == "sent"

    def test_swept_spot_is_available_again(
        self, expiration_service, registration_service, make_distance, make_registration, now
    ):
        """After a sweep the freed capacity can be claimed."""
        distance = make_distance(capacity=1)
        make_registration(distance, buyer_user_id="user-2", expires_at=now - timedelta(seconds=1))

        expiration_service.cleanup_expired_registrations()

        assert registration_service.start_registration("user-1", str(distance.id)).created is True
        assert Registration.objects.filter(distance=distance, status="cancelled").count() == 1


@pytest.mark.django_db
class TestCleanupCommand:
    """Tests for the cleanup_expired_registrations management command."""

    def test_command_sweeps_as_of_given_time(self, make_distance, make_registration, now):
        """--now controls which holds count as lapsed."""
        reg = make_registration(make_distance(), expires_at=now + timedelta(minutes=10))
        out = StringIO()

        call_command("cleanup_expired_registrations", "--now", (now + timedelta(hours=1)).isoformat(), stdout=out)

        reg.refresh_from_db()
        assert reg.status == "cancelled"
        assert "Cancelled 1 expired registrations" in out.getvalue()

    def test_command_rejects_bad_timestamp(self):
        """An unparsable --now raises CommandError."""
        with pytest.raises(CommandError):
            call_command("cleanup_expired_registrations", "--now", "yesterday", stdout=StringIO())
