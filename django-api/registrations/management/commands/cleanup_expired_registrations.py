import logging
from typing import Any

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from registrations.services import cleanup_expired_registrations

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Cancel registration holds whose expiry has passed.

    Meant to run every few minutes from system cron, alongside or instead of
    the HTTP cron endpoint.
    """

    help = "Cancel expired registration holds and expire their pending invites"

    def add_arguments(self, parser) -> None:
        parser.add_argument(
            "--now",
            help="ISO 8601 timestamp to sweep as of (defaults to the current time)",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        now = None
        if options.get("now"):
            try:
                now = parse_datetime(options["now"])
            except ValueError as exc:
                raise CommandError(f"Invalid --now value: {options['now']}") from exc
            if now is None:
                raise CommandError(f"Invalid --now value: {options['now']}")
            if timezone.is_naive(now):
                now = timezone.make_aware(now, timezone.get_current_timezone())

        cancelled_count = cleanup_expired_registrations(now)
        self.stdout.write(self.style.SUCCESS(f"Cancelled {cancelled_count} expired registrations"))
