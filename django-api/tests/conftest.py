"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from registrations.domain.clock import FixedClock
from registrations.models import EventDistance, EventEdition, PricingTier, Registration
from registrations.services import DiscountService, ExpirationService, RegistrationService
from registrations.stores.django_store import DjangoRegistrationStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock(now) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def store() -> DjangoRegistrationStore:
    return DjangoRegistrationStore()


@pytest.fixture
def registration_service(store, clock) -> RegistrationService:
    return RegistrationService(store, clock=clock)


@pytest.fixture
def discount_service(store, clock) -> DiscountService:
    return DiscountService(store, clock=clock)


@pytest.fixture
def expiration_service(store, clock) -> ExpirationService:
    return ExpirationService(store, clock=clock)


@pytest.fixture
def make_edition(now):
    def _make(**overrides) -> EventEdition:
        fields = {
            "label": "Spring Classic 2026",
            "visibility": "published",
            "registration_opens_at": now - timedelta(days=1),
            "registration_closes_at": now + timedelta(days=30),
        }
        fields.update(overrides)
        return EventEdition.objects.create(**fields)

    return _make


@pytest.fixture
def make_distance(make_edition):
    def _make(edition: EventEdition | None = None, **overrides) -> EventDistance:
        fields = {"label": "10K", "capacity": 100}
        fields.update(overrides)
        return EventDistance.objects.create(edition=edition or make_edition(), **fields)

    return _make


@pytest.fixture
def make_tier():
    def _make(distance: EventDistance, **overrides) -> PricingTier:
        fields = {"label": "Regular", "price_cents": 5000}
        fields.update(overrides)
        return PricingTier.objects.create(distance=distance, **fields)

    return _make


@pytest.fixture
def make_registration(now):
    def _make(distance: EventDistance, **overrides) -> Registration:
        fields = {
            "buyer_user_id": "user-1",
            "status": "started",
            "base_price_cents": 5000,
            "fees_cents": 250,
            "total_cents": 5250,
            "expires_at": now + timedelta(minutes=30),
        }
        fields.update(overrides)
        return Registration.objects.create(
            edition=distance.edition, distance=distance, **fields
        )

    return _make
