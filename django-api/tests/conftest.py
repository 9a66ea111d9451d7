"""Pytest configuration and shared fixtures."""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from fakes import FakeDirectory, FakeGateway, FakeMailer, FixedClock, InMemoryStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory({"writer-1": "writer1@example.com"})


@pytest.fixture
def participant(django_user_model):
    return django_user_model.objects.create_user(
        username="writer-1", email="writer1@example.com", password="pw"
    )


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        username="admin-1", email="admin@example.com", password="pw"
    )


@pytest.fixture
def session_row():
    """Persist a session row. Keyword arguments override the defaults."""
    from bookings.models import Session

    def create(**overrides):
        fields = {
            "title": "Morning Pages",
            "starts_at": timezone.now() + timedelta(days=2),
            "duration_minutes": 60,
            "seat_cap": 5,
            "price_cents": 0,
        }
        fields.update(overrides)
        return Session.objects.create(**fields)

    return create
