"""Shared pytest fixtures."""

from __future__ import annotations

from decimal import Decimal

import pytest


@pytest.fixture
def memory_sink():
    from apps.notifications.sinks import MemorySink, install_sink

    sink = install_sink(MemorySink())
    yield sink
    sink.clear()


@pytest.fixture
def agent(django_user_model):
    return django_user_model.objects.create_user(
        email="agent@example.com",
        password="AgentPass123",
        full_name="Ana Reyes",
        phone="09171234567",
    )


@pytest.fixture
def other_agent(django_user_model):
    return django_user_model.objects.create_user(
        email="agent2@example.com",
        password="AgentPass123",
        full_name="Ben Cruz",
        phone="09171234568",
    )


@pytest.fixture
def admin(django_user_model):
    return django_user_model.objects.create_superuser(
        email="admin@example.com",
        password="AdminPass123",
        full_name="Office Admin",
    )


@pytest.fixture
def listing(agent):
    from apps.properties.models import Property

    return Property.objects.create(
        title="Two-storey house in Cebu",
        property_type=Property.PropertyType.HOUSE,
        price=Decimal("4500000.00"),
        location="Cebu City",
        agent=agent,
    )
