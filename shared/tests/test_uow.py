"""Tests for the unit of work and event publishing."""

from __future__ import annotations

import pytest

from apps.notifications.sinks import MemorySink
from apps.properties.events import PropertyStatusChanged
from shared.application.uow import DjangoUnitOfWork, unit_of_work
from shared.domain.exceptions import DomainError, NotFound

pytestmark = pytest.mark.django_db


def status_event(property_id: int = 1) -> PropertyStatusChanged:
    return PropertyStatusChanged(
        property_id=property_id,
        old_status="available",
        new_status="reserved",
        reservation_type="deposit",
    )


def test_events_are_published_after_commit(django_capture_on_commit_callbacks):
    sink = MemorySink()

    with django_capture_on_commit_callbacks(execute=True):
        with DjangoUnitOfWork(sink=sink) as uow:
            uow.add_event(status_event())
            assert sink.events == []

    assert sink.kinds() == ["property_status_changed"]


def test_rollback_discards_events(django_capture_on_commit_callbacks):
    sink = MemorySink()

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(DomainError):
            with DjangoUnitOfWork(sink=sink) as uow:
                uow.add_event(status_event())
                raise DomainError("boom")

    assert callbacks == []
    assert sink.events == []


def test_joined_unit_of_work_shares_events():
    with DjangoUnitOfWork() as outer:
        with unit_of_work(outer) as inner:
            assert inner is outer
            inner.add_event(status_event(2))
        assert len(outer.events) == 1


def test_error_in_joined_unit_propagates():
    with pytest.raises(NotFound):
        with DjangoUnitOfWork() as outer:
            with unit_of_work(outer):
                raise NotFound("Property", 1)


def test_domain_error_payload():
    error = NotFound("Inquiry", 12)

    assert error.to_dict() == {
        "code": "not_found",
        "message": "Inquiry 12 not found",
        "entity": "Inquiry",
        "id": 12,
    }
