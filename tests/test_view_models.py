"""
Tests for list view models and module summaries.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from erp_data.domains.entities.finance import TRANSACTIONS
from erp_data.domains.entities.warehouse import MOVEMENTS
from erp_data.infrastructure.data.errors import RemoteApplicationError, RemoteTransportError
from erp_data.infrastructure.data.events import CollectingEventSink
from erp_data.infrastructure.data.repositories.record_repository import RecordRepository
from erp_data.infrastructure.storage.local_store import LocalRecordStore, MemoryBackend
from erp_data.services.view_models import (
    RecordListViewModel,
    summarize_movements,
    summarize_payments,
    summarize_shifts,
    summarize_transactions,
)


@pytest.fixture
def store() -> LocalRecordStore:
    return LocalRecordStore(MemoryBackend())


def repo_for(schema, store, request=None, **kwargs) -> RecordRepository:
    return RecordRepository(schema, local_store=store, request=request, events=CollectingEventSink(), **kwargs)


def test_transaction_summary_from_seeds(store: LocalRecordStore) -> None:
    """Seeded finance data summarizes to income 12500, expense 2100, net 10400."""
    vm = RecordListViewModel(repo_for(TRANSACTIONS, store, AsyncMock(side_effect=RemoteTransportError("down"))))

    asyncio.run(vm.refresh())

    assert vm.loading is False
    assert vm.degraded is True
    assert vm.summary == {"income": 12500, "expense": 2100, "net": 10400}


def test_create_prepends_and_updates_summary(store: LocalRecordStore) -> None:
    """A created record heads the list and counts toward the summary."""
    vm = RecordListViewModel(repo_for(TRANSACTIONS, store))
    asyncio.run(vm.refresh())

    created = asyncio.run(vm.create({"type": "EXPENSE", "amount": 400, "account": "Travel"}))

    assert vm.records[0] == created
    assert vm.summary["expense"] == 2500
    assert vm.summary["net"] == 10000


def test_update_none_is_a_no_op(store: LocalRecordStore) -> None:
    """An update of an unknown id leaves the list unchanged."""
    vm = RecordListViewModel(repo_for(TRANSACTIONS, store))
    asyncio.run(vm.refresh())
    before = list(vm.records)

    assert asyncio.run(vm.update("tx-404", {"amount": 1})) is None
    assert vm.records == before


def test_update_replaces_record(store: LocalRecordStore) -> None:
    vm = RecordListViewModel(repo_for(TRANSACTIONS, store))
    asyncio.run(vm.refresh())

    asyncio.run(vm.update("tx-2", {"amount": 100}))

    assert vm.records[1]["amount"] == 100
    assert vm.summary["expense"] == 100


def test_remove_filters_locally(store: LocalRecordStore) -> None:
    vm = RecordListViewModel(repo_for(MOVEMENTS, store))
    asyncio.run(vm.refresh())

    asyncio.run(vm.remove("mv-3"))

    assert [r["id"] for r in vm.records] == ["mv-1", "mv-2", "mv-4"]
    assert vm.summary["shipped_quantity"] == 0


def test_strict_rejection_is_kept_in_last_error(store: LocalRecordStore) -> None:
    """A strict-write rejection is reported on the view model, not raised."""
    request = AsyncMock(side_effect=RemoteApplicationError("Amount must be positive", status_code=422))
    vm = RecordListViewModel(repo_for(TRANSACTIONS, store, request, strict_writes=True))

    assert asyncio.run(vm.create({"amount": -1})) is None
    assert vm.last_error == "Amount must be positive"
    assert vm.records == []


def test_custom_summarizer() -> None:
    store = LocalRecordStore(MemoryBackend())
    vm = RecordListViewModel(repo_for(TRANSACTIONS, store), summarize=lambda records: {"count": len(records)})
    asyncio.run(vm.refresh())
    assert vm.summary == {"count": 2}


def test_movement_summary() -> None:
    """Movement totals count quantities per direction."""
    records = [
        {"movement_type": "RECEIPT", "quantity": 40},
        {"movement_type": "SHIPMENT", "quantity": 25},
        {"movement_type": "TRANSFER", "quantity": 5},
    ]
    assert summarize_movements(records) == {
        "total_moves": 3,
        "total_quantity": 70,
        "received_quantity": 40,
        "shipped_quantity": 25,
    }


def test_payment_and_shift_summaries() -> None:
    payments = [{"amount": 100, "status": "RECEIVED"}, {"amount": 50, "status": "RECEIVED"}, {"amount": 10}]
    assert summarize_payments(payments) == {
        "count": 3,
        "total_amount": 160,
        "by_status": {"RECEIVED": 150, "PENDING": 10},
    }
    shifts = [{"date": "2025-01-08"}, {"date": "2025-01-08"}, {"date": "2025-01-09"}]
    assert summarize_shifts(shifts) == {"total_shifts": 3, "days_covered": 2}


def test_transaction_summary_ignores_transfers_and_bad_amounts() -> None:
    records = [
        {"type": "INCOME", "amount": "not a number"},
        {"type": "TRANSFER", "amount": 500},
        {"type": "EXPENSE", "amount": 20},
    ]
    assert summarize_transactions(records) == {"income": 0, "expense": 20, "net": -20}


def test_numeric_ids_match_stringified_records(store: LocalRecordStore) -> None:
    """Ids passed as numbers still update and remove the stored string ids."""
    store.write_all(TRANSACTIONS.store_key, [{"id": "5", "type": "EXPENSE", "amount": 40}])
    vm = RecordListViewModel(repo_for(TRANSACTIONS, store))
    asyncio.run(vm.refresh())

    asyncio.run(vm.update(5, {"amount": 75}))
    assert vm.records[0]["id"] == "5"
    assert vm.records[0]["amount"] == 75

    asyncio.run(vm.remove(5))
    assert "5" not in [r["id"] for r in vm.records]
