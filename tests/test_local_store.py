"""
Tests for the durable local store: partitions, corruption tolerance, seeding, file backend.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from erp_data.infrastructure.storage.local_store import JsonFileBackend, LocalRecordStore, MemoryBackend

STORE = "orbit-erp-records"


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> LocalRecordStore:
    return LocalRecordStore(backend, store_name=STORE)


def test_writes_preserve_other_partitions(store: LocalRecordStore, backend: MemoryBackend) -> None:
    """Writing one module's records leaves other modules' entries intact."""
    store.write_all("finance.transactions", [{"id": "tx-1"}, {"id": "tx-2"}])
    store.write_all("warehouse.movements", [{"id": "mv-1"}])
    store.prepend("warehouse.movements", {"id": "mv-2"})
    store.remove("finance.transactions", "tx-1")

    assert store.read("finance.transactions") == [{"id": "tx-2"}]
    assert [r["id"] for r in store.read("warehouse.movements")] == ["mv-2", "mv-1"]

    entries = json.loads(backend.get(STORE))
    assert {e["module_key"] for e in entries} == {"finance.transactions", "warehouse.movements"}
    assert all(set(e) == {"entity_id", "module_key", "record"} for e in entries)


@pytest.mark.parametrize("blob", ["{not json", json.dumps({"a": 1}), json.dumps("text"), ""])
def test_corrupt_blob_reads_as_empty(blob: str) -> None:
    """Unparsable or non-list blobs read as an empty store."""
    store = LocalRecordStore(MemoryBackend({STORE: blob}), store_name=STORE)
    assert store.read("finance.transactions") == []


def test_malformed_entries_are_skipped() -> None:
    """Entries without a module key or record object are ignored."""
    blob = json.dumps(
        [
            {"entity_id": "tx-1", "module_key": "finance.transactions", "record": {"id": "tx-1"}},
            {"entity_id": "tx-2", "module_key": "finance.transactions", "record": "oops"},
            {"entity_id": "tx-3"},
            "stray",
        ]
    )
    store = LocalRecordStore(MemoryBackend({STORE: blob}), store_name=STORE)
    assert store.read("finance.transactions") == [{"id": "tx-1"}]


def test_read_returns_copies(store: LocalRecordStore) -> None:
    """Mutating a read result does not change the store."""
    store.write_all("finance.transactions", [{"id": "tx-1", "amount": 1}])
    store.read("finance.transactions")[0]["amount"] = 99
    assert store.get("finance.transactions", "tx-1")["amount"] == 1


def test_prepend_generates_id_and_replaces_duplicates(store: LocalRecordStore) -> None:
    """prepend assigns an id when missing and never stores the same id twice."""
    created = store.prepend("finance.transactions", {"amount": 5}, id_prefix="tx")
    assert created["id"].startswith("tx-")
    store.prepend("finance.transactions", {"id": created["id"], "amount": 6})
    records = store.read("finance.transactions")
    assert len(records) == 1
    assert records[0]["amount"] == 6


def test_patch_missing_id_leaves_store_unchanged(store: LocalRecordStore, backend: MemoryBackend) -> None:
    """Patching an unknown id returns None and writes nothing."""
    store.write_all("finance.transactions", [{"id": "tx-1", "amount": 1}])
    before = backend.get(STORE)
    assert store.patch("finance.transactions", "tx-404", {"amount": 2}) is None
    assert backend.get(STORE) == before


def test_patch_merges_changes(store: LocalRecordStore) -> None:
    """patch merges into the stored record and keeps its id."""
    store.write_all("finance.transactions", [{"id": "tx-1", "amount": 1, "notes": "a"}])
    updated = store.patch("finance.transactions", "tx-1", {"amount": 2, "id": "other"})
    assert updated == {"id": "tx-1", "amount": 2, "notes": "a"}


def test_remove_is_idempotent(store: LocalRecordStore) -> None:
    """Removing an unknown id is not an error."""
    store.write_all("finance.transactions", [{"id": "tx-1"}])
    assert store.remove("finance.transactions", "tx-1") is True
    assert store.remove("finance.transactions", "tx-1") is False
    assert store.read("finance.transactions") == []


def test_seed_happens_once(store: LocalRecordStore) -> None:
    """Seeds are written on first use only; deleted seeds do not come back."""
    seeds = [{"id": "mv-1"}, {"id": "mv-2"}]
    assert store.seed("warehouse.movements", seeds) is True
    assert store.is_seeded("warehouse.movements")
    store.remove("warehouse.movements", "mv-1")
    assert store.seed("warehouse.movements", seeds) is False
    assert store.read("warehouse.movements") == [{"id": "mv-2"}]


def test_seed_keeps_existing_records_first(store: LocalRecordStore) -> None:
    """Records mirrored before seeding stay ahead of the seeds."""
    store.prepend("warehouse.movements", {"id": "mv-9"})
    store.seed("warehouse.movements", [{"id": "mv-1"}, {"id": "mv-9", "stale": True}])
    assert store.read("warehouse.movements") == [{"id": "mv-9"}, {"id": "mv-1"}]


def test_unavailable_store_is_empty_and_ignores_writes() -> None:
    """Without a backend reads are empty, writes are no-ops and prepend still returns a record."""
    store = LocalRecordStore(None)
    assert store.available is False
    created = store.prepend("finance.transactions", {"amount": 1}, id_prefix="tx")
    assert created["id"].startswith("tx-")
    assert store.read("finance.transactions") == []
    assert store.seed("finance.transactions", [{"id": "tx-1"}]) is False


def test_backend_write_failure_is_logged_not_raised() -> None:
    """A failing backend write does not propagate."""
    backend = MagicMock()
    backend.get.return_value = None
    backend.set.side_effect = OSError("disk full")
    store = LocalRecordStore(backend, store_name=STORE)
    store.write_all("finance.transactions", [{"id": "tx-1"}])
    backend.set.assert_called_once()


def test_json_file_backend_round_trip(tmp_path: Path) -> None:
    """The file backend persists across store instances."""
    path = tmp_path / "nested" / "store.json"
    LocalRecordStore(JsonFileBackend(path), store_name=STORE).write_all("finance.transactions", [{"id": "tx-1"}])
    assert path.is_file()
    reopened = LocalRecordStore(JsonFileBackend(path), store_name=STORE)
    assert reopened.read("finance.transactions") == [{"id": "tx-1"}]


def test_json_file_backend_tolerates_corrupt_file(tmp_path: Path) -> None:
    """A corrupt store file reads as empty and is overwritten on the next write."""
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    store = LocalRecordStore(JsonFileBackend(path), store_name=STORE)
    assert store.read("finance.transactions") == []
    store.prepend("finance.transactions", {"id": "tx-1"})
    assert store.read("finance.transactions") == [{"id": "tx-1"}]
