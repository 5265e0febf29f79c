"""
Tests for response envelope handling: collection shapes, single records, success flag.
"""

from __future__ import annotations

import pytest

from erp_data.infrastructure.data.errors import RemoteApplicationError
from erp_data.infrastructure.data.sources.envelope import (
    detect_shape,
    ensure_success,
    unwrap_collection,
    unwrap_record,
)

ITEMS = [{"id": 1}, {"id": 2}]


@pytest.mark.parametrize(
    "payload, shape",
    [
        (ITEMS, "bare_list"),
        ({"success": True, "data": ITEMS}, "data_list"),
        ({"data": {"movements": ITEMS, "total": 2}}, "data_named_list"),
        ({"movements": ITEMS}, "named_list"),
        ({"data": {"data": ITEMS, "page": 1}}, "data_data_list"),
        ({"data": {"items": ITEMS}}, "data_generic_list"),
        ({"data": {"results": ITEMS}}, "data_generic_list"),
    ],
)
def test_collection_shapes(payload, shape: str) -> None:
    """Every accepted envelope shape yields the same items."""
    assert detect_shape(payload, "movements").name == shape
    assert unwrap_collection(payload, "movements") == ITEMS


def test_named_list_needs_matching_key() -> None:
    """A named list under a different key is not the entity's collection."""
    assert unwrap_collection({"transactions": ITEMS}, "movements") is None


@pytest.mark.parametrize("payload", [{"data": {"total": 0}}, {"message": "ok"}, "text", None, 42])
def test_unrecognized_shapes_return_none(payload) -> None:
    """Unknown shapes are reported as None, not as an empty list."""
    assert unwrap_collection(payload, "movements") is None


def test_unwrap_collection_returns_a_copy() -> None:
    """The returned list is not the payload's own list."""
    payload = {"data": ITEMS}
    items = unwrap_collection(payload)
    items.append({"id": 3})
    assert len(payload["data"]) == 2


def test_ensure_success_raises_on_explicit_failure() -> None:
    """success: false becomes a RemoteApplicationError carrying the message."""
    payload = {"success": False, "message": "Validation failed"}
    with pytest.raises(RemoteApplicationError) as exc:
        ensure_success(payload)
    assert str(exc.value) == "Validation failed"
    assert exc.value.payload == payload


def test_ensure_success_passes_other_payloads() -> None:
    """Payloads without success: false pass through unchanged."""
    assert ensure_success(ITEMS) is ITEMS
    assert ensure_success({"data": []}) == {"data": []}
    assert ensure_success({"success": True}) == {"success": True}


@pytest.mark.parametrize(
    "payload",
    [
        {"success": True, "data": {"id": 5, "amount": 1}},
        {"data": {"transaction": {"id": 5, "amount": 1}}},
        {"data": [{"id": 5, "amount": 1}]},
        {"transaction": {"id": 5, "amount": 1}},
        {"success": True, "id": 5, "amount": 1},
    ],
)
def test_unwrap_record_shapes(payload) -> None:
    """Single-record responses unwrap to the record itself."""
    assert unwrap_record(payload, "transaction") == {"id": 5, "amount": 1}


def test_unwrap_record_empty_bodies() -> None:
    """Empty or non-record bodies have no record."""
    assert unwrap_record({}, "transaction") is None
    assert unwrap_record({"success": True, "message": "deleted"}, "transaction") is None
    assert unwrap_record({"data": []}, "transaction") is None
    assert unwrap_record([{"id": 1}], "transaction") is None
