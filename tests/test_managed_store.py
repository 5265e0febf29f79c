"""
Tests for SupabaseManagedStore with a mocked supabase client.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from erp_data.infrastructure.data.errors import ManagedStoreError
from erp_data.infrastructure.data.sources.managed_store import SupabaseManagedStore, create_supabase_client


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


def test_select_returns_rows(client: MagicMock) -> None:
    """select reads every row of the table."""
    client.table.return_value.select.return_value.execute.return_value = SimpleNamespace(data=[{"id": 1}, {"id": 2}])
    store = SupabaseManagedStore(client)

    rows = asyncio.run(store.select("finance_transactions"))

    assert rows == [{"id": 1}, {"id": 2}]
    client.table.assert_called_with("finance_transactions")
    client.table.return_value.select.assert_called_with("*")


def test_insert_returns_first_row(client: MagicMock) -> None:
    """insert returns the stored row."""
    client.table.return_value.insert.return_value.execute.return_value = SimpleNamespace(data=[{"id": 9, "amount": 1}])
    store = SupabaseManagedStore(client)

    row = asyncio.run(store.insert("finance_transactions", {"amount": 1}))

    assert row == {"id": 9, "amount": 1}
    client.table.return_value.insert.assert_called_with({"amount": 1})


def test_update_filters_by_id(client: MagicMock) -> None:
    """update targets one id and returns None when no row matched."""
    chain = client.table.return_value.update.return_value.eq.return_value
    chain.execute.return_value = SimpleNamespace(data=[])
    store = SupabaseManagedStore(client)

    assert asyncio.run(store.update("shifts", "sh-1", {"role": "Lead"})) is None
    client.table.return_value.update.assert_called_with({"role": "Lead"})
    client.table.return_value.update.return_value.eq.assert_called_with("id", "sh-1")


def test_delete_filters_by_id(client: MagicMock) -> None:
    store = SupabaseManagedStore(client)
    asyncio.run(store.delete("shifts", "sh-1"))
    client.table.return_value.delete.return_value.eq.assert_called_with("id", "sh-1")


def test_client_errors_become_managed_store_errors(client: MagicMock) -> None:
    """Any client exception is re-raised as ManagedStoreError naming table and action."""
    client.table.return_value.select.return_value.execute.side_effect = RuntimeError("relation does not exist")
    store = SupabaseManagedStore(client)

    with pytest.raises(ManagedStoreError) as exc:
        asyncio.run(store.select("stock_movements"))
    assert "select on stock_movements" in str(exc.value)
    assert isinstance(exc.value.original, RuntimeError)


def test_create_client_requires_credentials() -> None:
    """No client is created without a URL and key."""
    with patch("erp_data.infrastructure.data.sources.managed_store.supabase_url", return_value=None), patch(
        "erp_data.infrastructure.data.sources.managed_store.supabase_key", return_value=None
    ), patch("erp_data.infrastructure.data.sources.managed_store.create_client") as mock_create:
        assert create_supabase_client() is None
    mock_create.assert_not_called()


def test_create_client_with_credentials() -> None:
    with patch("erp_data.infrastructure.data.sources.managed_store.create_client") as mock_create:
        result = create_supabase_client("https://abc.supabase.co", "anon-key")
    mock_create.assert_called_once_with("https://abc.supabase.co", "anon-key")
    assert result is mock_create.return_value
