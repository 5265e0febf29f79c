"""
Tests for the repository factory: tier wiring from configuration and per-session caching.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from erp_data.infrastructure.data.repositories.source_selector import SourceTier
from erp_data.infrastructure.storage.local_store import JsonFileBackend, LocalRecordStore, MemoryBackend
from erp_data.services import repositories

MODULE = "erp_data.services.repositories"


@pytest.fixture(autouse=True)
def fresh_session():
    repositories.reset_repositories(keep_local_data=False)
    yield
    repositories.reset_repositories(keep_local_data=False)


def test_primary_tier_when_backend_enabled() -> None:
    with patch(f"{MODULE}.use_backend", return_value=True), patch(f"{MODULE}.has_supabase_config", return_value=True):
        repo = repositories.build_repository("transactions", local_store=LocalRecordStore(MemoryBackend()))
    assert repo.selector.configured == (SourceTier.PRIMARY_REMOTE, SourceTier.LOCAL_STORE)


def test_managed_store_when_backend_disabled() -> None:
    """With the primary service switched off, a configured Supabase project is used."""
    with patch(f"{MODULE}.use_backend", return_value=False), patch(
        f"{MODULE}.has_supabase_config", return_value=True
    ), patch(f"{MODULE}.create_supabase_client", return_value=MagicMock()):
        repo = repositories.build_repository("movements", local_store=LocalRecordStore(MemoryBackend()))
    assert repo.selector.configured == (SourceTier.MANAGED_STORE, SourceTier.LOCAL_STORE)


def test_local_only_without_any_remote() -> None:
    with patch(f"{MODULE}.use_backend", return_value=False), patch(f"{MODULE}.has_supabase_config", return_value=False):
        repo = repositories.build_repository("shifts", local_store=LocalRecordStore(MemoryBackend()))
    assert repo.selector.configured == (SourceTier.LOCAL_STORE,)


def test_unknown_entity_raises_key_error() -> None:
    with pytest.raises(KeyError):
        repositories.build_repository("invoices")


def test_get_repository_is_cached_per_session() -> None:
    """One repository per entity kind until the session is reset."""
    with patch(f"{MODULE}.use_backend", return_value=False), patch(f"{MODULE}.has_supabase_config", return_value=False):
        first = repositories.get_repository("transactions")
        assert repositories.get_repository("transactions") is first
        assert repositories.get_repository("movements") is not first
        repositories.reset_repositories()
        assert repositories.get_repository("transactions") is not first


def test_repositories_share_the_local_store() -> None:
    with patch(f"{MODULE}.use_backend", return_value=False), patch(f"{MODULE}.has_supabase_config", return_value=False):
        a = repositories.build_repository("transactions")
        b = repositories.build_repository("movements")
    assert a._store is b._store


@pytest.mark.parametrize("mode, backend_type", [("memory", MemoryBackend), ("file", JsonFileBackend)])
def test_build_local_store_modes(mode: str, backend_type: type, tmp_path) -> None:
    with patch(f"{MODULE}.local_store_mode", return_value=mode), patch(
        f"{MODULE}.local_store_path", return_value=tmp_path / "store.json"
    ):
        store = repositories.build_local_store()
    assert isinstance(store._backend, backend_type)


def test_build_local_store_off() -> None:
    with patch(f"{MODULE}.local_store_mode", return_value="off"):
        store = repositories.build_local_store()
    assert store.available is False
