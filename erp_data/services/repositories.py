"""
Repository factory: wires one RecordRepository per entity kind from configuration.

One process is one session: repositories are cached, so a tier that failed stays
skipped until reset_repositories() is called.
"""

from __future__ import annotations

from erp_data.domains.entities.registry import get_schema
from erp_data.infrastructure.data.events import EventSink
from erp_data.infrastructure.data.repositories.record_repository import RecordRepository
from erp_data.infrastructure.data.sources.api_client import RemoteApiClient
from erp_data.infrastructure.data.sources.managed_store import SupabaseManagedStore, create_supabase_client
from erp_data.infrastructure.storage.local_store import JsonFileBackend, LocalRecordStore, MemoryBackend
from erp_data.utils.config import (
    has_supabase_config,
    local_store_key,
    local_store_mode,
    local_store_path,
    log_level,
    use_backend,
)
from erp_data.utils.logger import setup_logger

logger = setup_logger(level=log_level())

_repositories: dict[str, RecordRepository] = {}
_local_store: LocalRecordStore | None = None


def build_local_store() -> LocalRecordStore:
    """Local store per ERP_LOCAL_STORE: memory (default), file, or off (unavailable)."""
    mode = local_store_mode()
    if mode == "file":
        backend = JsonFileBackend(local_store_path())
    elif mode == "off":
        backend = None
    else:
        backend = MemoryBackend()
    logger.info("Local store: %s (%s)", mode, local_store_key())
    return LocalRecordStore(backend, store_name=local_store_key())


def shared_local_store() -> LocalRecordStore:
    global _local_store
    if _local_store is None:
        _local_store = build_local_store()
    return _local_store


def build_remote_client() -> RemoteApiClient | None:
    """Primary remote client, or None when ERP_USE_BACKEND is off."""
    if not use_backend():
        return None
    return RemoteApiClient()


def build_managed_store() -> SupabaseManagedStore | None:
    """Managed store, only when the primary service is off and Supabase is configured."""
    if use_backend() or not has_supabase_config():
        return None
    client = create_supabase_client()
    return SupabaseManagedStore(client) if client is not None else None


def build_repository(
    entity_key: str,
    *,
    local_store: LocalRecordStore | None = None,
    events: EventSink | None = None,
    strict_writes: bool = False,
) -> RecordRepository:
    """
    New repository for one entity kind, with its own degradation state.

    Raises:
        KeyError: If entity_key is not a known entity kind.
    """
    schema = get_schema(entity_key)
    remote = build_remote_client()
    managed = build_managed_store()
    repo = RecordRepository(
        schema,
        local_store=local_store or shared_local_store(),
        request=remote.request if remote is not None else None,
        managed_store=managed,
        events=events,
        strict_writes=strict_writes,
    )
    logger.info(
        "Repository %s tiers: %s",
        entity_key,
        ", ".join(t.label for t in repo.selector.configured),
    )
    return repo


def get_repository(entity_key: str) -> RecordRepository:
    """Cached repository for this session."""
    if entity_key not in _repositories:
        _repositories[entity_key] = build_repository(entity_key)
    return _repositories[entity_key]


def reset_repositories(*, keep_local_data: bool = True) -> None:
    """Drop cached repositories so the next call starts nominal again."""
    global _local_store
    _repositories.clear()
    if not keep_local_data:
        _local_store = None
