"""
Record repository: list/create/update/delete for one entity kind across tiers.

Tiers are tried in priority order (primary remote, managed store, local store).
A remote failure degrades the repository for good and the same call is
completed against the next tier, so callers get a result instead of an error.
Writes that succeed remotely are mirrored into the local store so the fallback
view keeps showing them.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Protocol

from erp_data.domains.entities.schema import EntitySchema
from erp_data.domains.records.ids import generate_id, utc_now_iso
from erp_data.domains.records.mapping import (
    normalize_changes,
    strip_undefined,
    to_canonical,
    to_wire_format,
)
from erp_data.infrastructure.data.errors import (
    ManagedStoreError,
    RecordSourceError,
    RemoteApplicationError,
    RemoteNotFoundError,
    RemoteTransportError,
)
from erp_data.infrastructure.data.events import (
    DEGRADED,
    FALLBACK,
    MIRROR,
    SEEDED,
    TIER_FAILED,
    UNRECOGNIZED_SHAPE,
    EventSink,
    LoggingEventSink,
    RepositoryEvent,
)
from erp_data.infrastructure.data.repositories.source_selector import (
    READ,
    WRITE,
    DegradationState,
    SourceSelector,
    SourceTier,
)
from erp_data.infrastructure.data.sources.envelope import ensure_success, unwrap_collection, unwrap_record
from erp_data.infrastructure.storage.local_store import LocalRecordStore

Record = dict[str, Any]
RemoteRequest = Callable[..., Awaitable[Any]]

_SERVER_OWNED = ("id", "created_at", "updated_at")


class ManagedStore(Protocol):
    async def select(self, table: str) -> list[dict[str, Any]]: ...

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any] | None: ...

    async def update(self, table: str, record_id: str, changes: dict[str, Any]) -> dict[str, Any] | None: ...

    async def delete(self, table: str, record_id: str) -> None: ...


class RecordRepository:
    """
    The only data-access entry point the UI layer uses for one entity kind.

    Args:
        schema: Entity schema (paths, mapping rules, seeds).
        local_store: Durable local store; always the last tier.
        request: Primary remote call, awaited as request(path, method=..., body=...).
            None disables the primary tier.
        managed_store: Managed store client; None disables that tier.
        state: Degradation state. Each repository owns its own by default.
        events: Sink for failure/fallback events; logs by default.
        strict_writes: Raise RemoteApplicationError on create/update when the
            service answers with an error, instead of falling back.
    """

    def __init__(
        self,
        schema: EntitySchema,
        *,
        local_store: LocalRecordStore,
        request: RemoteRequest | None = None,
        managed_store: ManagedStore | None = None,
        state: DegradationState | None = None,
        events: EventSink | None = None,
        strict_writes: bool = False,
    ) -> None:
        self._schema = schema
        self._store = local_store
        self._request = request
        self._managed = managed_store
        self._events = events if events is not None else LoggingEventSink()
        self._strict_writes = strict_writes
        tiers = []
        if request is not None:
            tiers.append(SourceTier.PRIMARY_REMOTE)
        if managed_store is not None:
            tiers.append(SourceTier.MANAGED_STORE)
        self._selector = SourceSelector(tiers, state)

    @property
    def schema(self) -> EntitySchema:
        return self._schema

    @property
    def state(self) -> DegradationState:
        return self._selector.state

    @property
    def degraded(self) -> bool:
        return self._selector.state.degraded

    @property
    def selector(self) -> SourceSelector:
        return self._selector

    def __repr__(self) -> str:
        return f"RecordRepository({self._schema.key!r}, {self.state!r})"

    # --- events and failures ---

    def _emit(self, kind: str, operation: str, tier: SourceTier | None = None, detail: str = "") -> None:
        self._events.emit(
            RepositoryEvent(
                kind=kind,
                entity=self._schema.key,
                operation=operation,
                tier=tier.label if tier else None,
                detail=detail,
            )
        )

    def _tier_failed(self, tier: SourceTier, operation: str, error: Exception) -> None:
        self._emit(TIER_FAILED, operation, tier, str(error))
        if self._selector.record_failure(tier, str(error)):
            self._emit(DEGRADED, operation, tier, "primary tiers skipped for the rest of the session")

    def _raise_if_strict(self, error: RecordSourceError) -> None:
        if self._strict_writes and isinstance(error, RemoteApplicationError):
            raise error

    # --- tier calls ---

    async def _call_remote(self, path: str, method: str, body: Any = None) -> Any:
        if self._request is None:
            raise RecordSourceError("Primary remote is not configured", tier=SourceTier.PRIMARY_REMOTE.label)
        try:
            if body is None:
                payload = await self._request(path, method=method)
            else:
                payload = await self._request(path, method=method, body=body)
        except RecordSourceError:
            raise
        except Exception as e:
            raise RemoteTransportError(str(e) or type(e).__name__, tier=SourceTier.PRIMARY_REMOTE.label, original=e) from e
        return ensure_success(payload)

    async def _call_managed(self, action: str, *args: Any) -> Any:
        if self._managed is None:
            raise RecordSourceError("Managed store is not configured", tier=SourceTier.MANAGED_STORE.label)
        try:
            return await getattr(self._managed, action)(self._schema.table, *args)
        except RecordSourceError:
            raise
        except Exception as e:
            raise ManagedStoreError(str(e) or type(e).__name__, tier=SourceTier.MANAGED_STORE.label, original=e) from e

    def _local(self) -> LocalRecordStore:
        """The local store, seeded with the entity's mock records on first use."""
        if self._schema.seed and self._store.seed(self._schema.store_key, self._schema.seed):
            self._emit(SEEDED, "seed", SourceTier.LOCAL_STORE, f"{len(self._schema.seed)} records")
        return self._store

    def _canonical(self, raw: Any) -> Record:
        return to_canonical(raw, self._schema)

    def _mirror(self, operation: str, record: Record, prepend: bool) -> None:
        store = self._local()
        if prepend:
            store.prepend(self._schema.store_key, record, self._schema.id_prefix)
        else:
            store.patch(self._schema.store_key, str(record["id"]), record)
        self._emit(MIRROR, operation, SourceTier.LOCAL_STORE, str(record.get("id", "")))

    # --- list ---

    async def _list_remote(self) -> list[Record]:
        payload = await self._call_remote(self._schema.list_path(), "GET")
        items = unwrap_collection(payload, self._schema.collection_key)
        if items is None:
            kind = type(payload).__name__
            keys = sorted(payload)[:10] if isinstance(payload, Mapping) else []
            self._emit(UNRECOGNIZED_SHAPE, "list", SourceTier.PRIMARY_REMOTE, f"{kind} keys={keys}")
            return []
        return [self._canonical(item) for item in items if isinstance(item, Mapping)]

    async def _list_managed(self) -> list[Record]:
        rows = await self._call_managed("select")
        return [self._canonical(row) for row in rows or []]

    def _list_local(self) -> list[Record]:
        return [self._canonical(r) for r in self._local().read(self._schema.store_key)]

    async def list(self) -> list[Record]:
        """
        All records from the most authoritative tier that answers.

        Never raises for tier failures. Order is whatever the answering tier
        returns; the local store keeps newest first.
        """
        failed = False
        for tier in self._selector.tiers_for(READ):
            try:
                if tier is SourceTier.PRIMARY_REMOTE:
                    records = await self._list_remote()
                elif tier is SourceTier.MANAGED_STORE:
                    records = await self._list_managed()
                else:
                    records = self._list_local()
            except RecordSourceError as e:
                self._tier_failed(tier, "list", e)
                failed = True
                continue
            if failed:
                self._emit(FALLBACK, "list", tier, f"{len(records)} records")
            return records
        return []

    # --- create ---

    async def _create_remote(self, partial: Record) -> Record:
        body = to_wire_format(partial, self._schema)
        payload = await self._call_remote(self._schema.remote_path, "POST", body)
        raw = unwrap_record(payload, self._schema.record_key) or {}
        record = self._canonical({**partial, **raw})
        self._mirror("create", record, prepend=True)
        return record

    async def _create_managed(self, partial: Record) -> Record:
        row = await self._call_managed("insert", strip_undefined(partial, drop=_SERVER_OWNED))
        record = self._canonical({**partial, **(row or {})})
        self._mirror("create", record, prepend=True)
        return record

    def _create_local(self, partial: Record) -> Record:
        raw = {
            **partial,
            "id": partial.get("id") or generate_id(self._schema.id_prefix),
            "created_at": utc_now_iso(),
        }
        record = self._canonical(raw)
        self._local().prepend(self._schema.store_key, record, self._schema.id_prefix)
        return record

    async def create(self, partial: Mapping[str, Any]) -> Record:
        """
        Create a record.

        Falls back tier by tier; the local store always completes the call with a
        generated id. With strict_writes, a service-reported error is raised.
        """
        data = normalize_changes(dict(partial), self._schema)
        failed = False
        for tier in self._selector.tiers_for(WRITE):
            try:
                if tier is SourceTier.PRIMARY_REMOTE:
                    record = await self._create_remote(data)
                elif tier is SourceTier.MANAGED_STORE:
                    record = await self._create_managed(data)
                else:
                    record = self._create_local(data)
            except RecordSourceError as e:
                self._raise_if_strict(e)
                self._tier_failed(tier, "create", e)
                failed = True
                continue
            if failed:
                self._emit(FALLBACK, "create", tier, str(record.get("id", "")))
            return record
        return self._create_local(data)

    # --- update ---

    async def _update_remote(self, record_id: str, changes: Record) -> Record:
        body = to_wire_format(changes, self._schema)
        payload = await self._call_remote(self._schema.item_path(record_id), "PUT", body)
        raw = unwrap_record(payload, self._schema.record_key) or {}
        base = self._local().get(self._schema.store_key, record_id) or {"id": record_id}
        record = self._canonical({**base, **changes, **raw, "id": raw.get("id", record_id)})
        self._mirror("update", record, prepend=False)
        return record

    async def _update_managed(self, record_id: str, changes: Record) -> Record | None:
        row = await self._call_managed("update", record_id, strip_undefined(changes, drop=_SERVER_OWNED))
        if row is None:
            return None
        record = self._canonical(row)
        self._mirror("update", record, prepend=False)
        return record

    def _update_local(self, record_id: str, changes: Record) -> Record | None:
        stored = self._local().patch(self._schema.store_key, record_id, {**changes, "updated_at": utc_now_iso()})
        return self._canonical(stored) if stored is not None else None

    async def update(self, record_id: str, changes: Mapping[str, Any]) -> Record | None:
        """
        Apply changed keys to a record; only those keys are sent.

        Returns:
            The updated record, or None when the active tier has no such id.
        """
        record_id = str(record_id)
        data = normalize_changes({k: v for k, v in changes.items() if k != "id"}, self._schema)
        failed = False
        for tier in self._selector.tiers_for(WRITE):
            try:
                if tier is SourceTier.PRIMARY_REMOTE:
                    record = await self._update_remote(record_id, data)
                elif tier is SourceTier.MANAGED_STORE:
                    record = await self._update_managed(record_id, data)
                else:
                    record = self._update_local(record_id, data)
            except RemoteNotFoundError:
                return None
            except RecordSourceError as e:
                self._raise_if_strict(e)
                self._tier_failed(tier, "update", e)
                failed = True
                continue
            if failed:
                self._emit(FALLBACK, "update", tier, record_id)
            return record
        return None

    # --- delete ---

    async def delete(self, record_id: str) -> None:
        """
        Delete a record. Idempotent: unknown ids are not an error.

        The local copy is removed whichever tier handled the call.
        """
        record_id = str(record_id)
        for tier in self._selector.tiers_for(WRITE):
            try:
                if tier is SourceTier.PRIMARY_REMOTE:
                    await self._call_remote(self._schema.item_path(record_id), "DELETE")
                elif tier is SourceTier.MANAGED_STORE:
                    await self._call_managed("delete", record_id)
            except RemoteNotFoundError:
                pass
            except RecordSourceError as e:
                self._tier_failed(tier, "delete", e)
                continue
            break
        self._local().remove(self._schema.store_key, record_id)
