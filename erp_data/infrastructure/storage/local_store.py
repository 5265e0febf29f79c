"""
Durable local store: every module's records in one keyed JSON blob.

The blob is a list of entries `{"entity_id", "module_key", "record"}`. Entries of
all modules share the blob, so every write re-reads it and replaces only the
partition being written. Reads never raise: a missing, unparsable or non-list
blob is an empty store.

Without a backend the store is unavailable: reads are empty and writes no-op.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Protocol

from erp_data.domains.records.ids import generate_id
from erp_data.utils.logger import get_logger

logger = get_logger()


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryBackend:
    """Process-scoped string store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileBackend:
    """String store persisted as one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Local store file unreadable at %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)


class LocalRecordStore:
    """
    Partitioned record collections kept in a single blob.

    Args:
        backend: Key/value persistence. None means no durable storage is
            available; the store then behaves as always-empty.
        store_name: Key of the blob holding every module's entries.
    """

    def __init__(self, backend: KeyValueBackend | None, store_name: str = "orbit-erp-records") -> None:
        self._backend = backend
        self._store_name = store_name

    @property
    def available(self) -> bool:
        return self._backend is not None

    @property
    def store_name(self) -> str:
        return self._store_name

    @property
    def _seeded_key(self) -> str:
        return f"{self._store_name}:seeded"

    # --- raw blob access ---

    def _load_json(self, key: str) -> Any:
        if self._backend is None:
            return None
        try:
            raw = self._backend.get(key)
        except OSError as e:
            logger.warning("Local store read failed for %s: %s", key, e)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Local store blob %s is not valid JSON; treating as empty", key)
            return None

    def _save_json(self, key: str, value: Any) -> None:
        if self._backend is None:
            return
        try:
            self._backend.set(key, json.dumps(value, ensure_ascii=False, default=str))
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Local store write failed for %s: %s", key, e)

    def _entries(self) -> list[dict[str, Any]]:
        data = self._load_json(self._store_name)
        if not isinstance(data, list):
            return []
        return [
            e for e in data
            if isinstance(e, dict) and isinstance(e.get("module_key"), str) and isinstance(e.get("record"), dict)
        ]

    def _save_partition(self, module_key: str, records: Iterable[dict[str, Any]]) -> None:
        others = [e for e in self._entries() if e["module_key"] != module_key]
        mine = [
            {"entity_id": str(r.get("id", "")), "module_key": module_key, "record": dict(r)}
            for r in records
        ]
        self._save_json(self._store_name, others + mine)

    # --- public API ---

    def read(self, module_key: str) -> list[dict[str, Any]]:
        """Records of one module, in stored order. Never raises."""
        return [dict(e["record"]) for e in self._entries() if e["module_key"] == module_key]

    def get(self, module_key: str, record_id: str) -> dict[str, Any] | None:
        for record in self.read(module_key):
            if str(record.get("id")) == str(record_id):
                return record
        return None

    def write_all(self, module_key: str, records: Iterable[dict[str, Any]]) -> None:
        """Replace one module's records; other modules' entries are preserved."""
        self._save_partition(module_key, list(records))

    def prepend(self, module_key: str, record: dict[str, Any], id_prefix: str = "") -> dict[str, Any]:
        """
        Insert a record at the front of its partition (most recent first).

        A record without an id gets a generated one. An existing entry with the
        same id is replaced rather than duplicated.
        """
        record = dict(record)
        if not record.get("id"):
            record["id"] = generate_id(id_prefix)
        rid = str(record["id"])
        current = [r for r in self.read(module_key) if str(r.get("id")) != rid]
        self._save_partition(module_key, [record] + current)
        return dict(record)

    def patch(self, module_key: str, record_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        """
        Merge changes into the stored record with that id.

        Returns:
            The new record value, or None when the id is not stored (store unchanged).
        """
        current = self.read(module_key)
        for index, record in enumerate(current):
            if str(record.get("id")) == str(record_id):
                updated = {**record, **changes, "id": record.get("id")}
                current[index] = updated
                self._save_partition(module_key, current)
                return dict(updated)
        return None

    def remove(self, module_key: str, record_id: str) -> bool:
        """Delete the record with that id. Missing ids are not an error."""
        current = self.read(module_key)
        kept = [r for r in current if str(r.get("id")) != str(record_id)]
        if len(kept) == len(current):
            return False
        self._save_partition(module_key, kept)
        return True

    def is_seeded(self, module_key: str) -> bool:
        seeded = self._load_json(self._seeded_key)
        return isinstance(seeded, list) and module_key in seeded

    def seed(self, module_key: str, records: Iterable[dict[str, Any]]) -> bool:
        """
        Write seed records the first time a partition is used.

        Records already in the partition (e.g. mirrored writes) are kept ahead of
        the seeds. Returns True when seeding happened.
        """
        if self._backend is None or self.is_seeded(module_key):
            return False
        existing = self.read(module_key)
        ids = {str(r.get("id")) for r in existing}
        seeds = [dict(r) for r in records if str(r.get("id")) not in ids]
        self._save_partition(module_key, existing + seeds)
        seeded = self._load_json(self._seeded_key)
        seeded = [k for k in seeded if isinstance(k, str)] if isinstance(seeded, list) else []
        self._save_json(self._seeded_key, seeded + [module_key])
        logger.info("Seeded local store partition %s with %d records", module_key, len(seeds))
        return True
