"""Entity schema: everything a repository needs to know about one entity kind."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from erp_data.domains.records.mapping import MappingRule, WireRule


@dataclass(frozen=True)
class EntitySchema:
    """
    key: registry key, e.g. "transactions".
    module: owning business module ("finance", "warehouse", "workforce").
    id_prefix: prefix of locally generated ids ("tx" -> "tx-k3f9a0").
    remote_path / list_query: primary service collection path and list query string.
    collection_key / record_key: names the service uses to wrap lists and single records.
    table: managed store table name.
    """

    key: str
    module: str
    id_prefix: str
    remote_path: str
    collection_key: str
    record_key: str
    table: str
    required: frozenset[str]
    rules: tuple[MappingRule, ...]
    wire_rules: tuple[WireRule, ...]
    list_query: str = ""
    seed: tuple[dict[str, Any], ...] = field(default_factory=tuple)

    @property
    def store_key(self) -> str:
        """Partition key in the local store."""
        return f"{self.module}.{self.key}"

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(r.target for r in self.rules)

    def item_path(self, record_id: str) -> str:
        return f"{self.remote_path}/{record_id}"

    def list_path(self) -> str:
        return self.remote_path + self.list_query
