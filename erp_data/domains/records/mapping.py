"""
Record mapper: remote payloads <-> canonical records.

Canonical records are plain dicts. `to_canonical` is total: every required field
of the entity resolves to a value, optional fields that resolve to None are
left out, and nothing raises. `to_wire_format` only emits keys present in the
canonical partial and never emits None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping

from erp_data.utils.logger import get_logger

if TYPE_CHECKING:
    from erp_data.domains.entities.schema import EntitySchema

logger = get_logger()

Derivation = Callable[[Mapping[str, Any], Mapping[str, Any]], Any]


@dataclass(frozen=True)
class MappingRule:
    """
    How one canonical field is populated.

    sources: candidate paths tried in order ("warehouse.name" walks nested
        objects). The first value that is not None and survives `coerce` wins.
    default: value used when no candidate matches, or a derivation called as
        default(raw, record_so_far).
    """

    target: str
    sources: tuple[str, ...]
    default: Any = None
    coerce: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class WireRule:
    """Canonical field `source` is sent as remote field `target`, optionally transformed."""

    target: str
    source: str
    transform: Callable[[Any], Any] | None = None


def rule(target: str, *aliases: str, default: Any = None, coerce: Callable[[Any], Any] | None = None) -> MappingRule:
    """Mapping rule whose first candidate is the canonical name itself."""
    return MappingRule(target=target, sources=(target, *aliases), default=default, coerce=coerce)


def passthrough(*fields: str) -> tuple[WireRule, ...]:
    return tuple(WireRule(target=f, source=f) for f in fields)


def resolve_path(raw: Mapping[str, Any], path: str) -> Any:
    current: Any = raw
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def _resolve_schema(schema: "EntitySchema | str") -> "EntitySchema":
    if isinstance(schema, str):
        from erp_data.domains.entities.registry import get_schema

        return get_schema(schema)
    return schema


def apply_rule(r: MappingRule, raw: Mapping[str, Any], record: Mapping[str, Any]) -> Any:
    for path in r.sources:
        value = resolve_path(raw, path)
        if value is None:
            continue
        if r.coerce is not None:
            value = r.coerce(value)
        if value is not None:
            return value
    if callable(r.default):
        try:
            return r.default(raw, record)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Default for field %s failed: %s", r.target, e)
            return None
    return r.default


def to_canonical(raw: Any, schema: "EntitySchema | str") -> dict[str, Any]:
    """
    Map a raw payload onto the entity's canonical shape.

    Args:
        raw: Payload from any tier. Non-mapping input is treated as empty.
        schema: Entity schema, or its registry key (e.g. "movements").

    Returns:
        New dict with every required field set.
    """
    schema = _resolve_schema(schema)
    source: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    record: dict[str, Any] = {}
    for r in schema.rules:
        value = apply_rule(r, source, record)
        if value is None and r.target not in schema.required:
            continue
        record[r.target] = value
    return record


def to_wire_format(partial: Mapping[str, Any], schema: "EntitySchema | str") -> dict[str, Any]:
    """
    Build a remote request body from a canonical partial.

    Only keys present in `partial` are sent; None values, and values a
    transform turns into None, are omitted.
    """
    schema = _resolve_schema(schema)
    out: dict[str, Any] = {}
    for w in schema.wire_rules:
        if w.source not in partial:
            continue
        value = partial[w.source]
        if value is None:
            continue
        if w.transform is not None:
            try:
                value = w.transform(value)
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Wire transform for %s failed: %s", w.source, e)
                continue
        if value is None:
            continue
        out.setdefault(w.target, value)
    return out


def strip_undefined(record: Mapping[str, Any], drop: Iterable[str] = ()) -> dict[str, Any]:
    """Copy without None values (and without `drop` keys)."""
    dropped = set(drop)
    return {k: v for k, v in record.items() if v is not None and k not in dropped}


def normalize_changes(changes: Mapping[str, Any], schema: "EntitySchema | str") -> dict[str, Any]:
    """
    Coerce only the keys a caller is changing.

    Keys without a mapping rule are kept as given; None values are kept so a
    caller can clear an optional field locally.
    """
    schema = _resolve_schema(schema)
    by_target = {r.target: r for r in schema.rules}
    out: dict[str, Any] = {}
    for key, value in changes.items():
        r = by_target.get(key)
        if r is None or value is None or r.coerce is None:
            out[key] = value
            continue
        coerced = r.coerce(value)
        out[key] = coerced if coerced is not None else value
    return out
