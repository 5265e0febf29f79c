"""
Response envelope handling for the primary records service.

The service is not consistent about where a collection lives in a response:
sometimes a bare array, sometimes under `data`, sometimes under a named key
(`data.movements`, `transactions`), occasionally double-wrapped. Accepted shapes
are an ordered list of detectors, each a pure predicate plus extractor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from erp_data.infrastructure.data.errors import RemoteApplicationError

_GENERIC_LIST_KEYS = ("items", "records", "results")


@dataclass(frozen=True)
class ShapeDetector:
    """One accepted collection shape. `matches` and `extract` get (payload, collection_key)."""

    name: str
    matches: Callable[[Any, str], bool]
    extract: Callable[[Any, str], list[Any]]


def _data(payload: Any) -> Any:
    return payload.get("data") if isinstance(payload, Mapping) else None


def _has_list(container: Any, key: str) -> bool:
    return isinstance(container, Mapping) and isinstance(container.get(key), list)


def _generic_key(payload: Any) -> str | None:
    data = _data(payload)
    for key in _GENERIC_LIST_KEYS:
        if _has_list(data, key):
            return key
    return None


SHAPE_DETECTORS: tuple[ShapeDetector, ...] = (
    ShapeDetector(
        name="bare_list",
        matches=lambda p, k: isinstance(p, list),
        extract=lambda p, k: p,
    ),
    ShapeDetector(
        name="data_list",
        matches=lambda p, k: _has_list(p, "data"),
        extract=lambda p, k: p["data"],
    ),
    ShapeDetector(
        name="data_named_list",
        matches=lambda p, k: bool(k) and _has_list(_data(p), k),
        extract=lambda p, k: p["data"][k],
    ),
    ShapeDetector(
        name="named_list",
        matches=lambda p, k: bool(k) and _has_list(p, k),
        extract=lambda p, k: p[k],
    ),
    ShapeDetector(
        name="data_data_list",
        matches=lambda p, k: _has_list(_data(p), "data"),
        extract=lambda p, k: p["data"]["data"],
    ),
    ShapeDetector(
        name="data_generic_list",
        matches=lambda p, k: _generic_key(p) is not None,
        extract=lambda p, k: p["data"][_generic_key(p)],
    ),
)


def ensure_success(payload: Any) -> Any:
    """
    Raise RemoteApplicationError when the envelope reports failure.

    Only an explicit `success: false` counts; bare arrays and envelopes without a
    `success` key pass through unchanged.
    """
    if isinstance(payload, Mapping) and payload.get("success") is False:
        message = payload.get("message") or payload.get("error") or "Remote service reported failure"
        raise RemoteApplicationError(str(message), payload=payload)
    return payload


def detect_shape(payload: Any, collection_key: str = "") -> ShapeDetector | None:
    for detector in SHAPE_DETECTORS:
        if detector.matches(payload, collection_key):
            return detector
    return None


def unwrap_collection(payload: Any, collection_key: str = "") -> list[Any] | None:
    """
    Return the record collection inside a list response.

    Returns:
        The list of raw items, or None when no detector recognizes the shape.
    """
    detector = detect_shape(payload, collection_key)
    if detector is None:
        return None
    return list(detector.extract(payload, collection_key))


def unwrap_record(payload: Any, record_key: str = "") -> dict[str, Any] | None:
    """
    Return the single record inside a create/update response, or None.

    Accepts `{"data": {...}}`, `{"data": {record_key: {...}}}`,
    `{record_key: {...}}` and a bare record mapping.
    """
    if not isinstance(payload, Mapping):
        return None
    data = payload.get("data")
    if isinstance(data, Mapping):
        nested = data.get(record_key) if record_key else None
        if isinstance(nested, Mapping):
            return dict(nested)
        return dict(data)
    if isinstance(data, list):
        first = data[0] if data else None
        return dict(first) if isinstance(first, Mapping) else None
    if record_key and isinstance(payload.get(record_key), Mapping):
        return dict(payload[record_key])
    body = {k: v for k, v in payload.items() if k not in ("success", "message")}
    return body or None
