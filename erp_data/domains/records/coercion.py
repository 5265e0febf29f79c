"""
Total value coercers used by mapping rules.

Every coercer accepts anything and returns either a normalized value or None
("not usable"); none of them raise. Dates normalize to YYYY-MM-DD, times to HH:MM.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

_DATE_PREFIX = re.compile(r"^\s*(\d{4})[-/](\d{1,2})[-/](\d{1,2})")
_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?\s*([AaPp]\.?[Mm]\.?)?$")
_ISO_CLOCK = re.compile(r"[T\s](\d{2}):(\d{2})")
_NUMBER_NOISE = re.compile(r"[,\s_$€£₹]")

_LOCATION_NAME_KEYS = ("name", "location_name", "warehouse_name", "label", "code", "warehouse_code")


def to_number(value: Any, fallback: float | int | None = 0) -> float | int | None:
    """
    Parse a number without ever producing NaN.

    Booleans, NaN, infinities and unparsable input yield `fallback`.
    Integral input keeps int type.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else fallback
    if isinstance(value, Decimal):
        return to_number(float(value), fallback) if value.is_finite() else fallback
    if isinstance(value, str):
        text = _NUMBER_NOISE.sub("", value)
        if not text:
            return fallback
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return fallback
        if not parsed.is_finite():
            return fallback
        result = float(parsed)
        return result if math.isfinite(result) else fallback
    return fallback


def optional_number(value: Any) -> float | int | None:
    return to_number(value, None)


def _from_epoch(value: float) -> datetime | None:
    # Millisecond epochs are common in JS-produced payloads.
    seconds = value / 1000.0 if abs(value) > 1e11 else value
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def to_date(value: Any) -> str | None:
    """Normalize ISO datetimes, bare dates, date objects and epochs to YYYY-MM-DD."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        dt = _from_epoch(float(value))
        return dt.date().isoformat() if dt else None
    if isinstance(value, str):
        m = _DATE_PREFIX.match(value)
        if not m:
            return None
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3))).isoformat()
        except ValueError:
            return None
    return None


def to_time(value: Any) -> str | None:
    """Normalize "8:00", "08:00:00", "8:30 PM", ISO datetimes and time objects to HH:MM."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    if not isinstance(value, str):
        return None
    text = value.strip()
    m = _CLOCK.match(text)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        meridiem = (m.group(4) or "").replace(".", "").upper()
        if meridiem:
            if not 1 <= hour <= 12:
                return None
            hour = hour % 12 + (12 if meridiem == "PM" else 0)
    else:
        m = _ISO_CLOCK.search(text)
        if not m or not _DATE_PREFIX.match(text):
            return None
        hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def to_timestamp(value: Any) -> str | None:
    """ISO-8601 timestamp text for created_at/updated_at style fields."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        dt = _from_epoch(float(value))
        return dt.isoformat() if dt else None
    if isinstance(value, str):
        text = value.strip()
        return text if _DATE_PREFIX.match(text) else None
    return None


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, str):
        text = value.strip()
        return text or None
    return None


def to_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "1", "y", "active"):
            return True
        if text in ("false", "no", "0", "n", "inactive"):
            return False
    return None


def to_text_list(value: Any) -> list[str] | None:
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
        return [i for i in items if i] or None
    if isinstance(value, (list, tuple)):
        items = [to_text(v) for v in value]
        return [i for i in items if i] or None
    return None


def to_location(value: Any) -> str | None:
    """
    A location reference as display text.

    Arrives as a plain name, a nested object with a name/code, or a bare
    warehouse id (rendered "WH-<id>").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return f"WH-{value}"
    if isinstance(value, Mapping):
        for key in _LOCATION_NAME_KEYS:
            text = to_text(value.get(key))
            if text:
                return text
        ident = value.get("id")
        if isinstance(ident, int) and not isinstance(ident, bool):
            return f"WH-{ident}"
        return to_text(ident)
    return to_text(value)


def to_record_id(value: Any) -> str | None:
    """Identifiers are always strings; numeric ids from the service are stringified."""
    if isinstance(value, Mapping):
        return None
    return to_text(value)


def _enum_key(value: Any) -> str:
    return re.sub(r"[\s\-]+", "_", str(value).strip()).upper()


class EnumField:
    """
    Enumerated field coercer.

    Accepts canonical values and aliases regardless of case or separator
    ("in progress", "In-Progress", "IN_PROGRESS"). Anything else, including
    non-string input, becomes `default`.
    """

    def __init__(self, values: tuple[str, ...], default: str, aliases: Mapping[str, str] | None = None) -> None:
        if default not in values:
            raise ValueError(f"Default {default!r} is not one of {values}")
        self.values = values
        self.default = default
        self._lookup: dict[str, str] = {_enum_key(v): v for v in values}
        for alias, canonical in (aliases or {}).items():
            if canonical not in values:
                raise ValueError(f"Alias {alias!r} targets unknown value {canonical!r}")
            self._lookup[_enum_key(alias)] = canonical

    def __call__(self, value: Any) -> str:
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return self._lookup.get(_enum_key(value), self.default)
        return self.default

    def __repr__(self) -> str:
        return f"EnumField({self.values!r}, default={self.default!r})"
