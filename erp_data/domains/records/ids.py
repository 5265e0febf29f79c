"""Locally generated record identifiers."""

from __future__ import annotations

import secrets
import string
from datetime import date, datetime, timezone

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 6


def generate_id(prefix: str = "") -> str:
    """Random id such as "tx-k3f9a0". Demo-grade: short, not globally unique."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))
    return f"{prefix}-{suffix}" if prefix else suffix


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def today_iso() -> str:
    return date.today().isoformat()
