"""
Repository events: structured signals for tier failures and fallbacks.

Repositories emit events to an injected sink instead of writing to a fixed log
destination. The default sink forwards them to the package logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from erp_data.utils.logger import get_logger

TIER_FAILED = "tier_failed"
DEGRADED = "degraded"
FALLBACK = "fallback"
UNRECOGNIZED_SHAPE = "unrecognized_shape"
MIRROR = "mirror"
SEEDED = "seeded"

_WARNING_KINDS = frozenset({TIER_FAILED, DEGRADED, UNRECOGNIZED_SHAPE})


@dataclass(frozen=True)
class RepositoryEvent:
    kind: str
    entity: str
    operation: str
    tier: str | None = None
    detail: str = ""

    def describe(self) -> str:
        where = f" [{self.tier}]" if self.tier else ""
        text = f"{self.entity}.{self.operation}{where}: {self.kind}"
        return f"{text} - {self.detail}" if self.detail else text


class EventSink(Protocol):
    def emit(self, event: RepositoryEvent) -> None: ...


class LoggingEventSink:
    """Failures and degradation at WARNING, everything else at INFO."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger()

    def emit(self, event: RepositoryEvent) -> None:
        level = logging.WARNING if event.kind in _WARNING_KINDS else logging.INFO
        self._logger.log(level, "%s", event.describe())


class CollectingEventSink:
    """Keeps events in memory, e.g. for a diagnostics panel."""

    def __init__(self) -> None:
        self.events: list[RepositoryEvent] = []

    def emit(self, event: RepositoryEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

    def clear(self) -> None:
        self.events.clear()
