"""
Source selection: which tier handles a call, and the sticky degradation flag.

A repository starts `nominal` and tries its tiers in priority order. The first
remote failure moves it to `degraded` for the rest of its life: failed tiers are
never retried by that repository instance. The local store is always the last
tier and is never skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

NOMINAL = "nominal"
DEGRADED = "degraded"

READ = "read"
WRITE = "write"


class SourceTier(Enum):
    """Value: (priority, can_read, can_write). Lower priority is tried first."""

    PRIMARY_REMOTE = (0, True, True)
    MANAGED_STORE = (1, True, True)
    LOCAL_STORE = (2, True, True)

    @property
    def priority(self) -> int:
        return self.value[0]

    @property
    def can_read(self) -> bool:
        return self.value[1]

    @property
    def can_write(self) -> bool:
        return self.value[2]

    @property
    def label(self) -> str:
        return self.name.lower()

    def supports(self, operation: str) -> bool:
        return self.can_write if operation == WRITE else self.can_read


@dataclass(frozen=True)
class TierFailure:
    tier: SourceTier
    reason: str
    at: datetime


class DegradationState:
    """
    Per-repository degradation flag.

    Transitions only nominal -> degraded. A fresh instance is the only way back.
    """

    def __init__(self) -> None:
        self._failures: dict[SourceTier, TierFailure] = {}

    @property
    def status(self) -> str:
        return DEGRADED if self._failures else NOMINAL

    @property
    def degraded(self) -> bool:
        return bool(self._failures)

    @property
    def failed_tiers(self) -> frozenset[SourceTier]:
        return frozenset(self._failures)

    def failure(self, tier: SourceTier) -> TierFailure | None:
        return self._failures.get(tier)

    def has_failed(self, tier: SourceTier) -> bool:
        return tier in self._failures

    def record_failure(self, tier: SourceTier, reason: str = "") -> bool:
        """
        Remember that a tier failed. The local store cannot fail.

        Returns:
            True if this call moved the state from nominal to degraded.
        """
        if tier is SourceTier.LOCAL_STORE or tier in self._failures:
            return False
        was_nominal = not self._failures
        self._failures[tier] = TierFailure(tier=tier, reason=reason, at=datetime.now(timezone.utc))
        return was_nominal

    def __repr__(self) -> str:
        failed = ", ".join(t.label for t in sorted(self._failures, key=lambda t: t.priority))
        return f"DegradationState({self.status}{': ' + failed if failed else ''})"


class SourceSelector:
    """
    Orders the configured tiers for each call.

    Args:
        available: Tiers this repository has clients for. The local store is
            always added.
        state: Degradation state to consult; a new one when omitted.
    """

    def __init__(self, available: Iterable[SourceTier], state: DegradationState | None = None) -> None:
        tiers = set(available) | {SourceTier.LOCAL_STORE}
        self._tiers = tuple(sorted(tiers, key=lambda t: t.priority))
        self._state = state if state is not None else DegradationState()

    @property
    def state(self) -> DegradationState:
        return self._state

    @property
    def configured(self) -> tuple[SourceTier, ...]:
        return self._tiers

    def tiers_for(self, operation: str = READ) -> list[SourceTier]:
        """Tiers to attempt, in order, skipping tiers that already failed."""
        return [
            t for t in self._tiers
            if t.supports(operation) and not self._state.has_failed(t)
        ]

    def active_tier(self, operation: str = READ) -> SourceTier:
        return self.tiers_for(operation)[0]

    def record_failure(self, tier: SourceTier, reason: str = "") -> bool:
        return self._state.record_failure(tier, reason)
