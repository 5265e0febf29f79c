"""
List view models: per-module state a page renders (records, loading flag, summary).

Each view model wraps one RecordRepository and keeps its own copy of the list so
the page can update optimistically after writes without re-listing.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from erp_data.domains.records.coercion import to_number
from erp_data.infrastructure.data.errors import RecordSourceError
from erp_data.infrastructure.data.repositories.record_repository import RecordRepository
from erp_data.utils.logger import get_logger

logger = get_logger()

Summarizer = Callable[[list[dict[str, Any]]], dict[str, Any]]


def _amount(record: Mapping[str, Any], field: str = "amount") -> float | int:
    return to_number(record.get(field), 0)


def summarize_transactions(records: list[dict[str, Any]]) -> dict[str, Any]:
    """Income, expense and net over INCOME/EXPENSE transactions."""
    income = sum(_amount(r) for r in records if r.get("type") == "INCOME")
    expense = sum(_amount(r) for r in records if r.get("type") == "EXPENSE")
    return {"income": income, "expense": expense, "net": income - expense}


def summarize_movements(records: list[dict[str, Any]]) -> dict[str, Any]:
    """Move count and quantity totals, overall and per direction."""
    received = sum(_amount(r, "quantity") for r in records if r.get("movement_type") == "RECEIPT")
    shipped = sum(_amount(r, "quantity") for r in records if r.get("movement_type") == "SHIPMENT")
    return {
        "total_moves": len(records),
        "total_quantity": sum(_amount(r, "quantity") for r in records),
        "received_quantity": received,
        "shipped_quantity": shipped,
    }


def summarize_payments(records: list[dict[str, Any]]) -> dict[str, Any]:
    totals: dict[str, float | int] = {}
    for r in records:
        status = str(r.get("status") or "PENDING")
        totals[status] = totals.get(status, 0) + _amount(r)
    return {
        "count": len(records),
        "total_amount": sum(totals.values()),
        "by_status": totals,
    }


def summarize_shifts(records: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "total_shifts": len(records),
        "days_covered": len({r.get("date") for r in records if r.get("date")}),
    }


SUMMARIZERS: dict[str, Summarizer] = {
    "transactions": summarize_transactions,
    "movements": summarize_movements,
    "payments": summarize_payments,
    "shifts": summarize_shifts,
}


class RecordListViewModel:
    """
    Records of one entity kind plus the derived summary for its page.

    Args:
        repository: Data access for the entity kind.
        summarize: Summary function; defaults to the one registered for the
            repository's entity key, or no summary.
    """

    def __init__(self, repository: RecordRepository, summarize: Summarizer | None = None) -> None:
        self._repository = repository
        self._summarize = summarize or SUMMARIZERS.get(repository.schema.key)
        self.records: list[dict[str, Any]] = []
        self.loading = False
        self.last_error: str | None = None

    @property
    def repository(self) -> RecordRepository:
        return self._repository

    @property
    def degraded(self) -> bool:
        return self._repository.degraded

    @property
    def summary(self) -> dict[str, Any]:
        return self._summarize(self.records) if self._summarize else {}

    async def refresh(self) -> list[dict[str, Any]]:
        self.loading = True
        try:
            self.records = await self._repository.list()
            self.last_error = None
        finally:
            self.loading = False
        return self.records

    async def create(self, partial: Mapping[str, Any]) -> dict[str, Any] | None:
        """Create and prepend. A strict-write rejection is kept in last_error."""
        try:
            created = await self._repository.create(partial)
        except RecordSourceError as e:
            logger.warning("Create %s rejected: %s", self._repository.schema.key, e)
            self.last_error = str(e)
            return None
        self.records = [created] + [r for r in self.records if r.get("id") != created.get("id")]
        self.last_error = None
        return created

    async def update(self, record_id: str, changes: Mapping[str, Any]) -> dict[str, Any] | None:
        try:
            updated = await self._repository.update(record_id, changes)
        except RecordSourceError as e:
            logger.warning("Update %s/%s rejected: %s", self._repository.schema.key, record_id, e)
            self.last_error = str(e)
            return None
        if updated is None:
            return None
        key = str(record_id)
        self.records = [updated if str(r.get("id")) == key else r for r in self.records]
        self.last_error = None
        return updated

    async def remove(self, record_id: str) -> None:
        await self._repository.delete(record_id)
        key = str(record_id)
        self.records = [r for r in self.records if str(r.get("id")) != key]
