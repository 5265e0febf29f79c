"""Rules and enumerations shared by several entity kinds."""

from __future__ import annotations

from typing import Any, Mapping

from erp_data.domains.records.coercion import EnumField, to_date, to_record_id, to_timestamp
from erp_data.domains.records.ids import generate_id, today_iso, utc_now_iso
from erp_data.domains.records.mapping import MappingRule, rule

CURRENCY = EnumField(
    ("USD", "EUR", "GBP", "INR", "JPY", "CNY", "AUD", "CAD"),
    default="USD",
    aliases={"$": "USD", "US$": "USD", "€": "EUR", "£": "GBP", "₹": "INR", "RS": "INR", "¥": "JPY", "RMB": "CNY"},
)

PAYMENT_METHOD = EnumField(
    ("CASH", "BANK_TRANSFER", "CHECK", "CREDIT_CARD", "DEBIT_CARD", "WIRE_TRANSFER", "ONLINE_PAYMENT", "OTHER"),
    default="OTHER",
    aliases={
        "BANK": "BANK_TRANSFER",
        "ACH": "BANK_TRANSFER",
        "NEFT": "BANK_TRANSFER",
        "CHEQUE": "CHECK",
        "CARD": "CREDIT_CARD",
        "CREDIT": "CREDIT_CARD",
        "DEBIT": "DEBIT_CARD",
        "WIRE": "WIRE_TRANSFER",
        "ONLINE": "ONLINE_PAYMENT",
        "UPI": "ONLINE_PAYMENT",
    },
)

ACCOUNT_TYPE = EnumField(
    ("ASSET", "LIABILITY", "INCOME", "EXPENSE", "EQUITY"),
    default="ASSET",
    aliases={"REVENUE": "INCOME", "COST": "EXPENSE", "BANK": "ASSET", "CASH": "ASSET", "DEBT": "LIABILITY"},
)


def generated_id(prefix: str):
    def derive(raw: Mapping[str, Any], record: Mapping[str, Any]) -> str:
        return generate_id(prefix)

    return derive


def numbered(prefix: str, id_prefix: str = ""):
    """Derive a display number such as "MV-42" from the record id ("mv-k3f9a0" -> "MV-k3f9a0")."""

    def derive(raw: Mapping[str, Any], record: Mapping[str, Any]) -> str:
        ident = str(record.get("id", ""))
        if id_prefix and ident.startswith(f"{id_prefix}-"):
            ident = ident[len(id_prefix) + 1 :]
        return f"{prefix}-{ident}"

    return derive


def copy_field(name: str, fallback: Any = ""):
    def derive(raw: Mapping[str, Any], record: Mapping[str, Any]) -> Any:
        value = record.get(name)
        return value if value is not None else fallback

    return derive


def today(raw: Mapping[str, Any], record: Mapping[str, Any]) -> str:
    return today_iso()


def created_at_from(*date_fields: str):
    """created_at falls back to a known business date, then to now."""

    def derive(raw: Mapping[str, Any], record: Mapping[str, Any]) -> str:
        for name in date_fields:
            value = to_date(raw.get(name))
            if value:
                return value
        return utc_now_iso()

    return derive


def id_rule(prefix: str, *aliases: str) -> MappingRule:
    return rule("id", *aliases, "_id", default=generated_id(prefix), coerce=to_record_id)


def timestamp_rules(*date_fields: str) -> tuple[MappingRule, ...]:
    return (
        rule("created_at", "createdAt", "inserted_at", default=created_at_from(*date_fields), coerce=to_timestamp),
        rule("updated_at", "updatedAt", coerce=to_timestamp),
    )
