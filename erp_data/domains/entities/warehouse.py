"""
Warehouse module entities: stock movements.

The inventory service reports movements with numeric product/warehouse ids,
joined warehouse names, or nested warehouse objects depending on the endpoint
version. Direction codes (IN/OUT) normalize to RECEIPT/SHIPMENT.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from erp_data.domains.entities.common import copy_field, id_rule, numbered, timestamp_rules, today
from erp_data.domains.entities.schema import EntitySchema
from erp_data.domains.records.coercion import (
    EnumField,
    optional_number,
    to_date,
    to_location,
    to_text,
    to_timestamp,
)
from erp_data.domains.records.mapping import WireRule, passthrough, rule

_WAREHOUSE_REF = re.compile(r"^WH-(\d+)$", re.IGNORECASE)

MOVEMENT_TYPE = EnumField(
    ("RECEIPT", "SHIPMENT", "TRANSFER", "ADJUSTMENT"),
    default="TRANSFER",
    aliases={
        "IN": "RECEIPT",
        "INBOUND": "RECEIPT",
        "RECEIVE": "RECEIPT",
        "RECEIVED": "RECEIPT",
        "PURCHASE": "RECEIPT",
        "OUT": "SHIPMENT",
        "OUTBOUND": "SHIPMENT",
        "ISSUE": "SHIPMENT",
        "SALE": "SHIPMENT",
        "SHIP": "SHIPMENT",
        "MOVE": "TRANSFER",
        "RELOCATION": "TRANSFER",
        "ADJUST": "ADJUSTMENT",
        "CORRECTION": "ADJUSTMENT",
    },
)

MOVEMENT_STATUS = EnumField(
    ("PENDING", "IN_PROGRESS", "COMPLETED", "CANCELLED"),
    default="PENDING",
    aliases={"COMPLETE": "COMPLETED", "DONE": "COMPLETED", "CANCEL": "CANCELLED", "CANCELED": "CANCELLED"},
)

REFERENCE_TYPE = EnumField(
    ("PURCHASE_ORDER", "SALES_ORDER", "TRANSFER_ORDER", "ADJUSTMENT", "OTHER"),
    default="OTHER",
    aliases={"PO": "PURCHASE_ORDER", "SO": "SALES_ORDER", "TO": "TRANSFER_ORDER"},
)


def _item_id(raw: Mapping[str, Any], record: Mapping[str, Any]) -> str:
    product = raw.get("product_id")
    if product is None and isinstance(raw.get("product"), Mapping):
        product = raw["product"].get("id")
    text = to_text(product)
    return f"PROD-{text}" if text else ""


def _movement_created_at(raw: Mapping[str, Any], record: Mapping[str, Any]) -> str:
    return to_timestamp(raw.get("movement_date")) or record.get("movement_date") or today(raw, record)


def positive_int(value: Any) -> int | None:
    """Numeric id carried in text ("12", 12); anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


def warehouse_id(value: Any) -> int | None:
    """"WH-7" (or a bare 7) -> 7. Named locations have no id and are not sent."""
    if isinstance(value, str):
        m = _WAREHOUSE_REF.match(value.strip())
        if m:
            return int(m.group(1))
    return positive_int(value)


MOVEMENTS = EntitySchema(
    key="movements",
    module="warehouse",
    id_prefix="mv",
    remote_path="/inventory/stock/movements",
    list_query="?limit=1000&page=1",
    collection_key="movements",
    record_key="movement",
    table="stock_movements",
    required=frozenset(
        {
            "id",
            "movement_number",
            "item_id",
            "movement_type",
            "status",
            "movement_date",
            "from_location",
            "to_location",
            "quantity",
            "unit",
        }
    ),
    rules=(
        id_rule("mv", "movement_id"),
        rule("movement_number", "number", default=numbered("MV", "mv")),
        rule("item_id", "item_sku", "product.sku", default=_item_id, coerce=to_text),
        rule("item_name", "product.name", "product_name", coerce=to_text),
        rule("item_sku", "product.sku", default=copy_field("item_id"), coerce=to_text),
        rule("movement_type", "type", "direction", default="TRANSFER", coerce=MOVEMENT_TYPE),
        rule("status", "movement_status", default="PENDING", coerce=MOVEMENT_STATUS),
        rule("movement_date", "date", "created_at", default=today, coerce=to_date),
        rule(
            "from_location",
            "from_warehouse",
            "from",
            "warehouse",
            "warehouse_name",
            "warehouse_id",
            "location",
            default="",
            coerce=to_location,
        ),
        rule("to_location", "to_warehouse", "to", default=copy_field("from_location"), coerce=to_location),
        rule("quantity", "qty", default=0, coerce=optional_number),
        rule("unit", "uom", "product.unit", default="pcs", coerce=to_text),
        rule("reference_number", "reference_id", coerce=to_text),
        rule("reference_type", default="OTHER", coerce=REFERENCE_TYPE),
        rule("notes", "remarks", coerce=to_text),
        rule("created_at", "createdAt", default=_movement_created_at, coerce=to_timestamp),
        timestamp_rules()[1],
    ),
    wire_rules=(
        *passthrough("product_id", "warehouse_id"),
        *passthrough("movement_type", "quantity", "reference_type", "notes", "movement_date", "status"),
        WireRule(target="product_id", source="item_id", transform=positive_int),
        WireRule(target="warehouse_id", source="from_location", transform=warehouse_id),
        WireRule(target="reference_id", source="reference_number", transform=positive_int),
    ),
    seed=(
        {
            "id": "mv-1",
            "movement_number": "MV-1001",
            "item_id": "SKU-CHAIR-01",
            "item_name": "Office chair",
            "item_sku": "SKU-CHAIR-01",
            "movement_type": "RECEIPT",
            "status": "COMPLETED",
            "movement_date": "2025-01-03",
            "from_location": "Supplier dock",
            "to_location": "Main warehouse",
            "quantity": 40,
            "unit": "pcs",
            "reference_type": "PURCHASE_ORDER",
            "reference_number": "4501",
            "created_at": "2025-01-03",
        },
        {
            "id": "mv-2",
            "movement_number": "MV-1002",
            "item_id": "SKU-DESK-02",
            "item_name": "Standing desk",
            "item_sku": "SKU-DESK-02",
            "movement_type": "TRANSFER",
            "status": "IN_PROGRESS",
            "movement_date": "2025-01-04",
            "from_location": "Main warehouse",
            "to_location": "East hub",
            "quantity": 12,
            "unit": "pcs",
            "reference_type": "TRANSFER_ORDER",
            "created_at": "2025-01-04",
        },
        {
            "id": "mv-3",
            "movement_number": "MV-1003",
            "item_id": "SKU-CABLE-10",
            "item_name": "USB-C cable",
            "item_sku": "SKU-CABLE-10",
            "movement_type": "SHIPMENT",
            "status": "PENDING",
            "movement_date": "2025-01-06",
            "from_location": "East hub",
            "to_location": "Customer",
            "quantity": 250,
            "unit": "pcs",
            "reference_type": "SALES_ORDER",
            "reference_number": "7781",
            "created_at": "2025-01-06",
        },
        {
            "id": "mv-4",
            "movement_number": "MV-1004",
            "item_id": "SKU-PAPER-A4",
            "item_name": "A4 paper",
            "item_sku": "SKU-PAPER-A4",
            "movement_type": "ADJUSTMENT",
            "status": "COMPLETED",
            "movement_date": "2025-01-07",
            "from_location": "Main warehouse",
            "to_location": "Main warehouse",
            "quantity": 5,
            "unit": "box",
            "reference_type": "ADJUSTMENT",
            "notes": "Cycle count correction",
            "created_at": "2025-01-07",
        },
    ),
)
