"""
Workforce module entities: shifts.
"""

from __future__ import annotations

from erp_data.domains.entities.common import id_rule, timestamp_rules, today
from erp_data.domains.entities.schema import EntitySchema
from erp_data.domains.records.coercion import to_date, to_location, to_text, to_time
from erp_data.domains.records.mapping import passthrough, rule

SHIFTS = EntitySchema(
    key="shifts",
    module="workforce",
    id_prefix="sh",
    remote_path="/workforce/shifts",
    collection_key="shifts",
    record_key="shift",
    table="shifts",
    required=frozenset({"id", "employee_name", "date", "start_time", "end_time", "role"}),
    rules=(
        id_rule("sh", "shift_id"),
        rule("employee_name", "employee.name", "employee.full_name", "employee", "name", default="", coerce=to_text),
        rule("employee_id", "employee.id", coerce=to_text),
        # A shift may only carry ISO start/end timestamps; the date comes from the start.
        rule("date", "shift_date", "start_time", "starts_at", default=today, coerce=to_date),
        rule("start_time", "start", "starts_at", default="00:00", coerce=to_time),
        rule("end_time", "end", "ends_at", default="00:00", coerce=to_time),
        rule("role", "position", "title", "employee.role", default="", coerce=to_text),
        rule("location", "site", coerce=to_location),
        rule("notes", coerce=to_text),
        *timestamp_rules("date", "shift_date"),
    ),
    wire_rules=passthrough(
        "employee_name",
        "employee_id",
        "date",
        "start_time",
        "end_time",
        "role",
        "location",
        "notes",
    ),
    seed=(
        {
            "id": "sh-1",
            "employee_name": "Alex Rivera",
            "date": "2025-01-08",
            "start_time": "08:00",
            "end_time": "16:00",
            "role": "Warehouse associate",
            "created_at": "2025-01-05",
        },
        {
            "id": "sh-2",
            "employee_name": "Jordan Lee",
            "date": "2025-01-08",
            "start_time": "12:00",
            "end_time": "20:00",
            "role": "Customer support",
            "created_at": "2025-01-05",
        },
    ),
)
