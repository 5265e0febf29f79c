"""Record mapping: raw payloads to canonical records and back to wire format."""

from erp_data.domains.records.mapping import normalize_changes, strip_undefined, to_canonical, to_wire_format

__all__ = ["to_canonical", "to_wire_format", "normalize_changes", "strip_undefined"]
