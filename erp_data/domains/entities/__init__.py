"""Entity schemas per ERP module: finance, warehouse, workforce."""

from erp_data.domains.entities.registry import get_entity_registry, get_schema
from erp_data.domains.entities.schema import EntitySchema

__all__ = ["EntitySchema", "get_entity_registry", "get_schema"]
