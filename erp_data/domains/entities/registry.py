"""
Entity registry: entity key -> schema.
"""

from erp_data.domains.entities.finance import ACCOUNTS, PAYMENTS, TRANSACTIONS
from erp_data.domains.entities.schema import EntitySchema
from erp_data.domains.entities.warehouse import MOVEMENTS
from erp_data.domains.entities.workforce import SHIFTS

ENTITY_SCHEMAS: tuple[EntitySchema, ...] = (TRANSACTIONS, ACCOUNTS, PAYMENTS, MOVEMENTS, SHIFTS)


def get_entity_registry() -> dict[str, EntitySchema]:
    """Map entity key -> schema for every supported entity kind."""
    return {s.key: s for s in ENTITY_SCHEMAS}


def get_schema(key: str) -> EntitySchema:
    """
    Look up one schema.

    Raises:
        KeyError: If the key is unknown; the message lists known keys.
    """
    registry = get_entity_registry()
    if key not in registry:
        raise KeyError(f"Unknown entity kind {key!r}. Known: {', '.join(sorted(registry))}")
    return registry[key]
