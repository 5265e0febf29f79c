"""Record sources: primary remote service and managed store clients."""

from erp_data.infrastructure.data.sources.api_client import RemoteApiClient
from erp_data.infrastructure.data.sources.managed_store import SupabaseManagedStore

__all__ = ["RemoteApiClient", "SupabaseManagedStore"]
