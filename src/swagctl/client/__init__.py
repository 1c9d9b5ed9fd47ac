"""HTTP client module for swagctl.

Classes:
    :class:`DynamicClient` -- one generated method per spec operation.
    :class:`SyncClient` -- the blocking httpx transport underneath it, with
    dry-run mode and retry with exponential backoff.

Example::

    from swagctl.client import DynamicClient

    client = DynamicClient.generate("petstore.yaml")
    resp = client.show_pet_by_id({"petId": 1})
"""

from swagctl.client.dynamic import DynamicClient, PreparedCall, validate_arguments
from swagctl.client.sync_client import SyncClient

__all__ = ["DynamicClient", "PreparedCall", "SyncClient", "validate_arguments"]
