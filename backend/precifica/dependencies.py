"""Dependency injection helpers for FastAPI."""

from precifica.bridges.store import TableStoreClient, get_store_client


async def get_store() -> TableStoreClient:
    """Hosted table API client.

    Overridden in tests with an in-memory fake.
    """
    return get_store_client()
