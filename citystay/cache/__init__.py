"""Read-side cache: client, key building, and write-driven invalidation."""

from citystay.cache.client import CacheClient, CacheStore, build_cache_key
from citystay.cache.invalidation import CacheCoordinator

__all__ = ["CacheClient", "CacheCoordinator", "CacheStore", "build_cache_key"]
