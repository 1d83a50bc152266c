from .query_cache import CacheEntry, QueryCache, QueryKey

__all__ = ["QueryCache", "QueryKey", "CacheEntry"]
