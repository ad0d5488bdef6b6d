from cachetools import TTLCache as CacheToolsTTLCache
from .base import MonitoredCache


class TTLCacheWrapper(MonitoredCache):
    def __init__(self, max_size: int, ttl: float = 30.0):
        """Initialize the cachetools TTL cache (LRU eviction plus expiry)."""
        super().__init__(CacheToolsTTLCache(maxsize=max_size, ttl=ttl))

    def size(self) -> int:
        self.cache.expire()
        return len(self.cache)
