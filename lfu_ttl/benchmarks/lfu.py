from cachetools import LFUCache as CacheToolsLFUCache
from .base import MonitoredCache


class LFUCacheWrapper(MonitoredCache):
    def __init__(self, max_size: int):
        """Initialize the cachetools LFU cache (no expiry) with a maximum size."""
        super().__init__(CacheToolsLFUCache(maxsize=max_size))
