from cachetools import LRUCache as CacheToolsLRUCache
from .base import MonitoredCache


class LRUCache(MonitoredCache):
    def __init__(self, max_size: int):
        """Initialize LRU cache with a maximum size."""
        super().__init__(CacheToolsLRUCache(maxsize=max_size))
