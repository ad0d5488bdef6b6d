from typing import Any, Hashable, MutableMapping
from lfu_ttl.metrics.monitor import MetricsMonitor


class MonitoredCache:
    """Baseline cache exposing the same get/put/summary surface as LFUTTLCache."""

    def __init__(self, cache: MutableMapping):
        self.cache = cache
        self.monitor = MetricsMonitor()

    def get(self, key: Hashable) -> Any:
        """Get a value from the cache."""
        try:
            value = self.cache[key]
        except KeyError:
            self.monitor.record_operation("get", key, False)
            return None
        self.monitor.record_operation("get", key, True)
        return value

    def put(self, key: Hashable, value: Any) -> None:
        """Put a value into the cache."""
        self.cache[key] = value

    def size(self) -> int:
        return len(self.cache)

    def reset(self) -> None:
        self.cache.clear()
        self.monitor.reset()

    def summary(self) -> dict:
        """Return cache performance summary."""
        summary = self.monitor.summary()
        summary["size"] = self.size()
        return summary
