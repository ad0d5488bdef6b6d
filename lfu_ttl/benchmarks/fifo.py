from collections import OrderedDict
from typing import Any, Hashable
from .base import MonitoredCache


class FIFODict(OrderedDict):
    """Mapping that drops its oldest key once `max_size` is exceeded."""

    def __init__(self, max_size: int):
        super().__init__()
        self.max_size = max_size

    def __setitem__(self, key: Hashable, value: Any) -> None:
        # If key doesn't exist and cache is full, remove oldest item
        if key not in self and len(self) >= self.max_size:
            self.popitem(last=False)
        # Overwrites keep their original position
        super().__setitem__(key, value)


class FIFOCache(MonitoredCache):
    def __init__(self, max_size: int):
        """Initialize FIFO cache with a maximum size."""
        super().__init__(FIFODict(max_size))
