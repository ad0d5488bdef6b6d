# Cache entry class for storing key-value pairs and their insertion time
from dataclasses import dataclass
from typing import Any, Hashable


@dataclass
class CacheEntry:
    key: Hashable
    value: Any
    inserted_at: float

    def expires_at(self, timeout: float) -> float:
        return self.inserted_at + timeout

    def is_expired(self, now: float, timeout: float) -> bool:
        """An entry is expired once `now` reaches its insertion time plus the timeout."""
        return now >= self.expires_at(timeout)
