# Least-frequently-used cache with insertion-time expiry
from collections import OrderedDict
from time import monotonic
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple
import logging

from lfu_ttl.config import CONFIG
from lfu_ttl.metrics.monitor import MetricsMonitor
from .entry import CacheEntry
from .frequency import FrequencyIndex
from .purge import PurgePolicy

logger = logging.getLogger(__name__)

_MISSING = object()


class LFUTTLCache:
    """A bounded in-memory cache evicting the least frequently used key.

    Insertion, retrieval and removal are constant time. Every key lives in
    two structures at once: the entry store (value and insertion time, ordered
    oldest first) and the frequency index (its frequency bucket). Entries are
    only ever added through `_store` and removed through `_discard`, so the
    structures can never disagree about which keys exist.

    Entries older than `invalidation_timeout` seconds are invalid. With
    `eager_purge` enabled (default) each get/put first removes the expired
    prefix of the entry store, so the cache is never seen holding invalid
    entries. With it disabled, expired entries are only removed when they are
    read or when `purge_invalid_entries` is called, so callers should schedule
    that themselves.

    Calling `put` on an existing key overwrites the value, refreshes its
    insertion time and resets its frequency to 1.

    Not thread-safe; guard the whole cache with one lock if it is shared.
    """

    def __init__(self, max_entries: int = 1024, invalidation_timeout: float = 30.0,
                 eager_purge: bool = True, clock: Callable[[], float] = monotonic,
                 monitor: Optional[MetricsMonitor] = None):
        if isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries <= 0:
            raise ValueError(f"max_entries must be a positive integer, got {max_entries!r}")

        self.max_entries = max_entries
        self.purge_policy = PurgePolicy(invalidation_timeout, eager=eager_purge, clock=clock)
        self.monitor = monitor if monitor is not None else MetricsMonitor()

        self._entries: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self._frequencies = FrequencyIndex()

        logger.debug("Created LFU-TTL cache (max_entries=%d, invalidation_timeout=%ss, eager_purge=%s)",
                     max_entries, invalidation_timeout, eager_purge)

    @classmethod
    def from_config(cls, config: Optional[dict] = None, **overrides) -> "LFUTTLCache":
        """Build a cache from a CONFIG-style dict, filling gaps from the defaults."""
        config = config if config is not None else CONFIG
        monitor_params = config.get("monitor", CONFIG["monitor"])
        params = {
            "max_entries": config.get("cache_size", CONFIG["cache_size"]),
            "invalidation_timeout": config.get("invalidation_timeout", CONFIG["invalidation_timeout"]),
            "eager_purge": config.get("eager_purge", CONFIG["eager_purge"]),
            "monitor": MetricsMonitor(**monitor_params),
        }
        params.update(overrides)
        return cls(**params)

    @property
    def invalidation_timeout(self) -> float:
        return self.purge_policy.invalidation_timeout

    @property
    def eager_purge(self) -> bool:
        return self.purge_policy.eager

    # ---------------------------------------------------------- core operations

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value for `key` and bump its frequency, or `default`.

        An expired key is removed and reported as absent in either purge mode.
        """
        self._purge_due()

        entry = self._entries.get(key)
        if entry is not None and self.purge_policy.is_expired(entry):
            self._expire(key)
            entry = None

        if entry is None:
            self.monitor.record_operation("get", key, False)
            return default

        self._frequencies.touch(key)
        self.monitor.record_operation("get", key, True)
        return entry.value

    def put(self, key: Hashable, value: Any) -> Any:
        """Insert or overwrite `key`, returning the previous live value or None."""
        # Free up as much space as possible before evicting valid entries
        self._purge_due()

        previous = self._entries.get(key)
        if previous is not None:
            if self.purge_policy.is_expired(previous):
                self._expire(key)
                previous = None
        elif len(self._entries) >= self.max_entries:
            self._evict()

        self._store(key, value)
        return previous.value if previous is not None else None

    def remove(self, key: Hashable, default: Any = None) -> Any:
        """Remove `key` and return its value, or `default` if absent or expired.

        Unlike get/put this never runs the eager purge scan first.
        """
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self.purge_policy.is_expired(entry):
            self._expire(key)
            return default

        self._discard(key)
        self.monitor.record_removal(key)
        return entry.value

    def purge_invalid_entries(self) -> int:
        """Remove every expired entry now, regardless of purge mode.

        Returns the number of entries removed.
        """
        return self._purge(self.purge_policy.expired_keys(self._entries))

    def size(self) -> int:
        """Number of entries held.

        Exact under eager purge; under lazy purge it may include expired
        entries nobody has scanned yet.
        """
        self._purge_due()
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._frequencies.clear()

    def reset(self) -> None:
        """Reset the cache and its metrics to the initial state."""
        self.clear()
        self.monitor.reset()

    # ---------------------------------------------------------- bookkeeping

    def _store(self, key: Hashable, value: Any) -> None:
        self._entries[key] = CacheEntry(key, value, self.purge_policy.now())
        self._entries.move_to_end(key)
        self._frequencies.insert(key)

    def _discard(self, key: Hashable) -> Optional[CacheEntry]:
        entry = self._entries.pop(key, None)
        self._frequencies.discard(key)
        return entry

    def _evict(self) -> None:
        key = self._frequencies.eviction_candidate()
        frequency = self._frequencies.frequency_of(key)
        self._discard(key)
        self.monitor.record_eviction(key, frequency)
        logger.debug("Evicted key %r with frequency %d (%d/%d entries)",
                     key, frequency, len(self._entries), self.max_entries)

    def _expire(self, key: Hashable) -> None:
        self._discard(key)
        self.monitor.record_expiration(key)

    def _purge(self, keys: List[Hashable]) -> int:
        for key in keys:
            self._expire(key)
        if keys:
            logger.debug("Purged %d expired entries (%d remaining)", len(keys), len(self._entries))
        return len(keys)

    def _purge_due(self) -> None:
        self._purge(self.purge_policy.due(self._entries))

    # ---------------------------------------------------------- mapping surface

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: Hashable) -> bool:
        # Membership is a query: no frequency change and no removal
        entry = self._entries.get(key)
        return entry is not None and not self.purge_policy.is_expired(entry)

    def __getitem__(self, key: Hashable) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Hashable) -> None:
        if self.remove(key, _MISSING) is _MISSING:
            raise KeyError(key)

    def __iter__(self):
        return iter(self.keys())

    def keys(self) -> List[Hashable]:
        """Snapshot of keys, oldest insertion first. Does not touch frequencies."""
        self._purge_due()
        return list(self._entries)

    def values(self) -> List[Any]:
        self._purge_due()
        return [entry.value for entry in self._entries.values()]

    def items(self) -> List[Tuple[Hashable, Any]]:
        self._purge_due()
        return [(key, entry.value) for key, entry in self._entries.items()]

    # ---------------------------------------------------------- diagnostics

    def frequencies(self) -> Dict[int, List[Hashable]]:
        """Bucket frequency -> keys in that bucket, lowest frequency first."""
        return self._frequencies.snapshot()

    def frequency_counts(self) -> Dict[int, int]:
        return self._frequencies.counts()

    def total_frequency_count(self) -> int:
        return sum(self._frequencies.counts().values())

    def frequency_of(self, key: Hashable) -> Optional[int]:
        return self._frequencies.frequency_of(key)

    def summary(self) -> dict:
        summary = self.monitor.summary()
        summary["size"] = len(self._entries)
        summary["buckets"] = len(self._frequencies.counts())
        return summary

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(size={len(self._entries)}, max_entries={self.max_entries}, "
                f"invalidation_timeout={self.invalidation_timeout}, eager_purge={self.eager_purge})")
