# Expiry policy for timed-out cache entries
from collections import OrderedDict
from time import monotonic
from typing import Callable, Hashable, List
import logging

from .entry import CacheEntry

logger = logging.getLogger(__name__)


class PurgePolicy:
    """Decides when timed-out entries are found and handed back for removal.

    In eager mode every cache operation scans for expired entries first. In
    lazy mode nothing is scanned automatically; a key is only checked when it
    is read, or when the caller runs an explicit purge (for example from its
    own timer).
    """

    def __init__(self, invalidation_timeout: float, eager: bool = True,
                 clock: Callable[[], float] = monotonic):
        self.invalidation_timeout = invalidation_timeout
        self.eager = eager
        self.clock = clock

    def now(self) -> float:
        return self.clock()

    def is_expired(self, entry: CacheEntry) -> bool:
        return entry.is_expired(self.now(), self.invalidation_timeout)

    def expired_keys(self, entries: "OrderedDict[Hashable, CacheEntry]") -> List[Hashable]:
        """Collect the expired prefix of `entries`, oldest first.

        `entries` must be ordered by insertion time, so the scan stops at the
        first entry that is still fresh.
        """
        now = self.now()
        expired = []
        for key, entry in entries.items():
            if not entry.is_expired(now, self.invalidation_timeout):
                break
            expired.append(key)
        if expired:
            logger.debug("Found %d expired entries out of %d", len(expired), len(entries))
        return expired

    def due(self, entries: "OrderedDict[Hashable, CacheEntry]") -> List[Hashable]:
        """Keys to purge before an operation; always empty in lazy mode."""
        if not self.eager:
            return []
        return self.expired_keys(entries)
