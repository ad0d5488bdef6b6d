# Frequency buckets backing the constant-time LFU bookkeeping
from typing import Dict, Hashable, List, Optional


class FrequencyBucket:
    """All keys currently sharing one access frequency.

    Buckets are linked in a chain of strictly increasing frequency. Keys are
    kept in a dict used as an ordered set, so the first key is always the one
    that entered the bucket earliest.
    """

    __slots__ = ("frequency", "keys", "prev", "next")

    def __init__(self, frequency: int):
        self.frequency = frequency
        self.keys: Dict[Hashable, None] = {}
        self.prev: Optional["FrequencyBucket"] = None
        self.next: Optional["FrequencyBucket"] = None

    def add(self, key: Hashable) -> None:
        self.keys[key] = None

    def discard(self, key: Hashable) -> None:
        self.keys.pop(key, None)

    def first_key(self) -> Optional[Hashable]:
        return next(iter(self.keys), None)

    def is_empty(self) -> bool:
        return not self.keys

    def insert_after(self, bucket: "FrequencyBucket") -> None:
        """Splice `bucket` directly after this one."""
        bucket.prev = self
        bucket.next = self.next
        if self.next is not None:
            self.next.prev = bucket
        self.next = bucket

    def unlink(self) -> None:
        if self.prev is not None:
            self.prev.next = self.next
        if self.next is not None:
            self.next.prev = self.prev
        self.prev = None
        self.next = None

    def __len__(self) -> int:
        return len(self.keys)

    def __repr__(self) -> str:
        return f"FrequencyBucket({self.frequency}: {list(self.keys)})"


class FrequencyIndex:
    """Maps each key to its bucket; all operations are O(1).

    The head bucket has frequency 1 and stays linked even when empty so new
    keys always have somewhere to go. Any other bucket is unlinked as soon as
    its last key leaves.
    """

    def __init__(self):
        self.head = FrequencyBucket(1)
        self._buckets: Dict[Hashable, FrequencyBucket] = {}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def insert(self, key: Hashable) -> None:
        """Place a key in the head bucket with frequency 1."""
        if key in self._buckets:
            self.discard(key)
        self.head.add(key)
        self._buckets[key] = self.head

    def touch(self, key: Hashable) -> int:
        """Raise the key's frequency by one and return the new frequency."""
        current = self._buckets[key]
        target = current.next
        if target is None or target.frequency != current.frequency + 1:
            target = FrequencyBucket(current.frequency + 1)
            current.insert_after(target)

        # Add before removing so the key is never outside every bucket
        target.add(key)
        self._buckets[key] = target
        self._release(current, key)
        return target.frequency

    def discard(self, key: Hashable) -> bool:
        bucket = self._buckets.pop(key, None)
        if bucket is None:
            return False
        self._release(bucket, key)
        return True

    def _release(self, bucket: FrequencyBucket, key: Hashable) -> None:
        bucket.discard(key)
        if bucket.is_empty() and bucket is not self.head:
            bucket.unlink()

    def eviction_candidate(self) -> Optional[Hashable]:
        """First-inserted key of the lowest non-empty frequency, or None when empty."""
        if not self._buckets:
            return None
        bucket = self.head if not self.head.is_empty() else self.head.next
        if bucket is None or bucket.is_empty():
            raise RuntimeError(
                f"Frequency chain is empty while tracking {len(self._buckets)} keys"
            )
        return bucket.first_key()

    def frequency_of(self, key: Hashable) -> Optional[int]:
        bucket = self._buckets.get(key)
        return bucket.frequency if bucket is not None else None

    def buckets(self):
        """Iterate the live chain from the head bucket upwards."""
        bucket = self.head
        while bucket is not None:
            yield bucket
            bucket = bucket.next

    def snapshot(self) -> Dict[int, List[Hashable]]:
        return {bucket.frequency: list(bucket.keys) for bucket in self.buckets()}

    def counts(self) -> Dict[int, int]:
        return {bucket.frequency: len(bucket) for bucket in self.buckets()}

    def clear(self) -> None:
        # Drop links so the old chain does not hold keys alive
        bucket = self.head.next
        while bucket is not None:
            following = bucket.next
            bucket.prev = bucket.next = None
            bucket = following
        self.head = FrequencyBucket(1)
        self._buckets.clear()
