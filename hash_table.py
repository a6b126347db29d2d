import logging

from config import TABLE_CAPACITY

logger = logging.getLogger(__name__)

# Marks a slot that has never held a key
_EMPTY = object()


class TableFullError(Exception):
    """Raised when a new key arrives and every slot is already taken."""


### HASH FUNCTION ###
def string_hash(text):
    """
    Polynomial rolling hash (base 31) folded to a signed 32-bit integer.
    Unlike the built-in hash() it does not change between interpreter runs,
    so slot order (and therefore tree tie-breaks) is reproducible.
    """
    h = 0
    for ch in text:
        h = (31 * h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


### HASH TABLE ###
class HashTable:
    """
    Fixed-capacity hash table using open addressing with linear probing.

    Keys live directly in one array of `capacity` slots; a collision scans
    forward (wrapping at the end) until an empty slot or the same key is
    found. The table never resizes and has no delete operation, so a probe
    can stop at the first empty slot it meets.
    """

    def __init__(self, capacity=TABLE_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.size = 0
        self.max_probe = 0
        # probe_stats[n] = number of insertions that needed n probes
        self.probe_stats = [0] * capacity
        self._keys = [_EMPTY] * capacity
        self._values = [None] * capacity

    def _hash(self, key):
        h = string_hash(key) if isinstance(key, str) else hash(key)
        return abs(h) % self.capacity

    def _probe(self, key):
        """
        Walk from the key's home slot.
        Returns (index, probes, found). index is None when the walk came
        back to the home slot without meeting the key or an empty slot.
        """
        index = self._hash(key)
        for probes in range(self.capacity):
            stored = self._keys[index]
            if stored is _EMPTY:
                return index, probes, False
            if stored == key:
                return index, probes, True
            index += 1
            if index == self.capacity:
                index = 0
        return None, self.capacity, False

    def put(self, key, value):
        """Insert key with value, or overwrite the value of an existing key."""
        index, probes, found = self._probe(key)

        if found:
            self._values[index] = value
            return

        if index is None:
            raise TableFullError(
                f"cannot insert {key!r}: all {self.capacity} slots are occupied"
            )

        self._keys[index] = key
        self._values[index] = value
        self.size += 1
        self.probe_stats[probes] += 1
        self.max_probe = max(self.max_probe, probes)

    def get(self, key, default=None):
        """Return the value stored for key, or default when it is absent."""
        index, _, found = self._probe(key)
        return self._values[index] if found else default

    def contains_key(self, key):
        return self._probe(key)[2]

    def keys(self):
        """All stored keys, in slot order."""
        return [k for k in self._keys if k is not _EMPTY]

    def values(self):
        """All stored values, in the same slot order as keys()."""
        return [v for k, v in zip(self._keys, self._values) if k is not _EMPTY]

    def items(self):
        return [(k, v) for k, v in zip(self._keys, self._values) if k is not _EMPTY]

    def __getitem__(self, key):
        index, _, found = self._probe(key)
        if not found:
            raise KeyError(key)
        return self._values[index]

    def __setitem__(self, key, value):
        self.put(key, value)

    def __contains__(self, key):
        return self.contains_key(key)

    def __iter__(self):
        return iter(self.keys())

    def __len__(self):
        return self.size

    def __repr__(self):
        return f"HashTable(size={self.size}, capacity={self.capacity})"

    ### STATISTICS ###
    def stats(self):
        """
        Summarise how well the table is behaving: entries, buckets, the
        histogram of probes per insertion (trailing zeros dropped), the
        longest probe, how full the table is and the mean probe length.
        The summary is logged and returned as a dict.
        """
        histogram = list(self.probe_stats[:self.max_probe + 1]) if self.size else []
        total_probes = sum(n * count for n, count in enumerate(histogram))

        report = {
            "entries": self.size,
            "buckets": self.capacity,
            "histogram": histogram,
            "max_probe": self.max_probe,
            "fill_percentage": round(self.size / self.capacity * 100.0, 6),
            "average_probe": round(total_probes / self.size, 6) if self.size else 0.0,
        }

        logger.info(
            "Hash Table Stats\n"
            "===================\n"
            "Number of Entries: %d\n"
            "Number of Buckets: %d\n"
            "Histogram of probes: %s\n"
            "Max Linear Probe: %d\n"
            "Fill Percentage: %.6f%%\n"
            "Average Linear Probe: %.6f",
            report["entries"], report["buckets"], report["histogram"],
            report["max_probe"], report["fill_percentage"], report["average_probe"],
        )
        return report
