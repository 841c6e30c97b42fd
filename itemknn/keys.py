import numpy as np

from itemknn.vectors import KEY_DTYPE, _readonly


class SortedKeyIndex:
    """Dense index over a set of long keys.

    Position ``i`` maps to the ``i``-th smallest key; lookups by key use a
    binary search over the sorted key array. The index is immutable, which
    also makes it usable as a packed sorted set of ids.
    """

    __slots__ = ("_keys",)
    __hash__ = None

    def __init__(self, keys=()):
        if isinstance(keys, np.ndarray):
            arr = keys.astype(KEY_DTYPE, copy=False)
        else:
            arr = np.fromiter(keys, dtype=KEY_DTYPE)
        # np.unique sorts and returns a fresh array the index owns
        arr = np.unique(arr)
        arr.flags.writeable = False
        self._keys = arr

    @classmethod
    def from_iterable(cls, keys):
        return cls(keys)

    @classmethod
    def empty(cls):
        return cls()

    def size(self):
        return len(self._keys)

    def __len__(self):
        return len(self._keys)

    def keys(self):
        return _readonly(self._keys)

    def key_at(self, position):
        if position < 0 or position >= len(self._keys):
            raise IndexError(f"position {position} out of range for {len(self._keys)} keys")
        return int(self._keys[position])

    def position_of(self, key):
        pos = int(np.searchsorted(self._keys, key))
        if pos < len(self._keys) and self._keys[pos] == key:
            return pos
        return None

    def __contains__(self, key):
        return self.position_of(key) is not None

    def __iter__(self):
        return iter(self._keys.tolist())

    def __eq__(self, other):
        if not isinstance(other, SortedKeyIndex):
            return NotImplemented
        return np.array_equal(self._keys, other._keys)

    def __repr__(self):
        return f"SortedKeyIndex({self._keys.tolist()!r})"
