import numpy as np

from itemknn.errors import InvalidStateError

KEY_DTYPE = np.int64
VALUE_DTYPE = np.float64


def _readonly(arr):
    view = arr.view()
    view.flags.writeable = False
    return view


def _check_layout(keys, values):
    if keys.ndim != 1 or values.ndim != 1:
        raise ValueError("keys and values must be one-dimensional")
    if keys.shape != values.shape:
        raise ValueError(f"{len(keys)} keys but {len(values)} values")
    if len(keys) > 1 and not np.all(keys[1:] > keys[:-1]):
        raise ValueError("keys must be strictly increasing")


class _VectorBase:
    """Read API shared by the immutable and mutable sparse vectors.

    Storage is a pair of parallel arrays: sorted int64 keys (user ids) and
    float64 values aligned with them by position.
    """

    __slots__ = ("_keys", "_values")
    __hash__ = None

    def keys(self):
        return _readonly(self._keys)

    def values(self):
        return _readonly(self._values)

    def size(self):
        return len(self._keys)

    def __len__(self):
        return len(self._keys)

    def _position(self, key):
        pos = int(np.searchsorted(self._keys, key))
        if pos < len(self._keys) and self._keys[pos] == key:
            return pos
        return None

    def get(self, key, default=None):
        pos = self._position(key)
        if pos is None:
            return default
        return float(self._values[pos])

    def __contains__(self, key):
        return self._position(key) is not None

    def items(self):
        return zip(self._keys.tolist(), self._values.tolist())

    def __iter__(self):
        return self.items()

    def to_dict(self):
        return dict(self.items())

    def sum(self):
        return float(self._values.sum())

    def mean(self):
        if len(self._values) == 0:
            return 0.0
        return float(self._values.mean())

    def norm(self):
        return float(np.linalg.norm(self._values))

    # dot product over the shared keys only
    def dot(self, other):
        _, mine, theirs = np.intersect1d(self._keys, other._keys,
                                         assume_unique=True, return_indices=True)
        return float(np.dot(self._values[mine], other._values[theirs]))

    def mutable_copy(self):
        return MutableSparseVector._wrap(self._keys, self._values.copy())

    def __eq__(self, other):
        if not isinstance(other, _VectorBase):
            return NotImplemented
        return (np.array_equal(self._keys, other._keys)
                and np.array_equal(self._values, other._values))

    def __repr__(self):
        return f"{type(self).__name__}({self.to_dict()!r})"


class SparseVector(_VectorBase):
    """Immutable mapping from long keys to double values, ordered by key."""

    __slots__ = ()

    def __init__(self, keys=(), values=()):
        keys = np.array(keys, dtype=KEY_DTYPE)
        values = np.array(values, dtype=VALUE_DTYPE)
        _check_layout(keys, values)
        keys.flags.writeable = False
        values.flags.writeable = False
        self._keys = keys
        self._values = values

    @classmethod
    def _wrap(cls, keys, values):
        # takes ownership of already validated, read-only arrays
        vec = cls.__new__(cls)
        vec._keys = keys
        vec._values = values
        return vec

    @classmethod
    def empty(cls):
        return cls()

    @classmethod
    def from_dict(cls, mapping):
        keys = sorted(mapping)
        return cls(keys, [mapping[k] for k in keys])


class MutableSparseVector(_VectorBase):
    """Sparse vector whose values can be rewritten in place.

    The key set is fixed when the vector is created. ``freeze`` hands the
    storage over to an immutable :class:`SparseVector`; after that every
    mutation fails with :class:`InvalidStateError`.
    """

    __slots__ = ("_frozen",)

    def __init__(self, keys=(), values=()):
        keys = np.array(keys, dtype=KEY_DTYPE)
        values = np.array(values, dtype=VALUE_DTYPE)
        _check_layout(keys, values)
        keys.flags.writeable = False
        self._keys = keys
        self._values = values
        self._frozen = False

    @classmethod
    def _wrap(cls, keys, values):
        # keys are never written after creation
        keys.flags.writeable = False
        vec = cls.__new__(cls)
        vec._keys = keys
        vec._values = values
        vec._frozen = False
        return vec

    @classmethod
    def create(cls, keys, values):
        """Build a vector from unsorted keys, keeping the last value of a repeated key."""
        keys = np.asarray(keys, dtype=KEY_DTYPE)
        values = np.asarray(values, dtype=VALUE_DTYPE)
        if keys.shape != values.shape:
            raise ValueError(f"{len(keys)} keys but {len(values)} values")
        # np.unique reports the first occurrence, so search the reversed arrays
        uniq, first = np.unique(keys[::-1], return_index=True)
        return cls._wrap(uniq, values[::-1][first].copy())

    def is_frozen(self):
        return self._frozen

    def _check_mutable(self):
        if self._frozen:
            raise InvalidStateError("vector has been frozen")

    def set(self, key, value):
        self._check_mutable()
        pos = self._position(key)
        if pos is None:
            raise KeyError(key)
        self._values[pos] = value

    def set_values(self, values):
        self._check_mutable()
        values = np.asarray(values, dtype=VALUE_DTYPE)
        if values.shape != self._values.shape:
            raise ValueError(f"expected {len(self._values)} values, got {values.shape}")
        self._values[:] = values

    def add_scalar(self, x):
        self._check_mutable()
        self._values += x

    def multiply_scalar(self, x):
        self._check_mutable()
        self._values *= x

    def freeze(self):
        self._check_mutable()
        self._frozen = True
        self._values.flags.writeable = False
        return SparseVector._wrap(self._keys, self._values)
