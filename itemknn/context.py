from types import MappingProxyType

import numpy as np
from scipy.sparse import csr_matrix

from itemknn.keys import SortedKeyIndex
from itemknn.vectors import VALUE_DTYPE

_NO_ITEMS = SortedKeyIndex.empty()


class BuildContext:
    """Item data prepared for item-item model construction.

    ``item_data[i]`` is the normalized rating vector of item
    ``items.key_at(i)``; ``user_item_sets`` maps each user to the sorted set
    of items that user rated. Instances are immutable and safe to share.
    """

    __slots__ = ("_items", "_item_data", "_user_item_sets")
    __hash__ = None

    def __init__(self, items, item_data, user_item_sets):
        item_data = tuple(item_data)
        if len(item_data) != items.size():
            raise ValueError(f"{items.size()} items but {len(item_data)} item vectors")
        self._items = items
        self._item_data = item_data
        self._user_item_sets = MappingProxyType(dict(user_item_sets))

    @property
    def items(self):
        return self._items

    @property
    def item_data(self):
        return self._item_data

    @property
    def user_item_sets(self):
        return self._user_item_sets

    def item_vector(self, item):
        pos = self._items.position_of(item)
        if pos is None:
            raise KeyError(item)
        return self._item_data[pos]

    def user_items(self, user):
        return self._user_item_sets.get(user, _NO_ITEMS)

    def users(self):
        return sorted(self._user_item_sets)

    def num_ratings(self):
        return sum(len(v) for v in self._item_data)

    def item_pairs(self):
        """Iterate over ``(item_a, vector_a, item_b, vector_b)`` with ``item_a < item_b``."""
        n = len(self._item_data)
        for i in range(n):
            item_a = self._items.key_at(i)
            vec_a = self._item_data[i]
            for j in range(i + 1, n):
                yield item_a, vec_a, self._items.key_at(j), self._item_data[j]

    def to_csr(self):
        """Return the item x user rating matrix and the user index for its columns."""
        users = SortedKeyIndex.from_iterable(self._user_item_sets.keys())
        lengths = [len(v) for v in self._item_data]
        indptr = np.zeros(len(lengths) + 1, dtype=np.int64)
        np.cumsum(lengths, out=indptr[1:])
        if self._item_data:
            keys = np.concatenate([v.keys() for v in self._item_data])
            data = np.concatenate([v.values() for v in self._item_data])
        else:
            keys = np.empty(0, dtype=np.int64)
            data = np.empty(0, dtype=VALUE_DTYPE)
        # keys of every vector are users in the index, so this maps them to columns
        cols = np.searchsorted(users.keys(), keys)
        matrix = csr_matrix((data, cols, indptr), shape=(len(lengths), users.size()))
        return matrix, users

    def __eq__(self, other):
        if not isinstance(other, BuildContext):
            return NotImplemented
        return (self._items == other._items
                and self._item_data == other._item_data
                and dict(self._user_item_sets) == dict(other._user_item_sets))

    def __repr__(self):
        return (f"BuildContext({self._items.size()} items, "
                f"{len(self._user_item_sets)} users, {self.num_ratings()} ratings)")
