from typing import NamedTuple, Optional, Sequence

import numpy as np

from itemknn.vectors import KEY_DTYPE, VALUE_DTYPE, MutableSparseVector


class Rating(NamedTuple):
    user: int
    item: int
    value: float
    timestamp: Optional[int] = None


class RatingGroup(NamedTuple):
    """All ratings for one item, as yielded by a grouped rating stream."""
    item: int
    ratings: Sequence[Rating]


def item_rating_vector(ratings):
    """Build a mutable vector of user ratings for one item.

    A user rating the item more than once keeps the last rating in list order.
    """
    n = len(ratings)
    users = np.empty(n, dtype=KEY_DTYPE)
    values = np.empty(n, dtype=VALUE_DTYPE)
    item = None
    for i, r in enumerate(ratings):
        if item is None:
            item = r.item
        elif r.item != item:
            raise ValueError(f"ratings for items {item} and {r.item} in one item vector")
        users[i] = r.user
        values[i] = r.value
    return MutableSparseVector.create(users, values)
