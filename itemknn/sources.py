"""Rating sources that stream ratings grouped by item.

Every source exposes ``grouped_by_item()``, which opens a
:class:`RatingGroupStream`. The stream is single-pass and must be closed
once the consumer is done with it, whether or not iteration finished.
"""
import logging

import numpy as np
import pandas as pd

from itemknn.errors import DataSourceError
from itemknn.ratings import Rating, RatingGroup

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1_000_000


class RatingGroupStream:
    """Single-pass iterator over :class:`RatingGroup` with a close obligation."""

    def __init__(self, groups, on_close=None):
        self._groups = iter(groups)
        self._on_close = on_close
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        if self.closed:
            raise StopIteration
        return next(self._groups)

    def close(self):
        if self.closed:
            return
        self.closed = True
        if hasattr(self._groups, "close"):
            self._groups.close()
        if self._on_close is not None:
            self._on_close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def _frame_ratings(frame, item, user_col, rating_col, timestamp_col):
    users = frame[user_col].tolist()
    values = frame[rating_col].tolist()
    if timestamp_col is not None:
        stamps = frame[timestamp_col].tolist()
    else:
        stamps = [None] * len(users)
    return [Rating(int(u), item, float(v), t) for u, v, t in zip(users, values, stamps)]


class ListRatingSource:
    """In-memory ratings; groups come out in first-seen item order."""

    def __init__(self, ratings):
        self.ratings = list(ratings)

    def grouped_by_item(self):
        groups = {}
        for r in self.ratings:
            groups.setdefault(r.item, []).append(r)
        return RatingGroupStream(RatingGroup(item, rs) for item, rs in groups.items())

    def __repr__(self):
        return f"ListRatingSource({len(self.ratings)} ratings)"


class DataFrameRatingSource:
    """Ratings held in a pandas DataFrame, grouped in ascending item order."""

    def __init__(self, df, user_col="user", item_col="item", rating_col="rating", timestamp_col=None):
        self.df = df
        self.user_col = user_col
        self.item_col = item_col
        self.rating_col = rating_col
        self.timestamp_col = timestamp_col

    def _columns(self):
        cols = [self.user_col, self.item_col, self.rating_col]
        if self.timestamp_col is not None:
            cols.append(self.timestamp_col)
        return cols

    def grouped_by_item(self):
        missing = [c for c in self._columns() if c not in self.df.columns]
        if missing:
            raise DataSourceError(f"rating frame is missing columns {missing}")
        no_item = int(self.df[self.item_col].isna().sum())
        if no_item:
            raise DataSourceError(f"{no_item} rating rows have no item id")
        return RatingGroupStream(self._groups())

    def _groups(self):
        for item, frame in self.df.groupby(self.item_col, sort=True, dropna=False):
            item = int(item)
            yield RatingGroup(item, _frame_ratings(frame, item, self.user_col,
                                                   self.rating_col, self.timestamp_col))

    def __repr__(self):
        return f"DataFrameRatingSource({len(self.df)} rows)"


class CsvRatingSource:
    """Ratings streamed from a CSV file in chunks.

    Rows must be contiguous by item (e.g. the file is sorted by item id).
    A run of rows for one item that crosses a chunk boundary is joined into
    a single group; an item that shows up again after another item produces
    a second group for it.
    """

    def __init__(self, path, chunksize=CHUNK_SIZE, user_col="user", item_col="item",
                 rating_col="rating", timestamp_col=None):
        self.path = path
        self.chunksize = chunksize
        self.user_col = user_col
        self.item_col = item_col
        self.rating_col = rating_col
        self.timestamp_col = timestamp_col

    def grouped_by_item(self):
        cols = [self.user_col, self.item_col, self.rating_col]
        if self.timestamp_col is not None:
            cols.append(self.timestamp_col)
        logger.debug("opening %s in chunks of %d rows", self.path, self.chunksize)
        try:
            reader = pd.read_csv(self.path, chunksize=self.chunksize, usecols=cols)
        except (OSError, ValueError) as e:
            raise DataSourceError(f"cannot read ratings from {self.path}: {e}") from e
        return RatingGroupStream(self._groups(reader), on_close=reader.close)

    def _groups(self, reader):
        pending_item = None
        pending = []
        for chunk in reader:
            items = chunk[self.item_col].to_numpy()
            if len(items) == 0:
                continue
            # split the chunk into runs of equal item ids
            breaks = np.flatnonzero(items[1:] != items[:-1]) + 1
            starts = np.concatenate(([0], breaks))
            ends = np.concatenate((breaks, [len(items)]))
            for start, end in zip(starts, ends):
                item = int(items[start])
                rows = _frame_ratings(chunk.iloc[start:end], item, self.user_col,
                                      self.rating_col, self.timestamp_col)
                if item == pending_item:
                    pending.extend(rows)
                    continue
                if pending_item is not None:
                    yield RatingGroup(pending_item, pending)
                pending_item, pending = item, rows
        if pending_item is not None:
            yield RatingGroup(pending_item, pending)

    def __repr__(self):
        return f"CsvRatingSource({self.path!r})"
