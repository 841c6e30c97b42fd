"""
Shared fixtures for the build context tests
"""
import pytest

from itemknn.ratings import Rating, RatingGroup
from itemknn.sources import RatingGroupStream


class SpySource:
    """Rating source that counts stream closes and can fail part way through."""

    def __init__(self, ratings, fail_at=None, error=None):
        self.groups = {}
        for r in ratings:
            self.groups.setdefault(r.item, []).append(r)
        self.fail_at = fail_at
        self.error = error or OSError("cursor lost")
        self.opened = 0
        self.close_count = 0

    def _groups(self):
        for n, (item, rs) in enumerate(self.groups.items()):
            if self.fail_at is not None and n == self.fail_at:
                raise self.error
            yield RatingGroup(item, rs)

    def _closed(self):
        self.close_count += 1

    def grouped_by_item(self):
        self.opened += 1
        return RatingGroupStream(self._groups(), on_close=self._closed)


class GroupListSource(SpySource):
    """Spy source yielding a fixed list of groups, repeats included."""

    def __init__(self, groups):
        super().__init__([])
        self.group_list = groups

    def _groups(self):
        yield from self.group_list


def ratings(*triples):
    return [Rating(u, i, float(v)) for u, i, v in triples]


@pytest.fixture
def spy_source():
    return SpySource


@pytest.fixture
def multi_item_ratings():
    return ratings((1, 10, 4), (2, 10, 2), (2, 20, 5), (3, 20, 1))
