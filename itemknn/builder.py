import enum
import logging
import time

from tqdm import tqdm

from itemknn.context import BuildContext
from itemknn.errors import (BuildCancelledError, BuildContextError, DataSourceError,
                            DuplicateItemGroupError, InvalidStateError, NormalizerError)
from itemknn.keys import SortedKeyIndex
from itemknn.ratings import item_rating_vector

logger = logging.getLogger(__name__)


class BuildState(enum.Enum):
    FRESH = "fresh"
    BUILDING = "building"
    DONE = "done"
    FAILED = "failed"


class ItemwiseBuildContextBuilder:
    """Build a :class:`BuildContext` by normalizing ratings per item.

    Ratings are read one item at a time, so item-centric normalizers (such as
    mean centering) see each full item vector in a single pass. If items are
    mean-centered here, use an item-mean baseline in the scorer as well.

    A builder is single use: ``build`` may be called once.
    """

    def __init__(self, data_source, normalizer, progress=False, cancel_event=None):
        if data_source is None:
            raise ValueError("a data source is required")
        if normalizer is None:
            raise ValueError("a normalizer is required")
        self.data_source = data_source
        self.normalizer = normalizer
        self.progress = progress
        self.cancel_event = cancel_event
        self.state = BuildState.FRESH

    def build(self):
        if self.state is not BuildState.FRESH:
            raise InvalidStateError(f"build context builder already used (state {self.state.value})")
        self.state = BuildState.BUILDING
        try:
            context = self._build()
        except BaseException:
            self.state = BuildState.FAILED
            raise
        self.state = BuildState.DONE
        return context

    def _build(self):
        logger.info("constructing build context")
        start = time.perf_counter()
        logger.debug("using normalizer %r", self.normalizer)

        try:
            stream = self.data_source.grouped_by_item()
        except BuildContextError:
            raise
        except Exception as e:
            raise DataSourceError(f"cannot open rating stream: {e}") from e

        user_items = {}
        item_vectors = {}
        try:
            self._read_items(stream, user_items, item_vectors)
        finally:
            stream.close()

        # each user's list holds an item at most once; packing sorts it
        user_item_sets = {user: SortedKeyIndex.from_iterable(items)
                          for user, items in user_items.items()}

        items = SortedKeyIndex.from_iterable(item_vectors.keys())
        item_data = [item_vectors[items.key_at(i)] for i in range(items.size())]

        elapsed = time.perf_counter() - start
        logger.info("finished build context for %d items in %.3fs", items.size(), elapsed)
        return BuildContext(items, item_data, user_item_sets)

    def _read_items(self, stream, user_items, item_vectors):
        groups = tqdm(desc="items", unit="item", disable=not self.progress)
        item = None
        try:
            while True:
                self._check_cancelled(item)
                try:
                    group = next(stream)
                except StopIteration:
                    break
                except BuildContextError:
                    raise
                except Exception as e:
                    where = f"after item {item}" if item is not None else "before the first item"
                    raise DataSourceError(f"failed reading ratings {where}: {e}") from e

                item = group.item
                if item in item_vectors:
                    raise DuplicateItemGroupError("rating stream repeated an item group", item)
                logger.debug("processing ratings for item %s", item)

                try:
                    ratings = group.ratings
                    if len(ratings) and ratings[0].item != item:
                        raise DataSourceError(f"group carries ratings for item {ratings[0].item}", item)
                    vector = item_rating_vector(ratings)
                except (TypeError, ValueError, AttributeError, OverflowError) as e:
                    raise DataSourceError(f"malformed ratings: {e}", item) from e

                self._normalize(item, vector)
                for user in vector.keys().tolist():
                    uis = user_items.get(user)
                    if uis is None:
                        # lists are enough, each item is seen once
                        uis = []
                        user_items[user] = uis
                    uis.append(item)
                item_vectors[item] = vector.freeze()
                groups.update()
        except KeyboardInterrupt as e:
            raise BuildCancelledError("build interrupted", item) from e
        finally:
            groups.close()

    def _normalize(self, item, vector):
        size = vector.size()
        try:
            self.normalizer.normalize(item, vector, vector)
        except BuildContextError:
            raise
        except Exception as e:
            raise NormalizerError(f"normalizer {self.normalizer!r} failed: {e}", item) from e
        if vector.size() != size or vector.is_frozen():
            raise NormalizerError(f"normalizer {self.normalizer!r} changed the item vector", item)

    def _check_cancelled(self, item):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise BuildCancelledError("build cancelled", item)
