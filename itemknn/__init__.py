from itemknn.builder import BuildState, ItemwiseBuildContextBuilder
from itemknn.context import BuildContext
from itemknn.errors import (BuildCancelledError, BuildContextError, DataSourceError,
                            DuplicateItemGroupError, InvalidStateError, NormalizerError)
from itemknn.keys import SortedKeyIndex
from itemknn.normalize import (BaselineSubtractingVectorNormalizer, IdentityVectorNormalizer,
                               MeanCenteringVectorNormalizer, ZScoreVectorNormalizer, normalizer_for)
from itemknn.ratings import Rating, RatingGroup, item_rating_vector
from itemknn.sources import CsvRatingSource, DataFrameRatingSource, ListRatingSource, RatingGroupStream
from itemknn.vectors import MutableSparseVector, SparseVector

__version__ = "0.1.0"
