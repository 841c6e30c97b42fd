import os
import logging
from itemknn.builder import ItemwiseBuildContextBuilder
from itemknn.normalize import normalizer_for
from itemknn.sources import CsvRatingSource

# ratings csv must be sorted by item, e.g. sort -t, -k2 -n
RATING_CSV = os.environ.get("ITEMKNN_RATING_CSV", "data/ratings_by_item.csv")
CHUNK_SIZE = int(os.environ.get("ITEMKNN_CHUNK_SIZE", 1_000_000))   # higher is faster
NORMALIZER = os.environ.get("ITEMKNN_NORMALIZER", "mean-center")    # identity / mean-center / zscore
SHOW_PROGRESS = os.environ.get("ITEMKNN_PROGRESS", "1") == "1"
LOG_LEVEL = os.environ.get("ITEMKNN_LOG_LEVEL", "INFO")

# column names in the ratings file
USER_COL = "userID"
ITEM_COL = "animeID"
RATING_COL = "rating"


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    source = CsvRatingSource(RATING_CSV, chunksize=CHUNK_SIZE, user_col=USER_COL,
                             item_col=ITEM_COL, rating_col=RATING_COL)
    builder = ItemwiseBuildContextBuilder(source, normalizer_for(NORMALIZER), progress=SHOW_PROGRESS)
    context = builder.build()

    matrix, users = context.to_csr()
    print(f"Items: {context.items.size():,}, users: {users.size():,}, ratings: {matrix.nnz:,}")
    if context.items.size():
        density = matrix.nnz / (matrix.shape[0] * max(matrix.shape[1], 1))
        print(f"Item x user matrix density: {density:.6f}")
    return context


if __name__ == "__main__":
    main()
