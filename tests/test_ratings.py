"""
Tests for building item rating vectors
"""
import pytest

from itemknn.ratings import Rating, item_rating_vector


def test_item_rating_vector_sorted_by_user():
    vector = item_rating_vector([Rating(5, 10, 3.0), Rating(2, 10, 4.5), Rating(9, 10, 1.0)])

    assert vector.keys().tolist() == [2, 5, 9]
    assert vector.values().tolist() == [4.5, 3.0, 1.0]
    assert not vector.is_frozen()


def test_item_rating_vector_last_rating_wins():
    """Test a user rating the item twice keeps the later rating"""
    vector = item_rating_vector([Rating(1, 10, 3.0, 100), Rating(2, 10, 2.0), Rating(1, 10, 5.0, 200)])
    assert vector.to_dict() == {1: 5.0, 2: 2.0}


def test_item_rating_vector_empty():
    assert item_rating_vector([]).size() == 0


def test_item_rating_vector_rejects_mixed_items():
    with pytest.raises(ValueError):
        item_rating_vector([Rating(1, 10, 3.0), Rating(2, 11, 2.0)])
