"""
Tests for item vector normalizers
"""
import math

import pytest

from itemknn.normalize import (BaselineSubtractingVectorNormalizer, IdentityVectorNormalizer,
                               MeanCenteringVectorNormalizer, ZScoreVectorNormalizer, normalizer_for)
from itemknn.vectors import MutableSparseVector


def vec(*values):
    return MutableSparseVector(list(range(1, len(values) + 1)), values)


def test_identity_leaves_values():
    v = vec(3.0, 5.0)
    IdentityVectorNormalizer().normalize(10, v, v)
    assert v.values().tolist() == [3.0, 5.0]


def test_mean_centering():
    v = vec(3.0, 5.0, 4.0)
    MeanCenteringVectorNormalizer().normalize(10, v, v)
    assert v.values().tolist() == pytest.approx([-1.0, 1.0, 0.0], abs=1e-9)


def test_mean_centering_uses_reference():
    ref = vec(2.0, 4.0)
    target = vec(10.0, 10.0)
    MeanCenteringVectorNormalizer().normalize(10, ref, target)
    assert target.values().tolist() == [7.0, 7.0]
    assert ref.values().tolist() == [2.0, 4.0]


def test_zscore():
    v = vec(1.0, 2.0, 3.0)
    ZScoreVectorNormalizer().normalize(10, v, v)
    s = math.sqrt(2.0 / 3.0)
    assert v.values().tolist() == pytest.approx([-1.0 / s, 0.0, 1.0 / s])


def test_zscore_constant_vector_is_centered():
    v = vec(4.0, 4.0)
    ZScoreVectorNormalizer().normalize(10, v, v)
    assert v.values().tolist() == [0.0, 0.0]


def test_normalizers_accept_empty_vectors():
    for norm in (MeanCenteringVectorNormalizer(), ZScoreVectorNormalizer()):
        v = MutableSparseVector()
        norm.normalize(10, v, v)
        assert v.size() == 0


def test_baseline_subtracting():
    norm = BaselineSubtractingVectorNormalizer({10: 3.5}, default=1.0)
    v = vec(4.0, 3.0)
    norm.normalize(10, v, v)
    assert v.values().tolist() == [0.5, -0.5]

    w = vec(4.0)
    norm.normalize(99, w, w)
    assert w.values().tolist() == [3.0]


def test_normalizer_for_names():
    assert isinstance(normalizer_for("identity"), IdentityVectorNormalizer)
    assert isinstance(normalizer_for("mean-center"), MeanCenteringVectorNormalizer)
    assert isinstance(normalizer_for("zscore"), ZScoreVectorNormalizer)
    with pytest.raises(ValueError):
        normalizer_for("median")
