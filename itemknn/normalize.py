"""Item vector normalizers.

A normalizer is any object with a ``normalize(item, reference, target)``
method. It rewrites the values of ``target`` in place using statistics of
``reference``; the key set never changes. The build context builder passes
the same vector as both arguments.

If items are mean-centered here, the scorer should add the item mean back
(an item-mean baseline) when turning similarities into predictions.
"""
import numpy as np


class IdentityVectorNormalizer:
    def normalize(self, item, reference, target):
        return target

    def __repr__(self):
        return "IdentityVectorNormalizer()"


class MeanCenteringVectorNormalizer:
    def normalize(self, item, reference, target):
        target.add_scalar(-reference.mean())
        return target

    def __repr__(self):
        return "MeanCenteringVectorNormalizer()"


class ZScoreVectorNormalizer:
    # population std; a constant vector only gets centered
    def normalize(self, item, reference, target):
        mean = reference.mean()
        std = float(np.std(reference.values())) if len(reference) else 0.0
        target.add_scalar(-mean)
        if std > 0:
            target.multiply_scalar(1.0 / std)
        return target

    def __repr__(self):
        return "ZScoreVectorNormalizer()"


class BaselineSubtractingVectorNormalizer:
    """Subtract a precomputed per-item baseline, e.g. a damped item mean."""

    def __init__(self, baselines, default=0.0):
        self.baselines = dict(baselines)
        self.default = default

    def normalize(self, item, reference, target):
        target.add_scalar(-self.baselines.get(item, self.default))
        return target

    def __repr__(self):
        return f"BaselineSubtractingVectorNormalizer({len(self.baselines)} items, default={self.default})"


NORMALIZERS = {
    "identity": IdentityVectorNormalizer,
    "mean-center": MeanCenteringVectorNormalizer,
    "zscore": ZScoreVectorNormalizer,
}


def normalizer_for(name):
    try:
        return NORMALIZERS[name]()
    except KeyError:
        raise ValueError(f"unknown normalizer {name!r}, expected one of {sorted(NORMALIZERS)}") from None
