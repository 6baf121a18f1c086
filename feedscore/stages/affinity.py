"""
Affinity aggregation (per user, per dimension).

Groups weighted interaction scores by category / genre / tag key, divides each
key's sum by sqrt(n_k) to damp keys backed by many events, then applies a
softmax across the dimension's keys so the weights sum to 1.
"""

import math
from collections import defaultdict
from typing import Dict, List, Sequence

import numpy as np

from ..models.config import DIMENSIONS
from ..models.scoring import AffinityWeight, UserAffinity, WeightedInteraction


def softmax(raw_scores: Sequence[float]) -> List[float]:
    """
    Numerically stable softmax (temperature 1).

    Subtracts the max before exponentiating; softmax is shift-invariant so the
    result is unchanged. Empty input gives an empty list.
    """
    if len(raw_scores) == 0:
        return []
    arr = np.asarray(raw_scores, dtype=np.float64)
    exps = np.exp(arr - arr.max())
    return (exps / exps.sum()).tolist()


def raw_key_scores(
    weighted: List[WeightedInteraction],
    dimension: str,
) -> Dict[str, float]:
    """
    Sample-size normalized score per key: sum of scores / sqrt(n_k).

    An interaction contributes to every key its content item carries in the dimension.
    """
    sums: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for wi in weighted:
        for key in wi.keys_for(dimension):
            sums[key] += wi.score
            counts[key] += 1
    return {key: sums[key] / math.sqrt(counts[key]) for key in sums}


def aggregate_dimension(
    user_id: str,
    weighted: List[WeightedInteraction],
    dimension: str,
) -> List[AffinityWeight]:
    """AffinityWeight records for one dimension, ordered by key. Empty when no key qualifies."""
    raw = raw_key_scores(weighted, dimension)
    if not raw:
        return []
    keys = sorted(raw)
    weights = softmax([raw[k] for k in keys])
    return [
        AffinityWeight(user_id=user_id, dimension=dimension, key=k, weight=w)
        for k, w in zip(keys, weights)
    ]


def compute_user_affinity(
    user_id: str,
    weighted: List[WeightedInteraction],
) -> UserAffinity:
    """Affinity weights of one user across category, genre and tag."""
    records: List[AffinityWeight] = []
    for dimension in DIMENSIONS:
        records.extend(aggregate_dimension(user_id, weighted, dimension))
    return UserAffinity.from_weights(user_id, records)
