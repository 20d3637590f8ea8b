# sampling.py

import logging

import numpy as np

logger = logging.getLogger(__name__)

NORM_TOLERANCE = 1e-8


class InvalidDistribution(ValueError):
    """Weights are negative or do not sum to 1."""


def weighted_choice(weights, rng) -> int:
    """
    Draw an index from the discrete distribution `weights`.

    Consumes exactly one `rng.random()` draw and returns the smallest index
    with non-zero weight whose cumulative weight reaches the draw. If
    rounding leaves the running sum short of the draw, the last index with
    non-zero weight is returned.
    """
    weights = np.asarray(weights, dtype=float)
    if weights.ndim != 1 or weights.size == 0:
        raise InvalidDistribution("Weights must be a non-empty 1-D sequence")
    if not (weights >= 0).all():
        raise InvalidDistribution("Weights must be non-negative numbers")
    total = weights.sum()
    if not abs(total - 1.0) <= NORM_TOLERANCE:
        raise InvalidDistribution(f"Weights sum to {total}, expected 1")

    choice = rng.random()
    cumsum = 0.0
    last = 0
    for k, w in enumerate(weights):
        if w == 0:
            continue
        cumsum += w
        last = k
        if cumsum >= choice:
            return k

    logger.debug("Cumulative weight %r fell short of draw %r", cumsum, choice)
    return last
