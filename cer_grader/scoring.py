"""
Maps an error rate to extra-credit points.
"""

from .config import MAX_SCORE, SCORE_ANCHORS, SCORE_FLOOR


def calculate_score(error_rate: float) -> float:
    """
    Calculate the extra-credit score for an error rate.

    The rate is clamped to [0, 1], then mapped by linear interpolation
    between the ``SCORE_ANCHORS`` points: 0% -> 100, 50% -> 50,
    95% -> 5. Anything above 95% earns the 5 point floor.

    This never returns 0; a submission that could not be evaluated at
    all is zeroed by the pipeline, not here.

    Args:
        error_rate: Error rate, nominally between 0 and 1.

    Returns:
        Score between ``SCORE_FLOOR`` and ``MAX_SCORE``.
    """
    rate = min(max(error_rate, 0.0), 1.0)

    if rate == 0.0:
        return MAX_SCORE

    for (x1, y1), (x2, y2) in zip(SCORE_ANCHORS, SCORE_ANCHORS[1:]):
        if rate <= x2:
            # Fraction first so the anchor points come out exact
            fraction = (rate - x1) / (x2 - x1)
            return y1 + (y2 - y1) * fraction

    return SCORE_FLOOR
