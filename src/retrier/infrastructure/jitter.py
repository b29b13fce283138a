"""Random jitter for inter-attempt sleeps"""

import random


def jitter(variance: float) -> float:
    """Return a random delay drawn uniformly from ``[0, variance)``

    Returns exactly 0.0 when ``variance`` is zero or negative.
    """
    if variance <= 0:
        return 0.0
    return random.random() * variance
