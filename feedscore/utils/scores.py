"""
Score helpers: decay, saturation, and time utilities used by every stage.
"""

import math
from datetime import datetime

LN2 = math.log(2.0)


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional days from earlier to later (negative when earlier is after later)."""
    return (later - earlier).total_seconds() / 86400.0


def half_life_decay(t: float, half_life: float) -> float:
    """
    Exponential decay exp(-ln2 * t / half_life).

    1.0 at t=0, 0.5 at t=half_life, strictly decreasing in t.
    """
    return math.exp(-LN2 * t / half_life)


def saturate(x: float) -> float:
    """Saturation transform 1 - exp(-x): bounded in [0, 1) for x >= 0."""
    return 1.0 - math.exp(-x)
