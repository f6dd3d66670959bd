"""
Edge Bucket Keys.

Converts model-vs-market disagreement into the discrete bucket keys used by
the historical accuracy table. Three edge types exist:

    - SPREAD_EDGE: |market spread - model fair spread|, nearest 0.5
    - OU_EDGE: model fair total - market total (signed), nearest 0.5
    - MONEYLINE_PROB: max(home win prob, away win prob), nearest 0.05

Rounding is half-up on the scaled value (floor(v * k + 0.5) / k), so exact
halves always move toward positive infinity: 1.25 -> 1.5 and -1.25 -> -1.0.
The aggregate table is bucketed with the same rule, which is why Python's
built-in round() (half-to-even) must not be used here.

Example:
    >>> spread_bucket(model_fair_spread=-2.0, market_spread=-3.5)
    1.5
    >>> moneyline_bucket(0.58, 0.42)
    0.6
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional
import math

import numpy as np


SPREAD_BUCKETS_PER_POINT = 2
MONEYLINE_BUCKETS_PER_UNIT = 20


class EdgeType(str, Enum):
    """Edge types as stored in the aggregate table."""
    SPREAD_EDGE = "SPREAD_EDGE"
    OU_EDGE = "OU_EDGE"
    MONEYLINE_PROB = "MONEYLINE_PROB"

    @classmethod
    def parse(cls, value: Any) -> Optional["EdgeType"]:
        """Return the matching EdgeType, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


def coerce_number(value: Any) -> Optional[float]:
    """
    Convert a store value to float.

    None, NaN, booleans and values that do not parse as numbers become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_to_step(value: float, per_unit: int) -> float:
    """Round half-up to the nearest 1/per_unit."""
    return math.floor(value * per_unit + 0.5) / per_unit


def spread_diff(model_fair_spread: Any, market_spread: Any) -> Optional[float]:
    """
    Signed spread disagreement: market spread minus model fair spread.

    Positive means the market is more generous to the home side than the
    model, i.e. the model has the home team covering.
    """
    fair = coerce_number(model_fair_spread)
    market = coerce_number(market_spread)
    if fair is None or market is None:
        return None
    return market - fair


def ou_diff(model_fair_total: Any, market_total: Any) -> Optional[float]:
    """Signed total disagreement; positive means the model leans Over."""
    fair = coerce_number(model_fair_total)
    market = coerce_number(market_total)
    if fair is None or market is None:
        return None
    return fair - market


def spread_bucket(model_fair_spread: Any, market_spread: Any) -> Optional[float]:
    """Bucket key for SPREAD_EDGE (magnitude only, side tracked separately)."""
    diff = spread_diff(model_fair_spread, market_spread)
    if diff is None:
        return None
    return round_to_step(abs(diff), SPREAD_BUCKETS_PER_POINT)


def ou_bucket(model_fair_total: Any, market_total: Any) -> Optional[float]:
    """Bucket key for OU_EDGE. Sign is kept: Over and Under are separate buckets."""
    diff = ou_diff(model_fair_total, market_total)
    if diff is None:
        return None
    return round_to_step(diff, SPREAD_BUCKETS_PER_POINT)


def moneyline_bucket(home_win_prob: Any, away_win_prob: Any) -> Optional[float]:
    """Bucket key for MONEYLINE_PROB from the favourite's win probability."""
    home = coerce_number(home_win_prob) or 0.0
    away = coerce_number(away_win_prob) or 0.0
    favourite = max(home, away)
    if favourite <= 0:
        return None
    return round_to_step(favourite, MONEYLINE_BUCKETS_PER_UNIT)
