"""
Per-sport field maps.

Each sport's store exposes the same concepts under different column names
(NCAAB's `over_under` is NBA's `total_line`, CFB reports `pred_spread` where
the others report `model_fair_home_spread`). A SportFieldMap lists the
accepted aliases for every concept so a single enrichment engine serves all
sports.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .buckets import coerce_number

Aliases = Tuple[str, ...]


def is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value))
    return False


def resolve(aliases: Aliases, *sources: Optional[Mapping[str, Any]]) -> Any:
    """
    Return the first non-missing value for any alias.

    Sources are scanned in order (e.g. latest prediction first, then the game
    row), and within each source aliases are tried in order.
    """
    for source in sources:
        if source is None:
            continue
        for alias in aliases:
            value = source.get(alias)
            if not is_missing(value):
                return value
    return None


def as_records(rows: Any) -> List[Mapping[str, Any]]:
    """Rows as a list of mappings; accepts a DataFrame, an iterable or None."""
    if rows is None:
        return []
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict("records")
    return list(rows)


def id_key(value: Any) -> Any:
    """Normalise an id for matching across tables."""
    # Store ids arrive as int from one table and str or float from another
    if is_missing(value):
        return None
    number = coerce_number(value)
    if number is not None and number.is_integer():
        return int(number)
    return str(value)


@dataclass(frozen=True)
class SportFieldMap:
    """Column aliases for one sport's game and prediction rows."""
    name: str
    game_id: Aliases = ("game_id",)
    home_team: Aliases = ("home_team",)
    away_team: Aliases = ("away_team",)
    game_date: Aliases = ("game_date",)
    tipoff_time: Aliases = ("tipoff_time_et",)
    market_spread: Aliases = ("vegas_home_spread", "home_spread")
    market_total: Aliases = ("vegas_total", "total_line")
    model_fair_spread: Aliases = ("model_fair_home_spread",)
    model_fair_total: Aliases = ("model_fair_total", "pred_total_points")
    home_win_prob: Aliases = ("home_win_prob",)
    away_win_prob: Aliases = ("away_win_prob",)
    home_moneyline: Aliases = ("home_moneyline", "home_ml")
    away_moneyline: Aliases = ("away_moneyline", "away_ml")
    # Sources that only publish the home side's win probability
    derive_away_win_prob: bool = False


NBA = SportFieldMap(name="nba")

NCAAB = SportFieldMap(
    name="ncaab",
    game_date=("game_date_et", "game_date"),
    market_spread=("vegas_home_spread", "spread", "home_spread"),
    market_total=("vegas_total", "over_under", "total_line"),
    model_fair_total=("pred_total_points", "model_fair_total"),
)

CFB = SportFieldMap(
    name="cfb",
    game_id=("id", "game_id", "training_key", "unique_id"),
    tipoff_time=("game_time", "start_time", "tipoff_time_et"),
    market_spread=("api_spread", "home_spread"),
    market_total=("api_over_line", "total_line"),
    model_fair_spread=("pred_spread", "model_fair_home_spread"),
    model_fair_total=("pred_over_line", "pred_total", "model_fair_total"),
    home_win_prob=("pred_ml_proba", "home_win_prob"),
    home_moneyline=("home_ml", "home_moneyline"),
    away_moneyline=("away_ml", "away_moneyline"),
    derive_away_win_prob=True,
)

SPORTS: Dict[str, SportFieldMap] = {m.name: m for m in (NBA, NCAAB, CFB)}


def get_sport_map(sport: Any) -> SportFieldMap:
    """
    Look up a built-in field map by name.

    Raises:
        ValueError: If the sport is unknown
    """
    if isinstance(sport, SportFieldMap):
        return sport
    key = str(sport).strip().lower()
    if key not in SPORTS:
        raise ValueError(f"Unknown sport '{sport}'. Expected one of: {', '.join(sorted(SPORTS))}")
    return SPORTS[key]
