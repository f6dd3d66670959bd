"""
Game Edge Enrichment.

Merges each scheduled game with its latest model prediction, computes the
three edge observations, and annotates the game with the historical accuracy
of the matching buckets.

Missing inputs are expected (prediction rows lag newly scheduled games, some
sports lack some fields) and never raise. A missing line yields a None bucket
key and a None lookup, never a computed zero, so callers can tell
"we don't know the edge" (MISSING_INPUT) from "we know the edge but have no
history for it" (NO_DATA).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import logging

import pandas as pd

from .accuracy_index import AccuracyIndex, AccuracyStat
from .buckets import (
    EdgeType,
    coerce_number,
    moneyline_bucket,
    ou_bucket,
    ou_diff,
    spread_bucket,
    spread_diff,
)
from .sports import NBA, SportFieldMap, as_records, get_sport_map, id_key, resolve

logger = logging.getLogger(__name__)

Rows = Union[pd.DataFrame, Iterable[Mapping[str, Any]], None]


class EdgeStatus(Enum):
    """Outcome of an accuracy lookup for one edge."""
    MISSING_INPUT = "missing_input"
    NO_DATA = "no_data"
    MATCHED = "matched"


@dataclass(frozen=True)
class EdgeObservation:
    """
    One edge for one game.

    Attributes:
        edge_type: Which edge this is
        raw_diff: Signed disagreement (spread: market - fair,
            total: fair - market, moneyline: None)
        magnitude: Value that was bucketed (|spread diff|, signed total diff,
            favourite's win probability)
        bucket_key: Rounded bucket, None when inputs are missing
    """
    edge_type: EdgeType
    raw_diff: Optional[float]
    magnitude: Optional[float]
    bucket_key: Optional[float]


@dataclass(frozen=True)
class EnrichedGame:
    """A game annotated with edges, bucket accuracy and display picks."""
    game_id: Any
    sport: str
    home_team: str
    away_team: str
    game_date: str
    tipoff_time: Optional[str]

    # Resolved lines
    market_spread: Optional[float]
    market_total: Optional[float]
    model_fair_spread: Optional[float]
    model_fair_total: Optional[float]
    home_win_prob: Optional[float]
    away_win_prob: Optional[float]
    home_moneyline: Optional[float]
    away_moneyline: Optional[float]

    # Edges and lookups
    spread_edge: EdgeObservation
    ou_edge: EdgeObservation
    ml_edge: EdgeObservation
    spread_accuracy: Optional[AccuracyStat]
    ou_accuracy: Optional[AccuracyStat]
    ml_accuracy: Optional[AccuracyStat]

    # Display-only picks
    spread_pick: Optional[str] = None   # "home" / "away"
    ou_pick: Optional[str] = None       # "over" / "under"
    ml_pick_is_home: Optional[bool] = None
    ml_pick_prob_rounded: Optional[float] = None

    has_prediction: bool = field(default=False, compare=False)

    def edge(self, edge_type: EdgeType) -> EdgeObservation:
        return {
            EdgeType.SPREAD_EDGE: self.spread_edge,
            EdgeType.OU_EDGE: self.ou_edge,
            EdgeType.MONEYLINE_PROB: self.ml_edge,
        }[EdgeType(edge_type)]

    def accuracy(self, edge_type: EdgeType) -> Optional[AccuracyStat]:
        return {
            EdgeType.SPREAD_EDGE: self.spread_accuracy,
            EdgeType.OU_EDGE: self.ou_accuracy,
            EdgeType.MONEYLINE_PROB: self.ml_accuracy,
        }[EdgeType(edge_type)]

    def edge_status(self, edge_type: EdgeType) -> EdgeStatus:
        if self.edge(edge_type).bucket_key is None:
            return EdgeStatus.MISSING_INPUT
        if self.accuracy(edge_type) is None:
            return EdgeStatus.NO_DATA
        return EdgeStatus.MATCHED

    def to_dict(self) -> Dict[str, Any]:
        """Flatten for JSON responses."""
        data: Dict[str, Any] = {
            "game_id": self.game_id,
            "sport": self.sport,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "game_date": self.game_date,
            "tipoff_time": self.tipoff_time,
            "market_spread": self.market_spread,
            "market_total": self.market_total,
            "model_fair_spread": self.model_fair_spread,
            "model_fair_total": self.model_fair_total,
            "home_win_prob": self.home_win_prob,
            "away_win_prob": self.away_win_prob,
            "home_moneyline": self.home_moneyline,
            "away_moneyline": self.away_moneyline,
            "home_spread_diff": self.spread_edge.raw_diff,
            "over_line_diff": self.ou_edge.raw_diff,
            "spread_pick": self.spread_pick,
            "ou_pick": self.ou_pick,
            "ml_pick_is_home": self.ml_pick_is_home,
            "ml_pick_prob_rounded": self.ml_pick_prob_rounded,
        }
        for prefix, edge_type in (
            ("spread", EdgeType.SPREAD_EDGE),
            ("ou", EdgeType.OU_EDGE),
            ("ml", EdgeType.MONEYLINE_PROB),
        ):
            stat = self.accuracy(edge_type)
            data[f"{prefix}_bucket_key"] = self.edge(edge_type).bucket_key
            data[f"{prefix}_accuracy_pct"] = stat.accuracy_pct if stat else None
            data[f"{prefix}_bucket_games"] = stat.games if stat else None
            data[f"{prefix}_edge_status"] = self.edge_status(edge_type).value
        return data


def mirror_moneyline(home_moneyline: Optional[float]) -> Optional[float]:
    """
    Derive the away American moneyline from the home line.

    +150 home -> -250 away, -150 home -> +250 away.
    """
    if home_moneyline is None or home_moneyline == 0:
        return None
    if home_moneyline > 0:
        return -(home_moneyline + 100)
    return 100 - home_moneyline


def _side(diff: Optional[float], positive: str, negative: str) -> Optional[str]:
    if diff is None or diff == 0:
        return None
    return positive if diff > 0 else negative


def _text(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def enrich(
    game: Mapping[str, Any],
    latest_prediction: Optional[Mapping[str, Any]],
    index: AccuracyIndex,
    sport: Union[SportFieldMap, str] = NBA,
) -> EnrichedGame:
    """
    Annotate one game with edges and bucket accuracy.

    Args:
        game: Game row from the store
        latest_prediction: Row from the newest prediction run for this game,
            or None when the run does not cover it yet
        index: Accuracy index for the same sport
        sport: Field map (or sport name) used to read both rows

    Returns:
        EnrichedGame
    """
    fields = get_sport_map(sport)
    sources = (latest_prediction, game)

    market_spread = coerce_number(resolve(fields.market_spread, *sources))
    market_total = coerce_number(resolve(fields.market_total, *sources))
    fair_spread = coerce_number(resolve(fields.model_fair_spread, *sources))
    fair_total = coerce_number(resolve(fields.model_fair_total, *sources))
    home_prob = coerce_number(resolve(fields.home_win_prob, *sources))
    away_prob = coerce_number(resolve(fields.away_win_prob, *sources))
    if away_prob is None and home_prob is not None and fields.derive_away_win_prob:
        away_prob = 1.0 - home_prob

    home_ml = coerce_number(resolve(fields.home_moneyline, *sources))
    away_ml = coerce_number(resolve(fields.away_moneyline, *sources))
    if away_ml is None:
        away_ml = mirror_moneyline(home_ml)

    home_spread_diff = spread_diff(fair_spread, market_spread)
    over_line_diff = ou_diff(fair_total, market_total)

    spread_edge = EdgeObservation(
        edge_type=EdgeType.SPREAD_EDGE,
        raw_diff=home_spread_diff,
        magnitude=abs(home_spread_diff) if home_spread_diff is not None else None,
        bucket_key=spread_bucket(fair_spread, market_spread),
    )
    ou_edge = EdgeObservation(
        edge_type=EdgeType.OU_EDGE,
        raw_diff=over_line_diff,
        magnitude=over_line_diff,
        bucket_key=ou_bucket(fair_total, market_total),
    )
    ml_key = moneyline_bucket(home_prob, away_prob)
    ml_edge = EdgeObservation(
        edge_type=EdgeType.MONEYLINE_PROB,
        raw_diff=None,
        magnitude=max(home_prob or 0.0, away_prob or 0.0) if ml_key is not None else None,
        bucket_key=ml_key,
    )

    ml_pick_is_home = None
    if home_prob is not None and away_prob is not None:
        ml_pick_is_home = home_prob >= away_prob

    game_id = resolve(fields.game_id, game, latest_prediction)
    return EnrichedGame(
        game_id=game_id,
        sport=fields.name,
        home_team=_text(resolve(fields.home_team, game, latest_prediction)),
        away_team=_text(resolve(fields.away_team, game, latest_prediction)),
        game_date=_text(resolve(fields.game_date, game, latest_prediction)),
        tipoff_time=_text(resolve(fields.tipoff_time, game, latest_prediction)) or None,
        market_spread=market_spread,
        market_total=market_total,
        model_fair_spread=fair_spread,
        model_fair_total=fair_total,
        home_win_prob=home_prob,
        away_win_prob=away_prob,
        home_moneyline=home_ml,
        away_moneyline=away_ml,
        spread_edge=spread_edge,
        ou_edge=ou_edge,
        ml_edge=ml_edge,
        spread_accuracy=index.lookup(EdgeType.SPREAD_EDGE, spread_edge.bucket_key),
        ou_accuracy=index.lookup(EdgeType.OU_EDGE, ou_edge.bucket_key),
        ml_accuracy=index.lookup(EdgeType.MONEYLINE_PROB, ml_key),
        spread_pick=_side(home_spread_diff, "home", "away"),
        ou_pick=_side(over_line_diff, "over", "under"),
        ml_pick_is_home=ml_pick_is_home,
        ml_pick_prob_rounded=ml_key,
        has_prediction=latest_prediction is not None,
    )


def enrich_slate(
    games: Rows,
    predictions: Rows,
    index: AccuracyIndex,
    sport: Union[SportFieldMap, str] = NBA,
) -> List[EnrichedGame]:
    """
    Enrich every game of a slate.

    Args:
        games: Game rows (iterable of mappings or DataFrame)
        predictions: Rows of the latest prediction run, matched to games by id
        index: Accuracy index for this sport
        sport: Field map or sport name

    Returns:
        Enriched games in input order
    """
    fields = get_sport_map(sport)
    by_game: Dict[Any, Mapping[str, Any]] = {}
    for pred in as_records(predictions):
        key = id_key(resolve(fields.game_id, pred))
        if key is not None:
            by_game[key] = pred

    enriched = []
    missing = 0
    for game in as_records(games):
        pred = by_game.get(id_key(resolve(fields.game_id, game)))
        if pred is None:
            missing += 1
        enriched.append(enrich(game, pred, index, fields))

    if missing:
        logger.info(f"{fields.name}: {missing} of {len(enriched)} game(s) have no prediction in the latest run")
    return enriched
