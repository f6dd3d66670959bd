"""
Weighted Model Consensus.

Combines independent model predictions for one matchup and target
(moneyline, spread cover or over/under) into a single call:

    - primary/opponent percentage: mean of each model's probabilities
    - confidence: model agreement, 100 - 200 * std(win_pct), clamped to [0, 100]
    - predicted side: whichever percentage is higher (ties go to primary)

Weighting:
    - "equal": every model counts once (default)
    - "games": each model weighted by the sample size it was fit on

A consensus over zero models is meaningless, so aggregate([]) raises
InsufficientDataError instead of returning a zero-confidence result.

Example:
    >>> preds = [ModelPrediction("a", 0.62), ModelPrediction("b", 0.58)]
    >>> result = aggregate(preds)
    >>> round(result.primary_percentage, 2)
    0.6
    >>> result.predicted_side
    <ConsensusSide.PRIMARY: 'primary'>
"""

from collections import defaultdict
from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import logging

import numpy as np

from ..core.config import settings
from ..edges.buckets import coerce_number
from ..edges.sports import is_missing

logger = logging.getLogger(__name__)

# Largest possible population std of values in [0, 1]
MAX_PROB_STD = 0.5

WEIGHTING_MODES = ("equal", "games")


class InsufficientDataError(ValueError):
    """Raised when a consensus is requested over zero models."""


class ConsensusSide(Enum):
    PRIMARY = "primary"
    OPPONENT = "opponent"


class ConsensusTarget(Enum):
    """Bet targets a consensus can be computed for."""
    MONEYLINE = "moneyline"
    SPREAD = "spread"
    OVER_UNDER = "over_under"


_TARGET_ALIASES = {
    "primary_win": ConsensusTarget.MONEYLINE,
    "moneyline": ConsensusTarget.MONEYLINE,
    "ml": ConsensusTarget.MONEYLINE,
    "primary_runline_win": ConsensusTarget.SPREAD,
    "runline": ConsensusTarget.SPREAD,
    "spread": ConsensusTarget.SPREAD,
    "spread_cover": ConsensusTarget.SPREAD,
    "ou_result": ConsensusTarget.OVER_UNDER,
    "over_under": ConsensusTarget.OVER_UNDER,
    "total": ConsensusTarget.OVER_UNDER,
    "ou": ConsensusTarget.OVER_UNDER,
}


def normalize_target(target: Any) -> ConsensusTarget:
    """
    Map a store target name to a ConsensusTarget.

    Raises:
        ValueError: If the target is not recognised
    """
    if isinstance(target, ConsensusTarget):
        return target
    key = str(target).strip().lower()
    if key not in _TARGET_ALIASES:
        raise ValueError(f"Unknown consensus target '{target}'")
    return _TARGET_ALIASES[key]


@dataclass(frozen=True)
class ModelPrediction:
    """
    One model's output for one game and target.

    Attributes:
        model_name: Display name of the model
        win_pct: Probability the primary side wins/covers/goes over [0, 1]
        opponent_win_pct: Probability for the other side; defaults to
            1 - win_pct when the source does not report it
        games: Sample size behind the model
        confidence: Model's own confidence on a 0-100 scale, if reported
        primary_team: Team win_pct refers to, if known
        opponent_team: Other team, if known
        target: Store target name (e.g. "primary_win"), if known
    """
    model_name: str
    win_pct: float
    opponent_win_pct: Optional[float] = None
    games: int = 0
    confidence: Optional[float] = None
    primary_team: Optional[str] = None
    opponent_team: Optional[str] = None
    target: Optional[str] = None

    def __post_init__(self):
        """Validate inputs."""
        if not 0.0 <= self.win_pct <= 1.0:
            raise ValueError(f"win_pct must be in [0, 1], got {self.win_pct}")
        if self.opponent_win_pct is None:
            object.__setattr__(self, "opponent_win_pct", 1.0 - self.win_pct)
        elif not 0.0 <= self.opponent_win_pct <= 1.0:
            raise ValueError(f"opponent_win_pct must be in [0, 1], got {self.opponent_win_pct}")
        if self.games < 0:
            raise ValueError(f"games must be >= 0, got {self.games}")
        if self.confidence is not None and not 0.0 <= self.confidence <= 100.0:
            raise ValueError(f"confidence must be in [0, 100], got {self.confidence}")

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any], index: int = 0) -> "ModelPrediction":
        """
        Build from a store/request row; unnamed models get 'Model #n'.

        NaN cells (pandas-sourced rows) count as missing.

        Raises:
            ValueError: If win_pct is missing or not numeric
        """
        win_pct = coerce_number(row.get("win_pct"))
        if win_pct is None:
            raise ValueError(f"win_pct must be a number, got {row.get('win_pct')!r}")
        games = coerce_number(row.get("games"))

        def text(key: str) -> Optional[str]:
            value = row.get(key)
            return None if is_missing(value) else value

        return cls(
            model_name=text("model_name") or f"Model #{index + 1}",
            win_pct=win_pct,
            opponent_win_pct=coerce_number(row.get("opponent_win_pct")),
            games=int(games) if games is not None else 0,
            confidence=coerce_number(row.get("confidence")),
            primary_team=text("primary_team"),
            opponent_team=text("opponent_team"),
            target=text("target"),
        )

    def flipped(self) -> "ModelPrediction":
        """Same prediction seen from the opponent's side."""
        return replace(
            self,
            win_pct=self.opponent_win_pct,
            opponent_win_pct=self.win_pct,
            primary_team=self.opponent_team,
            opponent_team=self.primary_team,
        )


@dataclass(frozen=True)
class ConsensusResult:
    """Consensus over a set of model predictions."""
    primary_percentage: float
    opponent_percentage: float
    confidence: float
    models: int
    predicted_side: ConsensusSide
    weighting: str = "equal"
    primary_team: Optional[str] = None
    opponent_team: Optional[str] = None

    @property
    def predicted_team(self) -> Optional[str]:
        if self.predicted_side is ConsensusSide.PRIMARY:
            return self.primary_team
        return self.opponent_team

    @property
    def predicted_percentage(self) -> float:
        return max(self.primary_percentage, self.opponent_percentage)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["predicted_side"] = self.predicted_side.value
        data["predicted_team"] = self.predicted_team
        return data


def _orient(predictions: Sequence[ModelPrediction]) -> List[ModelPrediction]:
    """Flip predictions stated from the other team's side onto the first one's."""
    reference = predictions[0]
    if reference.primary_team is None or reference.opponent_team is None:
        return list(predictions)

    oriented = []
    for pred in predictions:
        if (
            pred.primary_team == reference.opponent_team
            and pred.opponent_team in (None, reference.primary_team)
        ):
            oriented.append(pred.flipped())
        else:
            oriented.append(pred)
    return oriented


def agreement_confidence(win_pcts: Sequence[float]) -> float:
    """Agreement score 0-100 from the spread of model probabilities."""
    std = float(np.std(win_pcts))
    return float(np.clip(100.0 * (1.0 - std / MAX_PROB_STD), 0.0, 100.0))


def aggregate(
    predictions: Iterable[ModelPrediction],
    weighting: Optional[str] = None,
) -> ConsensusResult:
    """
    Combine model predictions into a consensus.

    Args:
        predictions: ModelPrediction objects for one game/target
        weighting: "equal" or "games" (default: settings.CONSENSUS_WEIGHTING)

    Returns:
        ConsensusResult

    Raises:
        InsufficientDataError: If no predictions are given
        ValueError: If the weighting mode is unknown
    """
    preds = list(predictions)
    if not preds:
        raise InsufficientDataError("Cannot compute a consensus over zero models")

    weighting = weighting or settings.CONSENSUS_WEIGHTING
    if weighting not in WEIGHTING_MODES:
        raise ValueError(f"Unknown weighting '{weighting}'. Expected one of: {', '.join(WEIGHTING_MODES)}")

    preds = _orient(preds)
    win = np.array([p.win_pct for p in preds], dtype=float)
    opp = np.array([p.opponent_win_pct for p in preds], dtype=float)

    weights = None
    if weighting == "games":
        games = np.array([p.games for p in preds], dtype=float)
        if games.sum() > 0:
            weights = games
        else:
            logger.warning("Sample-size weighting requested but no model reports games; using equal weights")

    primary = float(np.average(win, weights=weights))
    opponent = float(np.average(opp, weights=weights))

    if len(preds) == 1:
        own = preds[0].confidence
        confidence = own if own is not None else settings.SINGLE_MODEL_CONFIDENCE
    else:
        confidence = agreement_confidence(win)

    side = ConsensusSide.PRIMARY if primary >= opponent else ConsensusSide.OPPONENT

    return ConsensusResult(
        primary_percentage=primary,
        opponent_percentage=opponent,
        confidence=float(confidence),
        models=len(preds),
        predicted_side=side,
        weighting=weighting,
        primary_team=preds[0].primary_team,
        opponent_team=preds[0].opponent_team,
    )


def group_by_target(
    predictions: Iterable[ModelPrediction]
) -> Dict[ConsensusTarget, List[ModelPrediction]]:
    """Group predictions by normalised target; untargeted ones are skipped."""
    groups: Dict[ConsensusTarget, List[ModelPrediction]] = defaultdict(list)
    skipped = 0
    for pred in predictions:
        if pred.target is None:
            skipped += 1
            continue
        groups[normalize_target(pred.target)].append(pred)
    if skipped:
        logger.debug(f"Skipped {skipped} prediction(s) without a target")
    return dict(groups)


def aggregate_by_target(
    predictions: Iterable[ModelPrediction],
    weighting: Optional[str] = None,
) -> Dict[ConsensusTarget, ConsensusResult]:
    """Consensus per target; targets without models are omitted."""
    return {
        target: aggregate(group, weighting=weighting)
        for target, group in group_by_target(predictions).items()
    }
