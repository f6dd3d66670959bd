"""Weighted model consensus calculator."""

from .aggregator import (
    ModelPrediction,
    ConsensusResult,
    ConsensusSide,
    ConsensusTarget,
    InsufficientDataError,
    aggregate,
    aggregate_by_target,
    agreement_confidence,
    group_by_target,
    normalize_target,
)

__all__ = [
    "ModelPrediction",
    "ConsensusResult",
    "ConsensusSide",
    "ConsensusTarget",
    "InsufficientDataError",
    "aggregate",
    "aggregate_by_target",
    "agreement_confidence",
    "group_by_target",
    "normalize_target",
]
